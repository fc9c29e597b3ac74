"""EC2 provider interface.

Read-only listings return raw boto3 records; mutating calls raise ClientError
and are wrapped by the deleter. Discovery turns the records into typed
resources.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from botocore.exceptions import BotoCoreError, ClientError

from envteardown.aws.client import create_boto_client
from envteardown.aws.credentials import CredentialValidationError, validate_credentials
from envteardown.errors import DiscoveryError

logger = logging.getLogger(__name__)


class Ec2Provider:
    """Thin wrapper over the EC2 API used by discovery and teardown.

    Attributes:
        ec2: boto3 EC2 client
        sts: boto3 STS client used for the connectivity check
        expected_account_id: Account the credentials must belong to (optional)
    """

    def __init__(
        self,
        ec2_client: Any = None,
        sts_client: Any = None,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
        expected_account_id: Optional[str] = None,
    ) -> None:
        self.region = region
        self.aws_profile = aws_profile
        self.expected_account_id = expected_account_id
        self._ec2 = ec2_client
        self._sts = sts_client

    @property
    def ec2(self) -> Any:
        if self._ec2 is None:
            self._ec2 = create_boto_client("ec2", region_name=self.region, profile_name=self.aws_profile)
        return self._ec2

    @property
    def sts(self) -> Any:
        if self._sts is None:
            self._sts = create_boto_client("sts", region_name=self.region, profile_name=self.aws_profile)
        return self._sts

    def check_connectivity(self) -> dict[str, str]:
        """Verify the provider is reachable with the configured credentials.

        Raises:
            DiscoveryError: If the identity call fails or the account does not match
        """
        try:
            identity = validate_credentials(
                aws_profile=self.aws_profile,
                region=self.region,
                expected_account_id=self.expected_account_id,
                sts_client=self.sts,
            )
        except CredentialValidationError as e:
            raise DiscoveryError(str(e)) from e
        except BotoCoreError as e:
            raise DiscoveryError(f"Unable to create AWS client: {e}") from e

        logger.info(f"Connected to account {identity['account_id']} as {identity['arn']}")
        return identity

    def _paginate(self, method: str, result_key: str, **kwargs: Any) -> Iterator[dict]:
        try:
            paginator = self.ec2.get_paginator(method)
            for page in paginator.paginate(**kwargs):
                yield from page.get(result_key, [])
        except (ClientError, BotoCoreError) as e:
            raise DiscoveryError(f"EC2 {method} failed: {e}") from e

    def list_instances(self) -> list[dict]:
        """List every instance in the region, in API order."""
        instances = []
        for reservation in self._paginate("describe_instances", "Reservations"):
            instances.extend(reservation.get("Instances", []))
        return instances

    def list_volumes(self) -> list[dict]:
        """List every EBS volume in the region, with attachments."""
        return list(self._paginate("describe_volumes", "Volumes"))

    def list_floating_ips(self) -> list[dict]:
        """List Elastic IP addresses allocated in the VPC domain."""
        try:
            response = self.ec2.describe_addresses(Filters=[{"Name": "domain", "Values": ["vpc"]}])
        except (ClientError, BotoCoreError) as e:
            raise DiscoveryError(f"EC2 describe_addresses failed: {e}") from e
        return response.get("Addresses", [])

    def probe_networking(self) -> bool:
        """Check whether the account supports VPC networking.

        A failed probe is not an error: the account is treated as legacy
        networking and floating IPs are skipped.
        """
        try:
            response = self.ec2.describe_account_attributes(AttributeNames=["supported-platforms"])
        except (ClientError, BotoCoreError) as e:
            logger.info(f"Networking probe failed, assuming legacy networking: {e}")
            return False

        platforms = set()
        for attribute in response.get("AccountAttributes", []):
            if attribute.get("AttributeName") != "supported-platforms":
                continue
            for value in attribute.get("AttributeValues", []):
                platforms.add(value.get("AttributeValue"))

        return "VPC" in platforms

    def get_volume_state(self, volume_id: str) -> Optional[str]:
        """Return the current state of a volume, or None if it no longer exists."""
        try:
            response = self.ec2.describe_volumes(VolumeIds=[volume_id])
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "InvalidVolume.NotFound":
                return None
            raise

        volumes = response.get("Volumes", [])
        if not volumes:
            return None
        return volumes[0].get("State")

    def delete_instance(self, instance_id: str) -> None:
        self.ec2.terminate_instances(InstanceIds=[instance_id])

    def delete_volume(self, volume_id: str) -> None:
        self.ec2.delete_volume(VolumeId=volume_id)

    def release_floating_ip(self, allocation_id: str) -> None:
        self.ec2.release_address(AllocationId=allocation_id)
