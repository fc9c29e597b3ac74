"""Per-resource deletion calls.

Maps resource kinds to their provider calls with proper error handling and
retry logic.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from envteardown.aws.provider import Ec2Provider
from envteardown.models.resources import ResourceKind

logger = logging.getLogger(__name__)

# Resource already gone; counts as a successful delete
NOT_FOUND_CODES = {
    "InvalidInstanceID.NotFound",
    "InvalidVolume.NotFound",
    "InvalidAllocationID.NotFound",
}

# Transient conflicts worth retrying
RETRYABLE_CODES = {"IncorrectState", "VolumeInUse", "InvalidIPAddress.InUse"}


class ResourceDeleter:
    """Issues the mutating call for a single resource.

    Never raises for provider errors; returns (success, error) so callers can
    keep going with the rest of the batch.

    Attributes:
        provider: EC2 provider
        max_retries: Attempts for retryable errors
    """

    def __init__(self, provider: Ec2Provider, max_retries: int = 3) -> None:
        self.provider = provider
        self.max_retries = max_retries

    def _method_for(self, kind: ResourceKind) -> Callable[[str], None]:
        methods = {
            ResourceKind.INSTANCE: self.provider.delete_instance,
            ResourceKind.VOLUME: self.provider.delete_volume,
            ResourceKind.FLOATING_IP: self.provider.release_floating_ip,
        }
        if kind not in methods:
            raise ValueError(f"Unsupported resource kind: {kind.value}")
        return methods[kind]

    def delete(self, kind: ResourceKind, resource_id: str) -> tuple[bool, Optional[str], Optional[str]]:
        """Delete a resource.

        Args:
            kind: Resource kind
            resource_id: Resource identifier

        Returns:
            Tuple of (success, error_code, error_message)
        """
        method = self._method_for(kind)

        for attempt in range(self.max_retries):
            try:
                method(resource_id)
                logger.info(f"Deletion requested for {kind.value} {resource_id}")
                return (True, None, None)

            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                error_message = e.response.get("Error", {}).get("Message", str(e))

                if error_code in NOT_FOUND_CODES:
                    logger.info(f"{kind.value} {resource_id} already deleted")
                    return (True, None, None)

                if error_code in RETRYABLE_CODES and attempt < self.max_retries - 1:
                    wait_time = 2**attempt
                    logger.debug(
                        f"{error_code} for {resource_id}, "
                        f"retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                    continue

                logger.error(f"Failed to delete {kind.value} {resource_id}: {error_code} - {error_message}")
                return (False, error_code, error_message)

            except BotoCoreError as e:
                logger.error(f"Failed to delete {kind.value} {resource_id}: {e}")
                return (False, "BotoCoreError", str(e))

            except Exception as e:
                error_msg = f"Unexpected error deleting {kind.value} {resource_id}: {str(e)}"
                logger.error(error_msg)
                return (False, "UnexpectedError", error_msg)

        error_msg = f"Failed to delete {kind.value} {resource_id} after {self.max_retries} attempts"
        logger.error(error_msg)
        return (False, "RetriesExhausted", error_msg)
