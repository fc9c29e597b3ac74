"""Test fixtures for creating mock EC2 records and clients."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from unittest.mock import Mock

from botocore.exceptions import ClientError


def create_instance_record(
    instance_id: str,
    name: str = "",
    image_id: str = "ami-0000000a",
    state: str = "running",
    public_ip: Optional[str] = None,
    private_ip: Optional[str] = "10.0.0.10",
    tags: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Create a describe_instances instance record.

    Args:
        instance_id: Instance ID
        name: Name tag value (omitted when empty)
        image_id: AMI ID
        state: Instance state name
        public_ip: Public IP address (optional)
        private_ip: Private IP address
        tags: Extra tags

    Returns:
        Instance record as returned by boto3
    """
    all_tags = dict(tags or {})
    if name:
        all_tags["Name"] = name

    record: Dict[str, Any] = {
        "InstanceId": instance_id,
        "ImageId": image_id,
        "State": {"Code": 16, "Name": state},
        "PrivateIpAddress": private_ip,
        "Tags": [{"Key": k, "Value": v} for k, v in all_tags.items()],
    }
    if public_ip:
        record["PublicIpAddress"] = public_ip
    return record


def create_volume_record(volume_id: str, instance_id: Optional[str] = None, state: str = "in-use") -> Dict[str, Any]:
    """Create a describe_volumes volume record."""
    attachments = []
    if instance_id:
        attachments.append({"InstanceId": instance_id, "VolumeId": volume_id, "State": "attached"})
    return {"VolumeId": volume_id, "State": state, "Attachments": attachments}


def create_address_record(
    allocation_id: str,
    public_ip: str,
    instance_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a describe_addresses Elastic IP record."""
    record: Dict[str, Any] = {"AllocationId": allocation_id, "PublicIp": public_ip, "Domain": "vpc"}
    if instance_id:
        record["InstanceId"] = instance_id
    return record


def client_error(code: str, operation: str = "Operation", message: str = "") -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


def create_mock_ec2_client(
    instances: Optional[List[Dict[str, Any]]] = None,
    volumes: Optional[List[Dict[str, Any]]] = None,
    addresses: Optional[List[Dict[str, Any]]] = None,
    platforms: Optional[List[str]] = None,
) -> Mock:
    """Create a mock EC2 client serving the given records.

    Instances are split over two describe_instances pages to exercise
    pagination. volume states for describe_volumes(VolumeIds=...) are served
    from the volume records.
    """
    instances = instances or []
    volumes = volumes or []
    platforms = ["VPC"] if platforms is None else platforms

    half = len(instances) // 2
    instance_pages = [
        {"Reservations": [{"Instances": instances[:half]}]},
        {"Reservations": [{"Instances": instances[half:]}]},
    ]
    volume_pages = [{"Volumes": volumes}]

    def get_paginator(method: str) -> Mock:
        paginator = Mock()
        if method == "describe_instances":
            paginator.paginate.return_value = instance_pages
        elif method == "describe_volumes":
            paginator.paginate.return_value = volume_pages
        else:
            raise ValueError(method)
        return paginator

    def describe_volumes(VolumeIds: List[str]) -> Dict[str, Any]:
        return {"Volumes": [v for v in volumes if v["VolumeId"] in VolumeIds]}

    client = Mock()
    client.get_paginator.side_effect = get_paginator
    client.describe_volumes.side_effect = describe_volumes
    client.describe_addresses.return_value = {"Addresses": addresses or []}
    client.describe_account_attributes.return_value = {
        "AccountAttributes": [
            {
                "AttributeName": "supported-platforms",
                "AttributeValues": [{"AttributeValue": p} for p in platforms],
            }
        ]
    }
    return client


def create_mock_sts_client(account_id: str = "123456789012") -> Mock:
    """Create a mock STS client returning a fixed identity."""
    client = Mock()
    client.get_caller_identity.return_value = {
        "Account": account_id,
        "Arn": f"arn:aws:iam::{account_id}:user/operator",
        "UserId": "AIDATEST",
    }
    return client


def detach_on_terminate(client: Mock, volumes: List[Dict[str, Any]]) -> Mock:
    """Make terminate_instances detach the volumes of the terminated instances."""

    def terminate_instances(InstanceIds: List[str]) -> Dict[str, Any]:
        for volume in volumes:
            if any(a["InstanceId"] in InstanceIds for a in volume["Attachments"]):
                volume["State"] = "available"
        return {"TerminatingInstances": [{"InstanceId": i} for i in InstanceIds]}

    client.terminate_instances.side_effect = terminate_instances
    return client
