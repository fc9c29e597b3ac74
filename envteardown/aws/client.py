"""boto3 client factory."""

from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig

# Adaptive retries cover API throttling; deletion retries are handled by the deleter
_BOTO_CONFIG = BotoConfig(retries={"max_attempts": 5, "mode": "adaptive"})


def create_boto_session(profile_name: Optional[str] = None, region_name: Optional[str] = None) -> boto3.Session:
    """Create a boto3 session for the given profile and region."""
    return boto3.Session(profile_name=profile_name, region_name=region_name)


def create_boto_client(
    service_name: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
) -> Any:
    """Create a boto3 client.

    Args:
        service_name: AWS service name (e.g., "ec2", "ssm")
        region_name: AWS region (optional, falls back to the profile default)
        profile_name: AWS profile name (optional)

    Returns:
        boto3 client for the service
    """
    session = create_boto_session(profile_name=profile_name, region_name=region_name)
    return session.client(service_name, config=_BOTO_CONFIG)
