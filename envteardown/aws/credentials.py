"""Credential and account identity validation."""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from envteardown.aws.client import create_boto_client

logger = logging.getLogger(__name__)


class CredentialValidationError(Exception):
    """Raised when AWS credentials are missing, invalid or for the wrong account."""


def validate_credentials(
    aws_profile: Optional[str] = None,
    region: Optional[str] = None,
    expected_account_id: Optional[str] = None,
    sts_client=None,
) -> dict[str, str]:
    """Validate AWS credentials by calling STS GetCallerIdentity.

    Args:
        aws_profile: AWS profile name (optional)
        region: AWS region (optional)
        expected_account_id: Refuse to continue if the caller is in another account
        sts_client: Pre-built STS client (optional, mainly for tests)

    Returns:
        Dictionary with account_id, arn and user_id

    Raises:
        CredentialValidationError: If the call fails or the account does not match
    """
    client = sts_client or create_boto_client("sts", region_name=region, profile_name=aws_profile)

    try:
        response = client.get_caller_identity()
    except (ClientError, BotoCoreError) as e:
        raise CredentialValidationError(f"Unable to validate AWS credentials: {e}") from e

    identity = {
        "account_id": response.get("Account", ""),
        "arn": response.get("Arn", ""),
        "user_id": response.get("UserId", ""),
    }
    logger.debug(f"Caller identity: {identity['arn']}")

    if expected_account_id and identity["account_id"] != expected_account_id:
        raise CredentialValidationError(
            f"Expected account {expected_account_id}, credentials are for {identity['account_id']}"
        )

    return identity
