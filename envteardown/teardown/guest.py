"""Best-effort guest deregistration through SSM Run Command."""

from __future__ import annotations

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from envteardown.aws.client import create_boto_client
from envteardown.models.resources import Instance

logger = logging.getLogger(__name__)

DEFAULT_GUEST_COMMAND = "subscription-manager unregister"


class GuestDeregistrar:
    """Runs a deregistration command on an instance before it is terminated.

    Failures are logged and reported as False; they never raise.

    Attributes:
        command: Shell command to run on the guest
    """

    def __init__(
        self,
        ssm_client: Any = None,
        command: str = DEFAULT_GUEST_COMMAND,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
    ) -> None:
        self.command = command
        self.region = region
        self.aws_profile = aws_profile
        self._ssm = ssm_client

    @property
    def ssm(self) -> Any:
        if self._ssm is None:
            self._ssm = create_boto_client("ssm", region_name=self.region, profile_name=self.aws_profile)
        return self._ssm

    def deregister(self, instance: Instance) -> bool:
        """Send the deregistration command to one instance.

        Args:
            instance: Instance to deregister

        Returns:
            True if the command was accepted, False otherwise
        """
        try:
            response = self.ssm.send_command(
                InstanceIds=[instance.instance_id],
                DocumentName="AWS-RunShellScript",
                Comment="envteardown guest deregistration",
                Parameters={"commands": [f"sudo {self.command} || true"]},
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Guest deregistration failed for {instance.instance_id}: {e}")
            return False
        except Exception as e:
            logger.warning(f"Unexpected error deregistering {instance.instance_id}: {str(e)}")
            return False

        command_id = response.get("Command", {}).get("CommandId", "unknown")
        logger.info(f"Sent deregistration to {instance.instance_id} ({instance.public_ip}), command {command_id}")
        return True
