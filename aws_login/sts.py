"""
STS role assumption and MFA token input.

These are the external capabilities the credential broker calls on a
cache miss: a boto3-backed AssumeRole and a blocking read of one MFA
token line from the terminal.
"""

import sys
from typing import Any, Dict, Optional, TextIO

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import MFAReadError, create_assume_role_error
from .utils import get_logger

logger = get_logger(__name__)

MFA_PROMPT = "Enter MFA Token:"


class StsRoleAssumer:
    """Calls STS AssumeRole using the caller's long-term credentials."""

    def __init__(
        self, profile_name: Optional[str] = None, region_name: Optional[str] = None
    ):
        self.profile_name = profile_name
        self.region_name = region_name
        self._sts_client = None

    def _get_sts_client(self) -> Any:
        """
        Get the STS client, creating it lazily when first needed.

        Returns:
            boto3.client: STS client
        """
        if self._sts_client is None:
            if self.profile_name:
                session = boto3.Session(profile_name=self.profile_name)
                self._sts_client = session.client("sts", region_name=self.region_name)
            else:
                self._sts_client = boto3.client("sts", region_name=self.region_name)
            logger.debug("STS client created successfully")

        return self._sts_client

    def __call__(
        self,
        role_arn: str,
        session_name: str,
        duration_seconds: int,
        serial_number: Optional[str] = None,
        token_code: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Assume an IAM role and return the STS Credentials block.

        Args:
            role_arn: ARN of the role to assume
            session_name: Role session name
            duration_seconds: Requested session length
            serial_number: MFA device serial, sent only together with token_code
            token_code: One-time MFA code

        Returns:
            Dict with AccessKeyId, SecretAccessKey, SessionToken and Expiration

        Raises:
            AssumeRoleError: If STS rejects the request or cannot be reached
        """
        params = {
            "RoleArn": role_arn,
            "RoleSessionName": session_name,
            "DurationSeconds": duration_seconds,
        }
        if serial_number:
            params["SerialNumber"] = serial_number
            params["TokenCode"] = token_code

        logger.info(f"Assuming role: {role_arn} with session: {session_name}")

        try:
            response = self._get_sts_client().assume_role(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to assume role {role_arn}: {e}")
            raise create_assume_role_error(e, role_arn) from e

        logger.info(f"Successfully assumed role {role_arn}")
        return response["Credentials"]


def read_mfa_token(
    stdin: Optional[TextIO] = None, stderr: Optional[TextIO] = None
) -> str:
    """
    Prompt on stderr and read one MFA token line from stdin.

    Raises:
        MFAReadError: If the line cannot be read or input ends first
    """
    stdin = stdin or sys.stdin
    stderr = stderr or sys.stderr

    try:
        print(MFA_PROMPT, file=stderr, flush=True)
        line = stdin.readline()
    except (OSError, ValueError) as e:
        raise MFAReadError(str(e), e) from e

    if not line:
        raise MFAReadError("end of input")
    return line.rstrip("\r\n")
