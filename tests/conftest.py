"""Shared fixtures for aws-login tests."""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import pytest

from aws_login.config import AccountDirectory

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class MemoryStorage:
    """In-memory stand-in for FileStorage."""

    def __init__(self):
        self.records: Dict[str, str] = {}
        self.fail_writes = False

    def read(self, key: str) -> Optional[str]:
        return self.records.get(key)

    def write(self, key: str, text: str) -> None:
        if self.fail_writes:
            raise PermissionError(13, "Permission denied", key)
        self.records[key] = text


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def directory():
    return AccountDirectory.from_yaml(
        """
accounts:
  123456789012:
    role-arn: arn:aws:iam::123456789012:role/Example
  210987654321:
    role-arn: arn:aws:iam::210987654321:role/Admin
    serial-number: arn:aws:iam::111111111111:mfa/jane
    duration-seconds: 7200
  999999999999:
    serial-number: arn:aws:iam::111111111111:mfa/jane
aliases:
  example: 123456789012
  admin: "210987654321"
  prod: 999999999999
"""
    )


def _sts_credentials(expires_at: datetime, suffix: str = "1") -> dict:
    return {
        "AccessKeyId": f"ASIAEXAMPLE{suffix}",
        "SecretAccessKey": f"secret{suffix}",
        "SessionToken": f"token{suffix}",
        "Expiration": expires_at,
    }


@pytest.fixture
def sts_credentials():
    """Factory for STS Credentials blocks as returned by boto3."""
    return _sts_credentials
