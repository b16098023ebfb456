"""
AWS Login Configuration Module.

Provides the environment-derived settings for aws-login and the account
directory: a YAML document mapping account IDs to role configuration and
aliases to account IDs.

Example document::

    accounts:
      "123456789012":
        role-arn: arn:aws:iam::123456789012:role/Admin
        serial-number: arn:aws:iam::210987654321:mfa/jane
        duration-seconds: 7200
    aliases:
      prod: "123456789012"
"""

import os
import re
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import (
    ConfigMalformedError,
    ConfigUnreadableError,
    MalformedDurationError,
    MissingRoleArnError,
    UnknownAccountError,
    UnknownAliasError,
)
from .utils import get_logger

logger = get_logger(__name__)

ACCOUNT_ID_PATTERN = re.compile(r"^[0-9]{12}$")
DURATION_PATTERN = re.compile(r"^[0-9]+$")
CONFIG_FILE_NAME = "aws-login.yaml"


class LoginSettings(BaseModel):
    """Locations and AWS session settings for aws-login."""

    config_dir: str = Field(..., description="Base directory for config and cache")
    cache_directory: str = Field(..., description="Directory holding cached credentials")
    config_file: str = Field(..., description="Path of the account configuration file")
    default_profile: Optional[str] = Field(
        None, description="Profile whose credentials call STS"
    )
    default_region: Optional[str] = Field(None, description="Region for the STS client")

    @classmethod
    def from_env(
        cls,
        cache_directory: Optional[str] = None,
        config_file: Optional[str] = None,
    ) -> "LoginSettings":
        """
        Create settings from environment variables and command-line overrides.

        Environment variables:
        - AWS_CONFIG_DIR: Base directory (default: ~/.aws)
        - AWS_PROFILE: Profile used for the STS client
        - AWS_REGION / AWS_DEFAULT_REGION: Region used for the STS client

        Args:
            cache_directory: Override for the cache directory
            config_file: Override for the account configuration file

        Returns:
            LoginSettings: Settings instance
        """
        config_dir = os.getenv("AWS_CONFIG_DIR") or os.path.join(
            os.path.expanduser("~"), ".aws"
        )

        return cls(
            config_dir=config_dir,
            cache_directory=cache_directory or config_dir,
            config_file=config_file or os.path.join(config_dir, CONFIG_FILE_NAME),
            default_profile=os.getenv("AWS_PROFILE") or None,
            default_region=os.getenv("AWS_REGION")
            or os.getenv("AWS_DEFAULT_REGION")
            or None,
        )


class AccountConfig(BaseModel):
    """Role configuration for a single account ID."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    role_arn: Optional[str] = Field(None, alias="role-arn")
    serial_number: Optional[str] = Field(None, alias="serial-number")
    duration_seconds: Optional[Any] = Field(None, alias="duration-seconds")


class AccountDocument(BaseModel):
    """Top-level structure of the account configuration file."""

    accounts: Dict[str, AccountConfig] = Field(default_factory=dict)
    aliases: Dict[str, str] = Field(default_factory=dict)

    @field_validator("accounts", mode="before")
    @classmethod
    def normalize_accounts(cls, v):
        """Accept unquoted account IDs and empty account entries."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("accounts must be a mapping")
        return {str(key): value or {} for key, value in v.items()}

    @field_validator("aliases", mode="before")
    @classmethod
    def normalize_aliases(cls, v):
        """Accept unquoted account IDs as alias targets."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("aliases must be a mapping")
        for key, value in v.items():
            if isinstance(value, bool) or not isinstance(value, (str, int)):
                raise ValueError(f"alias {key} must name an account ID")
        return {str(key): str(value) for key, value in v.items()}


class AccountDirectory:
    """
    Read-only lookup of account aliases and per-account role configuration.

    The directory is loaded once and never changes afterwards. Optional
    fields are reported through a present flag instead of an error.
    """

    def __init__(
        self,
        accounts: Optional[Dict[str, AccountConfig]] = None,
        aliases: Optional[Dict[str, str]] = None,
    ):
        self._accounts = dict(accounts or {})
        self._aliases = dict(aliases or {})

    @classmethod
    def from_file(cls, path: str) -> "AccountDirectory":
        """
        Load the account directory from a YAML file.

        Args:
            path: Path of the configuration file

        Returns:
            AccountDirectory: Loaded directory

        Raises:
            ConfigUnreadableError: If the file is missing or unreadable
            ConfigMalformedError: If the file is not a valid account document
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ConfigUnreadableError(path, e) from e

        return cls.from_yaml(text, path)

    @classmethod
    def from_yaml(cls, text: str, path: str = "<string>") -> "AccountDirectory":
        """Parse an account directory from YAML text."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigMalformedError(path, str(e), e) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigMalformedError(path, "top level must be a mapping")

        try:
            document = AccountDocument.model_validate(data)
        except ValidationError as e:
            raise ConfigMalformedError(path, str(e), e) from e

        logger.debug(
            f"Loaded {len(document.accounts)} accounts and "
            f"{len(document.aliases)} aliases from {path}"
        )
        return cls(document.accounts, document.aliases)

    def resolve(self, identifier: str) -> str:
        """
        Resolve an account ID or alias to an account ID.

        A 12-digit numeric identifier is always a literal account ID and is
        never looked up in the alias table.

        Raises:
            UnknownAliasError: If the alias is not configured
        """
        if ACCOUNT_ID_PATTERN.fullmatch(identifier):
            return identifier

        try:
            return self._aliases[identifier]
        except KeyError:
            raise UnknownAliasError(identifier) from None

    def _account(self, account_id: str) -> AccountConfig:
        try:
            return self._accounts[account_id]
        except KeyError:
            raise UnknownAccountError(account_id) from None

    def role_arn(self, account_id: str) -> str:
        account = self._account(account_id)
        if not account.role_arn:
            raise MissingRoleArnError(account_id)
        return account.role_arn

    def serial_number(self, account_id: str) -> Tuple[str, bool]:
        account = self._account(account_id)
        if not account.serial_number:
            return "", False
        return account.serial_number, True

    def default_duration(self, account_id: str) -> Tuple[int, bool]:
        """
        Return the configured session duration for an account.

        Returns:
            Tuple of (seconds, present). present is False when the account
            has no duration-seconds entry.

        Raises:
            UnknownAccountError: If the account has no configuration entry
            MalformedDurationError: If the value is not a non-negative integer
        """
        value = self._account(account_id).duration_seconds
        if value is None:
            return 0, False

        if isinstance(value, bool):
            raise MalformedDurationError(account_id, value)
        if isinstance(value, int):
            if value < 0:
                raise MalformedDurationError(account_id, value)
            return value, True
        if not isinstance(value, str):
            raise MalformedDurationError(account_id, value)

        text = value.strip()
        if not DURATION_PATTERN.fullmatch(text):
            raise MalformedDurationError(account_id, value)
        return int(text), True
