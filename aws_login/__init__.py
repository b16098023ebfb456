"""
AWS Login.

Assumes IAM roles through STS with MFA, caches the temporary credentials
per account on disk, and hands them to the shell, a sub-command or the
AWS console.

Main exports:
- AccountDirectory: Account alias and role configuration
- CredentialCache: Per-account credential cache
- CredentialBroker: Cache-first credential resolution
- ConsoleLinkBuilder: Console sign-in URLs

Example usage:
    from aws_login import (
        AccountDirectory,
        CredentialBroker,
        CredentialCache,
        FileStorage,
        StsRoleAssumer,
        read_mfa_token,
    )

    broker = CredentialBroker(
        AccountDirectory.from_file("/home/me/.aws/aws-login.yaml"),
        CredentialCache(FileStorage("/home/me/.aws")),
        StsRoleAssumer(),
        read_mfa_token,
    )
    credentials = broker.resolve("prod")
"""

__version__ = "1.0.0"

from .broker import CredentialBroker, ResolvedCredentials
from .cache import CachedCredential, CredentialCache, FileStorage
from .config import AccountConfig, AccountDirectory, LoginSettings
from .console import ConsoleLinkBuilder, FederationClient
from .exceptions import (
    AWSLoginError,
    AssumeRoleError,
    CacheCorruptError,
    CacheError,
    CacheWriteError,
    ConfigMalformedError,
    ConfigUnreadableError,
    ConfigurationError,
    ConsoleError,
    MalformedDurationError,
    MFAReadError,
    MissingRoleArnError,
    SigninRequestError,
    SigninTokenMissingError,
    UnknownAccountError,
    UnknownAliasError,
)
from .sts import StsRoleAssumer, read_mfa_token

__all__ = [
    # Core classes
    "AccountConfig",
    "AccountDirectory",
    "LoginSettings",
    "CachedCredential",
    "CredentialCache",
    "FileStorage",
    "CredentialBroker",
    "ResolvedCredentials",
    "ConsoleLinkBuilder",
    "FederationClient",
    "StsRoleAssumer",
    "read_mfa_token",
    # Exceptions
    "AWSLoginError",
    "ConfigurationError",
    "ConfigUnreadableError",
    "ConfigMalformedError",
    "UnknownAliasError",
    "UnknownAccountError",
    "MissingRoleArnError",
    "MalformedDurationError",
    "CacheError",
    "CacheCorruptError",
    "CacheWriteError",
    "MFAReadError",
    "AssumeRoleError",
    "ConsoleError",
    "SigninRequestError",
    "SigninTokenMissingError",
    # Module metadata
    "__version__",
]
