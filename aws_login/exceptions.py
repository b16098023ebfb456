"""
AWS Login Custom Exceptions.

Defines the exception hierarchy for configuration, cache, role assumption
and console sign-in failures, each carrying an error code for programmatic
handling and a message suitable for printing at the command line.
"""

from typing import Optional


class AWSLoginError(Exception):
    """Base exception for aws-login errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize aws-login error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            original_error: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.original_error = original_error

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ConfigurationError(AWSLoginError):
    """Base class for account configuration errors."""


class ConfigUnreadableError(ConfigurationError):
    """Raised when the account configuration file cannot be read."""

    def __init__(self, path: str, original_error: Optional[Exception] = None):
        super().__init__(
            f"unable to read configuration file: {path}",
            "CONFIG_UNREADABLE",
            original_error,
        )
        self.path = path


class ConfigMalformedError(ConfigurationError):
    """Raised when the account configuration file is not valid structured data."""

    def __init__(
        self, path: str, detail: str, original_error: Optional[Exception] = None
    ):
        super().__init__(
            f"malformed configuration file {path}: {detail}",
            "CONFIG_MALFORMED",
            original_error,
        )
        self.path = path


class UnknownAliasError(ConfigurationError):
    """Raised when an account alias is not present in the alias table."""

    def __init__(self, alias: str):
        super().__init__(f"unknown account alias: {alias}", "UNKNOWN_ALIAS")
        self.alias = alias


class UnknownAccountError(ConfigurationError):
    """Raised when an account ID has no configuration entry."""

    def __init__(self, account_id: str):
        super().__init__(f"unknown account ID: {account_id}", "UNKNOWN_ACCOUNT")
        self.account_id = account_id


class MissingRoleArnError(ConfigurationError):
    """Raised when an account entry exists but has no role-arn."""

    def __init__(self, account_id: str):
        super().__init__(
            f"no role-arn configured for account ID: {account_id}",
            "MISSING_ROLE_ARN",
        )
        self.account_id = account_id


class MalformedDurationError(ConfigurationError):
    """Raised when duration-seconds is not a non-negative integer."""

    def __init__(self, account_id: str, value):
        super().__init__(
            f"duration-seconds for account ID {account_id} is not a "
            f"non-negative integer: {value!r}",
            "MALFORMED_DURATION",
        )
        self.account_id = account_id
        self.value = value


class CacheError(AWSLoginError):
    """Base class for credential cache errors."""


class CacheCorruptError(CacheError):
    """Raised when a stored credential record cannot be read or parsed."""

    def __init__(
        self, account_id: str, detail: str, original_error: Optional[Exception] = None
    ):
        super().__init__(
            f"corrupt cached credentials for account ID {account_id}: {detail}",
            "CACHE_CORRUPT",
            original_error,
        )
        self.account_id = account_id


class CacheWriteError(CacheError):
    """Raised when a credential record cannot be written."""

    def __init__(self, account_id: str, original_error: Optional[Exception] = None):
        message = f"unable to cache credentials for account ID {account_id}"
        if original_error is not None:
            message = f"{message}: {original_error}"
        super().__init__(message, "CACHE_WRITE_FAILED", original_error)
        self.account_id = account_id


class MFAReadError(AWSLoginError):
    """Raised when the MFA token cannot be read from the terminal."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(
            f"failed to read MFA token: {message}", "MFA_READ_FAILED", original_error
        )


class AssumeRoleError(AWSLoginError):
    """Exception raised when AWS STS AssumeRole operation fails."""

    def __init__(
        self,
        message: str,
        role_arn: str,
        aws_error_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize assume role error.

        Args:
            message: Human-readable error message
            role_arn: ARN of the role that failed to be assumed
            aws_error_code: AWS-specific error code from the STS response
            original_error: Original boto3/botocore exception
        """
        error_code = (
            f"ASSUME_ROLE_FAILED_{aws_error_code}"
            if aws_error_code
            else "ASSUME_ROLE_FAILED"
        )
        full_message = f"{message} (Role: {role_arn})"
        super().__init__(full_message, error_code, original_error)
        self.role_arn = role_arn
        self.aws_error_code = aws_error_code


class ConsoleError(AWSLoginError):
    """Base class for console sign-in errors."""


class SigninRequestError(ConsoleError):
    """Raised when the federation endpoint cannot be reached or answers garbage."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message, "SIGNIN_REQUEST_FAILED", original_error)


class SigninTokenMissingError(ConsoleError):
    """Raised when the federation response has no SigninToken field."""

    def __init__(self):
        super().__init__("SigninToken not included in response", "SIGNIN_TOKEN_MISSING")


def create_assume_role_error(boto_error, role_arn: str) -> AssumeRoleError:
    """
    Create an AssumeRoleError from a boto3/botocore exception.

    Args:
        boto_error: The original boto3/botocore exception
        role_arn: ARN of the role being assumed

    Returns:
        AssumeRoleError: Error describing why the role could not be assumed
    """
    from botocore.exceptions import ClientError, NoCredentialsError, ProfileNotFound

    if isinstance(boto_error, NoCredentialsError):
        return AssumeRoleError(
            "AWS credentials not found. Configure long-term credentials "
            "for calling STS",
            role_arn,
            original_error=boto_error,
        )

    if isinstance(boto_error, ProfileNotFound):
        return AssumeRoleError(
            f"AWS profile not found: {boto_error}",
            role_arn,
            original_error=boto_error,
        )

    if isinstance(boto_error, ClientError):
        error_code = boto_error.response.get("Error", {}).get("Code", "Unknown")
        error_message = boto_error.response.get("Error", {}).get(
            "Message", str(boto_error)
        )

        if error_code == "AccessDenied":
            return AssumeRoleError(
                f"Access denied - check the MFA token, IAM permissions and trust "
                f"relationships: {error_message}",
                role_arn,
                error_code,
                boto_error,
            )
        return AssumeRoleError(
            f"AWS error: {error_message}", role_arn, error_code, boto_error
        )

    return AssumeRoleError(
        f"Unexpected error during role assumption: {boto_error}",
        role_arn,
        original_error=boto_error,
    )
