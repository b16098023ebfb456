"""
Credential Broker.

Resolves an account identifier to temporary role credentials, reusing
cached credentials when they remain valid long enough and otherwise
assuming the role (with MFA where configured) and caching the result.
"""

from datetime import datetime
from typing import Any, Callable, Dict

from pydantic import BaseModel, ConfigDict

from .cache import CachedCredential, Clock, CredentialCache, utc_now
from .config import AccountDirectory
from .exceptions import CacheWriteError
from .utils import get_logger

logger = get_logger(__name__)

SESSION_NAME = "aws-login"
DEFAULT_DURATION_SECONDS = 3600

RoleAssumer = Callable[..., Dict[str, Any]]
TokenReader = Callable[[], str]


class ResolvedCredentials(BaseModel):
    """Credentials for an account and how they were obtained."""

    model_config = ConfigDict(frozen=True)

    account_id: str
    access_key_id: str
    secret_access_key: str
    session_token: str
    expires_at: datetime
    duration_seconds: int
    from_cache: bool

    def environment(self) -> Dict[str, str]:
        return {
            "AWS_ACCESS_KEY_ID": self.access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.secret_access_key,
            "AWS_SESSION_TOKEN": self.session_token,
        }


class CredentialBroker:
    """
    Orchestrates account resolution, cache lookup and role assumption.

    A cache hit never prompts for MFA and never calls STS. Failures from
    the directory, the cache read, the token reader and STS propagate to the
    caller unchanged; only a failed cache write after a successful refresh
    is tolerated.
    """

    def __init__(
        self,
        directory: AccountDirectory,
        cache: CredentialCache,
        assume_role: RoleAssumer,
        read_token: TokenReader,
        clock: Clock = utc_now,
    ):
        """
        Initialize the credential broker.

        Args:
            directory: Account alias and role configuration
            cache: Per-account credential cache
            assume_role: Callable performing STS AssumeRole; returns the
                STS Credentials block
            read_token: Callable returning one MFA token line
            clock: Callable returning the current aware UTC datetime
        """
        self.directory = directory
        self.cache = cache
        self.assume_role = assume_role
        self.read_token = read_token
        self.clock = clock

    def effective_duration(self, account_id: str, duration_seconds: int = 0) -> int:
        """
        Session length used for both the freshness check and the STS request.

        An explicit non-zero duration wins, then a non-zero duration-seconds
        from the account configuration, then one hour.
        """
        if duration_seconds:
            return duration_seconds

        configured, present = self.directory.default_duration(account_id)
        if present and configured:
            return configured
        return DEFAULT_DURATION_SECONDS

    def resolve(self, identifier: str, duration_seconds: int = 0) -> ResolvedCredentials:
        """
        Get credentials for an account ID or alias.

        Args:
            identifier: 12-digit account ID or configured alias
            duration_seconds: Requested validity; 0 means use the account default

        Returns:
            ResolvedCredentials: Cached or freshly assumed credentials

        Raises:
            ConfigurationError: If the account cannot be resolved or configured
            CacheCorruptError: If the cached record is unreadable
            MFAReadError: If the MFA token cannot be read
            AssumeRoleError: If STS refuses the role assumption
        """
        account_id = self.directory.resolve(identifier)
        duration = self.effective_duration(account_id, duration_seconds)

        cached, hit = self.cache.get(account_id, duration)
        if hit:
            logger.info(f"Using cached credentials for {account_id}")
            return self._resolved(account_id, cached, duration, from_cache=True)

        credential = self._refresh(account_id, duration)
        return self._resolved(account_id, credential, duration, from_cache=False)

    def _refresh(self, account_id: str, duration: int) -> CachedCredential:
        role_arn = self.directory.role_arn(account_id)
        serial_number, has_mfa = self.directory.serial_number(account_id)

        params = {
            "role_arn": role_arn,
            "session_name": SESSION_NAME,
            "duration_seconds": duration,
        }
        if has_mfa:
            params["serial_number"] = serial_number
            params["token_code"] = self.read_token()

        response = self.assume_role(**params)
        credential = CachedCredential(
            access_key_id=response["AccessKeyId"],
            secret_access_key=response["SecretAccessKey"],
            session_token=response["SessionToken"],
            expires_at=response["Expiration"],
        )
        remaining = (credential.expires_at - self.clock()).total_seconds()
        logger.info(
            f"Assumed {role_arn}, credentials valid for another {int(remaining)}s"
        )

        try:
            self.cache.put(account_id, credential)
        except CacheWriteError as e:
            logger.warning(f"Continuing without caching: {e}")

        return credential

    @staticmethod
    def _resolved(
        account_id: str,
        credential: CachedCredential,
        duration: int,
        from_cache: bool,
    ) -> ResolvedCredentials:
        return ResolvedCredentials(
            account_id=account_id,
            access_key_id=credential.access_key_id,
            secret_access_key=credential.secret_access_key,
            session_token=credential.session_token,
            expires_at=credential.expires_at,
            duration_seconds=duration,
            from_cache=from_cache,
        )
