"""
Credential cache for assumed-role sessions.

One JSON record per account ID, stored under a name derived from the
account ID, so unrelated accounts never touch each other's records.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import CacheCorruptError, CacheWriteError
from .utils import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CachedCredential(BaseModel):
    """Temporary AWS credentials persisted between invocations."""

    model_config = ConfigDict(populate_by_name=True)

    access_key_id: str = Field(..., alias="accessKeyId")
    secret_access_key: str = Field(..., alias="secretAccessKey")
    session_token: str = Field(..., alias="sessionToken")
    expires_at: datetime = Field(..., alias="expiresAt")

    @field_validator("expires_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Store expiry as an aware UTC timestamp."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def is_fresh(self, now: datetime, min_duration_seconds: int) -> bool:
        """True if the credentials remain valid for min_duration_seconds past now."""
        return now + timedelta(seconds=min_duration_seconds) < self.expires_at


class FileStorage:
    """Directory-backed storage with atomic replacement of whole records."""

    def __init__(self, directory: str):
        self.directory = directory

    def path(self, key: str) -> str:
        return os.path.join(self.directory, key)

    def read(self, key: str) -> Optional[str]:
        """Return the stored text for key, or None if nothing is stored."""
        try:
            with open(self.path(key), "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def write(self, key: str, text: str) -> None:
        """
        Replace the record stored under key.

        The text goes to a temporary file in the same directory which is then
        renamed over the target, so readers see either the old or the new
        record and never a partial one.
        """
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{key}.", suffix=".tmp", dir=self.directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                os.chmod(tmp_path, 0o600)
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path(key))
        except Exception:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise


class CredentialCache:
    """
    Per-account cache of temporary credentials.

    There is no cross-process locking: two processes refreshing the same
    account both write, and the last writer wins.
    """

    def __init__(self, storage, clock: Clock = utc_now):
        """
        Initialize the credential cache.

        Args:
            storage: Object providing read(key) -> Optional[str] and write(key, text)
            clock: Callable returning the current aware UTC datetime
        """
        self.storage = storage
        self.clock = clock

    @staticmethod
    def key(account_id: str) -> str:
        return f"aws-login-{account_id}.json"

    def get(
        self, account_id: str, min_duration_seconds: int
    ) -> Tuple[Optional[CachedCredential], bool]:
        """
        Look up cached credentials for an account.

        Args:
            account_id: AWS account ID
            min_duration_seconds: Minimum remaining validity required

        Returns:
            Tuple of (record, hit). The record is returned whenever one is
            stored, but hit is True only if it is still fresh.

        Raises:
            CacheCorruptError: If a stored record cannot be read or parsed
        """
        try:
            text = self.storage.read(self.key(account_id))
        except (OSError, UnicodeDecodeError) as e:
            raise CacheCorruptError(account_id, str(e), e) from e

        if text is None:
            logger.debug(f"No cached credentials for {account_id}")
            return None, False

        try:
            record = CachedCredential.model_validate_json(text)
        except ValidationError as e:
            raise CacheCorruptError(account_id, str(e), e) from e

        if record.is_fresh(self.clock(), min_duration_seconds):
            return record, True

        logger.debug(
            f"Cached credentials for {account_id} expire at "
            f"{record.expires_at.isoformat()}, less than {min_duration_seconds}s away"
        )
        return record, False

    def put(self, account_id: str, credential: CachedCredential) -> None:
        """
        Store credentials for an account, replacing any previous record.

        Raises:
            CacheWriteError: If the record cannot be written
        """
        text = credential.model_dump_json(by_alias=True)
        try:
            self.storage.write(self.key(account_id), text)
        except OSError as e:
            raise CacheWriteError(account_id, e) from e
        logger.debug(f"Cached credentials for {account_id}")
