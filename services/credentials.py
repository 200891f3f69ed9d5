"""
Email/password verification with time-boxed lockout.

The lockout window is checked before the password, so a locked account
stays locked even when the right password is supplied. An unknown email
and a wrong password produce the same failure.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from models.account import Account
from models.base_model import utcnow
from services.results import ErrorKind, Result
from services.settings import AuthSettings
from utils.security import hash_password, needs_rehash, verify_password

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return email.strip().lower() if isinstance(email, str) else ""


@dataclass(frozen=True)
class LockoutStatus:
    is_locked: bool
    locked_until: Optional[datetime]
    failed_attempts: int


class CredentialValidator:
    def __init__(self, storage, settings: AuthSettings, clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self.settings = settings
        self.clock = clock
        self._decoy_hash: Optional[str] = None

    def find_account(self, email: str) -> Optional[Account]:
        session = self.storage.get_session()
        return session.query(Account).filter(Account.email == normalize_email(email)).first()

    def _burn_hash(self, password: str) -> None:
        """Spend one hash verification so a missing account is not faster to reject."""
        if self._decoy_hash is None:
            self._decoy_hash = hash_password(secrets.token_urlsafe(16))
        verify_password(password or "", self._decoy_hash)

    def validate(self, email: str, password: str) -> Result[Account]:
        now = self.clock()
        account = self.find_account(email)
        if account is None:
            self._burn_hash(password)
            return Result.failure(ErrorKind.INVALID_CREDENTIALS)

        if account.is_locked(now):
            return Result.failure(ErrorKind.ACCOUNT_LOCKED, until=account.locked_until)

        session = self.storage.get_session()
        try:
            if verify_password(password or "", account.password_hash):
                account.failed_login_attempts = 0
                account.locked_until = None
                if needs_rehash(account.password_hash):
                    account.password_hash = hash_password(password)
                self.storage.save()
                return Result.success(account)

            # Increment in SQL so concurrent failures are all counted
            account.failed_login_attempts = Account.failed_login_attempts + 1
            session.flush()
            session.refresh(account, ["failed_login_attempts"])
            if account.failed_login_attempts >= self.settings.max_failed_logins:
                account.locked_until = now + self.settings.lockout_duration
                self.storage.save()
                logger.warning(
                    "Account %s locked until %s after %d failed logins",
                    account.id, account.locked_until.isoformat(), account.failed_login_attempts,
                )
                return Result.failure(ErrorKind.ACCOUNT_LOCKED, until=account.locked_until)
            self.storage.save()
        except SQLAlchemyError:
            session.rollback()
            raise
        return Result.failure(ErrorKind.INVALID_CREDENTIALS)

    def lockout_status(self, email: str) -> LockoutStatus:
        account = self.find_account(email)
        if account is None:
            return LockoutStatus(is_locked=False, locked_until=None, failed_attempts=0)
        return LockoutStatus(
            is_locked=account.is_locked(self.clock()),
            locked_until=account.locked_until,
            failed_attempts=account.failed_login_attempts,
        )

    def unlock(self, email: str) -> bool:
        account = self.find_account(email)
        if account is None:
            return False
        account.failed_login_attempts = 0
        account.locked_until = None
        self.storage.save()
        logger.info("Account %s unlocked", account.id)
        return True
