"""
Refresh token rotation: every refresh token works exactly once.

Session state per row::

    Active --refresh--> Rotated            (successor row becomes Active)
    Active --logout---> LoggedOut
    Active --revoke---> ManuallyRevoked
    Active --time-----> Expired            (noticed here, row deleted)
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from models.base_model import utcnow
from services.results import ErrorKind, Result
from services.session_store import SessionStore
from services.settings import AuthSettings
from services.tokens import TokenIssuer, TokenPair
from utils.devices import DeviceInfo
from utils.security import TokenError

logger = logging.getLogger(__name__)


class RotationEngine:
    def __init__(self, store: SessionStore, issuer: TokenIssuer, settings: AuthSettings,
                 clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.issuer = issuer
        self.settings = settings
        self.clock = clock

    def refresh(self, refresh_token: str, device: Optional[DeviceInfo] = None) -> Result[TokenPair]:
        try:
            claims = self.issuer.read_refresh_token(refresh_token)
        except TokenError:
            return Result.failure(ErrorKind.TOKEN_MALFORMED)

        session_id = claims.get("sid")
        if not session_id:
            return Result.failure(ErrorKind.TOKEN_MALFORMED)

        now = self.clock()
        row = self.store.get(session_id)
        if row is None:
            return Result.failure(ErrorKind.TOKEN_REVOKED)
        if row.revoked:
            logger.warning(
                "Refresh with retired session %s (reason=%s) for account %s",
                row.id, row.revoked_reason, row.account_id,
            )
            return Result.failure(ErrorKind.TOKEN_REVOKED)
        if row.expires_at < now:
            self.store.delete(row.id)
            return Result.failure(ErrorKind.TOKEN_EXPIRED)

        account = row.account
        remember_me = self.store.is_remember_me(row)
        successor = self.store.rotate(
            row,
            account,
            device=device,
            expires_at=now + self.settings.refresh_lifetime(remember_me),
            remember_me=remember_me,
            now=now,
        )
        if successor is None:
            # Lost the race: another request consumed this token first
            logger.warning("Concurrent reuse of session %s rejected", session_id)
            return Result.failure(ErrorKind.TOKEN_REVOKED)
        return Result.success(self.issuer.sign_pair(account, successor, now))
