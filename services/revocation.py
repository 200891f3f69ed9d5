"""
Logout. Always reports success: a client that asked to log out must never
be told its credentials may still be valid.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from models.base_model import utcnow
from models.refresh_session import RevokeReason
from services.session_store import SessionStore
from services.tokens import TokenIssuer
from utils.security import TokenError

logger = logging.getLogger(__name__)


class RevocationService:
    def __init__(self, storage, store: SessionStore, issuer: TokenIssuer,
                 clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self.store = store
        self.issuer = issuer
        self.clock = clock

    def logout(self, refresh_token: str | None, all_devices: bool = False) -> int:
        """Revoke the presented session (or every session of its owner). Returns the count revoked."""
        if not refresh_token:
            return 0
        try:
            claims = self.issuer.read_refresh_token(refresh_token)
            row = self.store.get(claims.get("sid"))
            # A retired token carries no authority, not even to log others out
            if row is None or row.revoked:
                return 0
            now = self.clock()
            if all_devices:
                return self.store.revoke_all(row.account_id, RevokeReason.LOGOUT_ALL_DEVICES, now)
            return self.store.revoke(row.id, RevokeReason.LOGOUT, now)
        except TokenError:
            return 0
        except Exception:
            logger.warning("Logout failed; reporting success to the client", exc_info=True)
            self.storage.rollback()
            return 0

    def force_logout(self, account_id: str) -> int:
        """Administrative: end every live session of an account."""
        count = self.store.revoke_all(account_id, RevokeReason.MANUAL_REVOCATION, self.clock())
        logger.info("Force logout of account %s revoked %d sessions", account_id, count)
        return count
