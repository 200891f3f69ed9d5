"""
Token pair issuance.

The access token is a self-contained JWT (30 minutes by default) that is
never looked up server-side. The refresh token is a JWT wrapper around a
session row id; the row, not the signature, decides whether it still works.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from models.account import Account
from models.base_model import utcnow
from models.refresh_session import RefreshSession
from services.session_store import SessionStore
from services.settings import AuthSettings
from utils.devices import DeviceInfo
from utils.security import ACCESS, REFRESH, decode_token, encode_token

TOKEN_TYPE = "Bearer"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    session_id: str
    refresh_expires_at: datetime
    token_type: str = TOKEN_TYPE

    def to_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
            "token_type": self.token_type,
        }


class TokenIssuer:
    def __init__(self, storage, store: SessionStore, settings: AuthSettings,
                 clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self.store = store
        self.settings = settings
        self.clock = clock

    def issue(self, account: Account, remember_me: bool = False,
              device: Optional[DeviceInfo] = None) -> TokenPair:
        """Open a new session for ``account`` and sign its token pair."""
        now = self.clock()
        row = self.store.create(
            account,
            device or DeviceInfo(),
            expires_at=now + self.settings.refresh_lifetime(remember_me),
            remember_me=remember_me,
            now=now,
        )
        account.last_login_at = now
        account.last_active_at = now
        self.storage.save()
        return self.sign_pair(account, row, now)

    def sign_pair(self, account: Account, row: RefreshSession, now: datetime) -> TokenPair:
        return TokenPair(
            access_token=self.access_token(account, row.id, now),
            refresh_token=self.refresh_token(row, now),
            expires_in=int(self.settings.access_token_ttl.total_seconds()),
            session_id=row.id,
            refresh_expires_at=row.expires_at,
        )

    def access_token(self, account: Account, session_id: Optional[str], now: datetime) -> str:
        claims = {
            "sub": str(account.id),
            "email": account.email,
            "is_admin": bool(account.is_admin),
            "type": ACCESS,
        }
        if session_id:
            claims["sid"] = session_id
        return encode_token(
            claims,
            issued_at=now,
            expires_at=now + self.settings.access_token_ttl,
            secret=self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
            issuer=self.settings.jwt_issuer,
        )

    def refresh_token(self, row: RefreshSession, now: datetime) -> str:
        return encode_token(
            {"sid": row.id, "type": REFRESH},
            issued_at=now,
            expires_at=row.expires_at,
            secret=self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
            issuer=self.settings.jwt_issuer,
        )

    def read_access_token(self, token: str) -> dict:
        """Verify signature, expiry and type of an access token. Raises TokenError."""
        return decode_token(token, self.settings.jwt_secret, self.settings.jwt_algorithm, expected_type=ACCESS)

    def read_refresh_token(self, token: str) -> dict:
        """
        Verify signature and type of a refresh wrapper. Expiry is judged
        from the session row, so the wrapper's own ``exp`` is not enforced.
        """
        return decode_token(
            token, self.settings.jwt_secret, self.settings.jwt_algorithm,
            expected_type=REFRESH, verify_exp=False,
        )
