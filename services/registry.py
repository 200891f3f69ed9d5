from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from models.base_model import utcnow
from models.refresh_session import RefreshSession, RevokeReason
from services.results import ErrorKind, Result
from services.session_store import SessionStore


@dataclass(frozen=True)
class SessionSummary:
    id: str
    device: str
    ip_address: Optional[str]
    created_at: datetime
    last_used_at: datetime
    expires_at: datetime
    is_current: bool = False


def to_summary(row: RefreshSession, current_session_id: Optional[str] = None) -> SessionSummary:
    return SessionSummary(
        id=row.id,
        device=row.device_label or "Unknown device",
        ip_address=row.ip_address,
        created_at=row.created_at,
        last_used_at=row.last_used_at,
        expires_at=row.expires_at,
        is_current=row.id == current_session_id,
    )


class SessionRegistry:
    """An account's view of its own logged-in devices."""

    def __init__(self, store: SessionStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    def list_sessions(self, account_id: str, current_session_id: Optional[str] = None) -> List[SessionSummary]:
        rows = self.store.list_live(account_id, self.clock())
        return [to_summary(row, current_session_id) for row in rows]

    def revoke_session(self, account_id: str, session_id: str) -> Result[None]:
        # Someone else's session and no session at all look the same from outside
        revoked = self.store.revoke(session_id, RevokeReason.MANUAL_REVOCATION, self.clock(), account_id=account_id)
        if revoked != 1:
            return Result.failure(ErrorKind.SESSION_NOT_FOUND)
        return Result.success(None)

    def revoke_other_sessions(self, account_id: str, keep_session_id: Optional[str] = None) -> int:
        return self.store.revoke_all(
            account_id, RevokeReason.MANUAL_REVOCATION, self.clock(), exclude=keep_session_id
        )
