"""
Persistence for refresh sessions.

Every revoking write is a conditional UPDATE on ``revoked = false`` so
revocation is monotonic even when two requests race on the same row, and
rotation retires the old row and inserts its successor in one transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from models.account import Account
from models.refresh_session import RefreshSession, RevokeReason
from services.settings import AuthSettings
from utils.devices import DeviceInfo
from utils.security import generate_session_secret

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurgeReport:
    expired: int
    revoked: int

    @property
    def total(self) -> int:
        return self.expired + self.revoked


class SessionStore:
    def __init__(self, storage, settings: AuthSettings):
        self.storage = storage
        self.settings = settings

    def _query(self):
        return self.storage.get_session().query(RefreshSession)

    def _live(self):
        return self._query().filter(RefreshSession.revoked == False)  # noqa: E712

    def new_row(self, account: Account, *, device_label: Optional[str], ip_address: Optional[str],
                expires_at: datetime, remember_me: bool, now: datetime) -> RefreshSession:
        """Build an unsaved session row with a fresh random secret."""
        return RefreshSession(
            secret=generate_session_secret(),
            account_id=account.id,
            device_label=device_label,
            ip_address=ip_address,
            created_at=now,
            last_used_at=now,
            expires_at=expires_at,
            remember_me=remember_me,
            revoked=False,
        )

    def create(self, account: Account, device: DeviceInfo, *, expires_at: datetime,
               remember_me: bool, now: datetime) -> RefreshSession:
        """Stage a new session in the current transaction; the caller commits."""
        row = self.new_row(
            account,
            device_label=device.label,
            ip_address=device.ip_address,
            expires_at=expires_at,
            remember_me=remember_me,
            now=now,
        )
        self.storage.new(row)
        return row

    def get(self, session_id: str) -> Optional[RefreshSession]:
        if not session_id:
            return None
        return self.storage.get(RefreshSession, session_id)

    def is_remember_me(self, row: RefreshSession) -> bool:
        if row.remember_me is not None:
            return row.remember_me
        return (row.expires_at - row.created_at) > self.settings.remember_me_threshold

    def rotate(self, row: RefreshSession, account: Account, *, device: Optional[DeviceInfo],
               expires_at: datetime, remember_me: bool, now: datetime) -> Optional[RefreshSession]:
        """
        Retire ``row`` and insert its successor atomically.
        Returns None when another caller already retired the row.
        """
        session = self.storage.get_session()
        try:
            retired = (
                self._live()
                .filter(RefreshSession.id == row.id)
                .update(
                    {
                        RefreshSession.revoked: True,
                        RefreshSession.revoked_at: now,
                        RefreshSession.revoked_reason: RevokeReason.ROTATION.value,
                        RefreshSession.last_used_at: now,
                    },
                    synchronize_session=False,
                )
            )
            if retired != 1:
                session.rollback()
                return None

            successor = self.new_row(
                account,
                device_label=device.label if device and device.user_agent else row.device_label,
                ip_address=device.ip_address if device and device.ip_address else row.ip_address,
                expires_at=expires_at,
                remember_me=remember_me,
                now=now,
            )
            session.add(successor)
            account.last_active_at = now
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.expire(row)
        return successor

    def revoke(self, session_id: str, reason: RevokeReason, now: datetime,
               account_id: Optional[str] = None) -> int:
        """Revoke one live session, optionally only if ``account_id`` owns it."""
        query = self._live().filter(RefreshSession.id == session_id)
        if account_id is not None:
            query = query.filter(RefreshSession.account_id == account_id)
        return self._revoke_where(query, reason, now)

    def revoke_all(self, account_id: str, reason: RevokeReason, now: datetime,
                   exclude: Optional[str] = None) -> int:
        query = self._live().filter(RefreshSession.account_id == account_id)
        if exclude:
            query = query.filter(RefreshSession.id != exclude)
        return self._revoke_where(query, reason, now)

    def _revoke_where(self, query, reason: RevokeReason, now: datetime) -> int:
        session = self.storage.get_session()
        try:
            count = query.update(
                {
                    RefreshSession.revoked: True,
                    RefreshSession.revoked_at: now,
                    RefreshSession.revoked_reason: reason.value,
                },
                synchronize_session=False,
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        # Rows already in the identity map would otherwise still read as live
        session.expire_all()
        return count

    def delete(self, session_id: str) -> int:
        session = self.storage.get_session()
        try:
            count = self._query().filter(RefreshSession.id == session_id).delete(synchronize_session=False)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.expire_all()
        return count

    def list_live(self, account_id: str, now: datetime) -> List[RefreshSession]:
        return (
            self._live()
            .filter(RefreshSession.account_id == account_id, RefreshSession.expires_at > now)
            .order_by(RefreshSession.last_used_at.desc(), RefreshSession.created_at.desc())
            .all()
        )

    def purge(self, now: datetime) -> PurgeReport:
        """Delete expired rows and rows revoked longer ago than the retention window."""
        session = self.storage.get_session()
        cutoff = now - self.settings.revoked_retention
        try:
            expired = (
                self._query()
                .filter(RefreshSession.expires_at < now)
                .delete(synchronize_session=False)
            )
            revoked = (
                self._query()
                .filter(RefreshSession.revoked == True, RefreshSession.revoked_at < cutoff)  # noqa: E712
                .delete(synchronize_session=False)
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.expire_all()
        return PurgeReport(expired=expired, revoked=revoked)
