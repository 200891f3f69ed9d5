"""
RefreshSession model: one row per issued refresh token (one logged-in device).
Fields:
- secret (unique, random; never leaves the server)
- account_id (String(36)) - FK to accounts.id
- device_label, ip_address
- expires_at, last_used_at, remember_me
- revoked, revoked_at, revoked_reason
"""
import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship, validates

from models.base_model import BaseModel, Base, utcnow


class RevokeReason(str, enum.Enum):
    ROTATION = "rotation"
    LOGOUT = "logout"
    LOGOUT_ALL_DEVICES = "logout-all-devices"
    MANUAL_REVOCATION = "manual-revocation"
    EXPIRY_SWEEP = "expiry-sweep"


class RefreshSession(BaseModel, Base):
    __tablename__ = "refresh_sessions"

    secret = Column(String(128), nullable=False, unique=True)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    device_label = Column(String(255), nullable=True)
    ip_address = Column(String(45), nullable=True)
    expires_at = Column(DateTime, nullable=False)
    last_used_at = Column(DateTime, nullable=False, default=utcnow)
    # NULL on rows written before the flag was stored; see SessionStore.is_remember_me
    remember_me = Column(Boolean, nullable=True)

    revoked = Column(Boolean, nullable=False, default=False)
    revoked_at = Column(DateTime, nullable=True)
    revoked_reason = Column(String(32), nullable=True)

    account = relationship("Account", back_populates="sessions")

    __table_args__ = (
        Index("ix_refresh_sessions_expires_at", "expires_at"),
        Index("ix_refresh_sessions_revoked_at", "revoked", "revoked_at"),
    )

    @validates("revoked")
    def _validate_revoked(self, key, value):
        if self.revoked and not value:
            raise ValueError("A revoked session cannot be reinstated")
        return value

    def is_live(self, now) -> bool:
        return not self.revoked and self.expires_at > now

    def __repr__(self):
        return f"<RefreshSession id={self.id} revoked={self.revoked}>"
