from models.base_model import Base, BaseModel
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship


class Account(BaseModel, Base):
    """Login identity. Lockout fields are owned by the credential validator."""
    __tablename__ = "accounts"

    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)

    failed_login_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)
    last_active_at = Column(DateTime, nullable=True)

    sessions = relationship(
        "RefreshSession",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def is_locked(self, now) -> bool:
        return self.locked_until is not None and self.locked_until > now
