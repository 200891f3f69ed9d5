from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping


@dataclass(frozen=True)
class AuthSettings:
    """The slice of application config the auth core reads."""

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_issuer: str | None = None
    access_token_ttl: timedelta = timedelta(minutes=30)
    refresh_ttl: timedelta = timedelta(hours=24)
    remember_me_refresh_ttl: timedelta = timedelta(days=30)
    remember_me_threshold: timedelta = timedelta(days=2)
    max_failed_logins: int = 10
    lockout_duration: timedelta = timedelta(hours=24)
    revoked_retention: timedelta = timedelta(days=7)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "AuthSettings":
        return cls(
            jwt_secret=config["JWT_SECRET"],
            jwt_algorithm=config.get("JWT_ALGORITHM", "HS256"),
            jwt_issuer=config.get("JWT_ISSUER"),
            access_token_ttl=config.get("ACCESS_TOKEN_EXPIRES", cls.access_token_ttl),
            refresh_ttl=config.get("REFRESH_TOKEN_EXPIRES", cls.refresh_ttl),
            remember_me_refresh_ttl=config.get("REMEMBER_ME_REFRESH_EXPIRES", cls.remember_me_refresh_ttl),
            remember_me_threshold=config.get("REMEMBER_ME_THRESHOLD", cls.remember_me_threshold),
            max_failed_logins=config.get("MAX_FAILED_LOGINS", cls.max_failed_logins),
            lockout_duration=config.get("LOCKOUT_DURATION", cls.lockout_duration),
            revoked_retention=config.get("REVOKED_SESSION_RETENTION", cls.revoked_retention),
        )

    def refresh_lifetime(self, remember_me: bool) -> timedelta:
        return self.remember_me_refresh_ttl if remember_me else self.refresh_ttl
