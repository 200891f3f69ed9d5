"""
Outcome values returned by the core operations.

Callers branch on ``result.error.kind`` instead of catching exceptions;
the HTTP layer turns each kind into a status code in one place.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    TOKEN_MALFORMED = "token_malformed"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_REVOKED = "token_revoked"
    SESSION_NOT_FOUND = "session_not_found"
    # Raised by the rate-limiting layer in front of the core, never by it
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class AuthError:
    kind: ErrorKind
    until: Optional[datetime] = None


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, until: Optional[datetime] = None) -> "Result[T]":
        return cls(error=AuthError(kind, until))
