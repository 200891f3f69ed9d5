"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- random session secrets and token identifiers
"""
from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Base for signature/format failures of a presented token."""


class TokenExpiredError(TokenError):
    pass


class TokenInvalidError(TokenError):
    pass


def configure_hasher(time_cost: int | None = None, memory_cost: int | None = None) -> PasswordHasher:
    """Replace the module hasher with one using the given argon2 cost parameters."""
    global ph
    kwargs = {}
    if time_cost is not None:
        kwargs["time_cost"] = time_cost
    if memory_cost is not None:
        kwargs["memory_cost"] = memory_cost
    ph = PasswordHasher(**kwargs)
    return ph


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError):
        return False


def needs_rehash(password_hash: str) -> bool:
    return ph.check_needs_rehash(password_hash)


def generate_session_secret() -> str:
    """384 bits from the OS CSPRNG; unrelated to the JWT signing key."""
    return secrets.token_urlsafe(48)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _timestamp(moment: datetime) -> int:
    """Naive UTC datetime -> POSIX seconds."""
    return int(moment.replace(tzinfo=timezone.utc).timestamp())


def encode_token(claims: Dict[str, Any], issued_at: datetime, expires_at: datetime,
                 secret: str, algorithm: str, issuer: str | None = None) -> str:
    payload = dict(claims)
    payload["iat"] = _timestamp(issued_at)
    payload["exp"] = _timestamp(expires_at)
    payload["jti"] = generate_jti()
    if issuer:
        payload["iss"] = issuer
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str, expected_type: str = ACCESS,
                 verify_exp: bool = True) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises TokenExpiredError / TokenInvalidError.
    expected type must be "access" or "refresh"; a token of the other kind
    is rejected even when its signature is good.
    """
    if not token or not isinstance(token, str):
        raise TokenInvalidError("Empty token")
    options = {"verify_exp": verify_exp}
    if not verify_exp:
        # Refresh authority comes from the session row, including its clock
        options["verify_iat"] = False
    try:
        decoded = jwt.decode(token, secret, algorithms=[algorithm], options=options)
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token expired")
    except jwt.InvalidTokenError as exc:
        raise TokenInvalidError(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise TokenInvalidError("Wrong token type")
    return decoded
