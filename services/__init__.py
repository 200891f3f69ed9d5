"""
The token lifecycle and session-security core.

build_services() wires the components against a DBStorage; none of them
keeps per-request state, so one bundle serves every request.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from models.base_model import utcnow
from services.cleanup import CleanupScheduler
from services.credentials import CredentialValidator
from services.registry import SessionRegistry
from services.revocation import RevocationService
from services.rotation import RotationEngine
from services.session_store import SessionStore
from services.settings import AuthSettings
from services.tokens import TokenIssuer


@dataclass
class AuthServices:
    settings: AuthSettings
    store: SessionStore
    credentials: CredentialValidator
    issuer: TokenIssuer
    rotation: RotationEngine
    revocation: RevocationService
    registry: SessionRegistry
    cleanup: CleanupScheduler


def build_services(storage, settings: AuthSettings, clock: Callable[[], datetime] = utcnow,
                   daily_interval: timedelta = timedelta(hours=24),
                   hourly_interval: timedelta = timedelta(hours=1)) -> AuthServices:
    store = SessionStore(storage, settings)
    issuer = TokenIssuer(storage, store, settings, clock)
    return AuthServices(
        settings=settings,
        store=store,
        credentials=CredentialValidator(storage, settings, clock),
        issuer=issuer,
        rotation=RotationEngine(store, issuer, settings, clock),
        revocation=RevocationService(storage, store, issuer, clock),
        registry=SessionRegistry(store, clock),
        cleanup=CleanupScheduler(storage, store, daily_interval, hourly_interval, clock),
    )
