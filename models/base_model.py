#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the auth models.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps
- to_dict() that formats timestamps and removes SA internals

Timestamps are naive UTC throughout: SQLite drops tzinfo on the way back,
and comparisons between aware and naive datetimes raise, so every value
written or compared comes from utcnow().
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base

TIME_FMT = "%Y-%m-%dT%H:%M:%S.%f"

# Declarative base for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at, updated_at.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        If you pass created_at explicitly (e.g., in tests), it will be kept.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        # Ensure an id exists if user passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()
        if getattr(self, "created_at", None) is None:
            self.created_at = utcnow()

    def __str__(self) -> str:
        """Human-friendly representation including id."""
        return f"[{self.__class__.__name__}] ({self.id})"

    def to_dict(self) -> dict:
        """
        Return a dictionary of column values:
        - Formats datetime values to TIME_FMT
        - Removes SQLAlchemy internal state and the password hash
        """
        d = {k: v for k, v in self.__dict__.items() if k != "_sa_instance_state"}
        for key, value in d.items():
            if isinstance(value, datetime):
                d[key] = value.strftime(TIME_FMT)
        d.pop("password_hash", None)
        d.pop("secret", None)
        d["__class__"] = self.__class__.__name__
        return d
