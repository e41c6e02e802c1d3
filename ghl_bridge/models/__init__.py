"""Bridge models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin, TimestampMixin
from .token import AppUserType, InstallationToken, TokenType

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "AppUserType",
    "InstallationToken",
    "TokenType",
]
