"""Installation token model - one row per authorized company or location."""

from __future__ import annotations

import enum

from sqlalchemy import Enum, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class AppUserType(str, enum.Enum):
    COMPANY = "Company"
    LOCATION = "Location"


class TokenType(str, enum.Enum):
    BEARER = "Bearer"


def _enum_values(cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in cls]


class InstallationToken(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "tokens"
    __table_args__ = (
        UniqueConstraint("location_id", "user_type", name="uq_tokens_location_user_type"),
        # Location tokens carry the parent companyId too, so company uniqueness
        # only applies to Company-level installations.
        Index(
            "uq_tokens_company_user_type",
            "company_id",
            "user_type",
            unique=True,
            sqlite_where=text("user_type = 'Company'"),
            postgresql_where=text("user_type = 'Company'"),
        ),
    )

    access_token: Mapped[str] = mapped_column(Text)
    token_type: Mapped[TokenType] = mapped_column(
        Enum(TokenType, values_callable=_enum_values, native_enum=False, length=20),
        default=TokenType.BEARER,
    )
    expires_in: Mapped[int] = mapped_column(Integer)
    refresh_token: Mapped[str] = mapped_column(Text)
    scope: Mapped[str] = mapped_column(Text, default="")
    user_type: Mapped[AppUserType] = mapped_column(
        Enum(AppUserType, values_callable=_enum_values, native_enum=False, length=20),
        index=True,
    )
    company_id: Mapped[str | None] = mapped_column(String(100), default=None, index=True)
    location_id: Mapped[str | None] = mapped_column(String(100), default=None, index=True)

    @property
    def resource_id(self) -> str | None:
        if self.user_type == AppUserType.LOCATION:
            return self.location_id
        return self.company_id

    def __repr__(self) -> str:
        return f"<InstallationToken {self.user_type.value} {self.resource_id!r}>"
