"""Token grant response schema."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..models.token import AppUserType, TokenType


class InstallationDetails(BaseModel):
    """Token pair plus ownership, as returned by /oauth/token and /oauth/locationToken."""

    access_token: str
    refresh_token: str
    expires_in: int = 86400
    token_type: TokenType = TokenType.BEARER
    scope: str = ""
    user_type: AppUserType = Field(alias="userType")
    company_id: str | None = Field(default=None, alias="companyId")
    location_id: str | None = Field(default=None, alias="locationId")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @property
    def resource_id(self) -> str | None:
        if self.user_type == AppUserType.LOCATION:
            return self.location_id
        return self.company_id
