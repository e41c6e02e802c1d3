"""Token manager - read/write access to installation token records.

A resource id is either a companyId or a locationId. Lookups match both
columns, preferring the record whose user type matches the column that
matched, so a location record carrying its parent companyId never shadows
the company's own installation.
"""

from __future__ import annotations

import logging

from sqlalchemy import and_, case, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..database import TokenStore
from ..errors import NotFoundError
from ..models.token import AppUserType, InstallationToken
from ..schemas.token import InstallationDetails

logger = logging.getLogger(__name__)


def _resource_filter(resource_id: str):
    return or_(
        InstallationToken.location_id == resource_id,
        InstallationToken.company_id == resource_id,
    )


def _resource_rank(resource_id: str):
    return case(
        (
            and_(
                InstallationToken.location_id == resource_id,
                InstallationToken.user_type == AppUserType.LOCATION,
            ),
            0,
        ),
        (
            and_(
                InstallationToken.company_id == resource_id,
                InstallationToken.user_type == AppUserType.COMPANY,
            ),
            1,
        ),
        else_=2,
    )


class TokenManager:
    """Installation token access backed by a TokenStore.

    Usage:
        manager = TokenManager(store)
        await manager.save_installation(details)
        token = await manager.get_access_token("loc_123")
    """

    def __init__(self, store: TokenStore):
        self.store = store

    async def find(self, resource_id: str) -> InstallationToken | None:
        """Return the installation record for a company or location id."""
        stmt = (
            select(InstallationToken)
            .where(_resource_filter(resource_id))
            .order_by(_resource_rank(resource_id), InstallationToken.created_at)
            .limit(1)
        )
        async with self.store.session() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def _find_or_none(self, resource_id: str, what: str) -> InstallationToken | None:
        try:
            return await self.find(resource_id)
        except SQLAlchemyError:
            logger.exception("Error getting %s for resource %s", what, resource_id)
            return None

    async def get_access_token(self, resource_id: str) -> str | None:
        record = await self._find_or_none(resource_id, "access token")
        return record.access_token if record else None

    async def get_refresh_token(self, resource_id: str) -> str | None:
        record = await self._find_or_none(resource_id, "refresh token")
        return record.refresh_token if record else None

    async def check_exists(self, resource_id: str) -> bool:
        return await self._find_or_none(resource_id, "installation") is not None

    async def _update(self, resource_id: str, **values) -> bool:
        record = await self.find(resource_id)
        if record is None:
            return False

        async with self.store.session() as session:
            await session.execute(
                update(InstallationToken)
                .where(InstallationToken.id == record.id)
                .values(**values)
            )
            await session.commit()
        return True

    async def set_access_token(self, resource_id: str, token: str) -> bool:
        """Overwrite the access token. Returns False when nothing matched."""
        return await self._update(resource_id, access_token=token)

    async def set_refresh_token(self, resource_id: str, token: str) -> bool:
        """Overwrite the refresh token. Returns False when nothing matched."""
        return await self._update(resource_id, refresh_token=token)

    async def set_token_pair(
        self,
        resource_id: str,
        access_token: str,
        refresh_token: str,
        expires_in: int | None = None,
    ) -> bool:
        """Store a rotated token pair in a single update."""
        values = {"access_token": access_token, "refresh_token": refresh_token}
        if expires_in is not None:
            values["expires_in"] = expires_in
        return await self._update(resource_id, **values)

    async def save_installation(self, details: InstallationDetails) -> InstallationToken:
        """Upsert an installation keyed by (locationId, userType) or (companyId, userType)."""
        if details.location_id:
            where = and_(
                InstallationToken.location_id == details.location_id,
                InstallationToken.user_type == details.user_type,
            )
        else:
            where = and_(
                InstallationToken.company_id == details.company_id,
                InstallationToken.user_type == details.user_type,
            )

        fields = details.model_dump(by_alias=False)
        async with self.store.session() as session:
            result = await session.execute(select(InstallationToken).where(where))
            record = result.scalar_one_or_none()
            if record is None:
                record = InstallationToken(**fields)
                session.add(record)
            else:
                for key, value in fields.items():
                    setattr(record, key, value)
            await session.commit()
            await session.refresh(record)

        logger.info(
            "Saved %s installation for %s",
            details.user_type.value,
            details.resource_id,
        )
        return record

    async def get_company_id_for_location(self, location_id: str) -> str:
        """Return the parent companyId recorded on a location installation."""
        stmt = select(InstallationToken.company_id).where(
            InstallationToken.location_id == location_id,
            InstallationToken.user_type == AppUserType.LOCATION,
        )
        async with self.store.session() as session:
            company_id = (await session.execute(stmt)).scalar_one_or_none()

        if not company_id:
            raise NotFoundError(f"No company ID found for location: {location_id}")
        return company_id

    async def list_installations(self) -> list[InstallationToken]:
        stmt = select(InstallationToken).order_by(InstallationToken.created_at)
        async with self.store.session() as session:
            return list((await session.execute(stmt)).scalars().all())
