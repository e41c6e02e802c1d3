"""Tests for TokenManager installation record access."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from ghl_bridge.errors import NotFoundError
from ghl_bridge.models.token import AppUserType, InstallationToken
from ghl_bridge.tests.conftest import SAMPLE_COMPANY_ID, SAMPLE_LOCATION_ID


async def _count(store) -> int:
    async with store.session() as session:
        return (await session.execute(select(func.count(InstallationToken.id)))).scalar_one()


class TestLookup:
    @pytest.mark.asyncio
    async def test_get_access_token_by_location_id(self, manager, install):
        await install(access_token="loc_access")

        assert await manager.get_access_token(SAMPLE_LOCATION_ID) == "loc_access"

    @pytest.mark.asyncio
    async def test_get_access_token_by_company_id(self, manager, install):
        await install(
            user_type=AppUserType.COMPANY,
            location_id=None,
            access_token="comp_access",
        )

        assert await manager.get_access_token(SAMPLE_COMPANY_ID) == "comp_access"

    @pytest.mark.asyncio
    async def test_unknown_resource_returns_none(self, manager, install):
        await install()

        assert await manager.get_access_token("nope") is None
        assert await manager.get_refresh_token("nope") is None
        assert await manager.check_exists("nope") is False

    @pytest.mark.asyncio
    async def test_company_record_wins_over_location_carrying_company_id(self, manager, install):
        # Minted location tokens carry their parent companyId.
        await install(access_token="loc_access")
        await install(
            user_type=AppUserType.COMPANY,
            location_id=None,
            access_token="comp_access",
        )

        assert await manager.get_access_token(SAMPLE_COMPANY_ID) == "comp_access"
        assert await manager.get_access_token(SAMPLE_LOCATION_ID) == "loc_access"

    @pytest.mark.asyncio
    async def test_check_exists(self, manager, install):
        assert await manager.check_exists(SAMPLE_LOCATION_ID) is False
        await install()
        assert await manager.check_exists(SAMPLE_LOCATION_ID) is True


class TestUpdates:
    @pytest.mark.asyncio
    async def test_set_access_and_refresh_token(self, manager, install):
        await install()

        assert await manager.set_access_token(SAMPLE_LOCATION_ID, "access_2") is True
        assert await manager.set_refresh_token(SAMPLE_LOCATION_ID, "refresh_2") is True

        assert await manager.get_access_token(SAMPLE_LOCATION_ID) == "access_2"
        assert await manager.get_refresh_token(SAMPLE_LOCATION_ID) == "refresh_2"

    @pytest.mark.asyncio
    async def test_set_on_missing_resource_is_noop(self, manager, store):
        assert await manager.set_access_token("missing", "x") is False
        assert await manager.set_refresh_token("missing", "x") is False
        assert await _count(store) == 0

    @pytest.mark.asyncio
    async def test_set_token_pair_updates_both(self, manager, install):
        await install()

        await manager.set_token_pair(SAMPLE_LOCATION_ID, "access_9", "refresh_9", expires_in=60)

        record = await manager.find(SAMPLE_LOCATION_ID)
        assert record.access_token == "access_9"
        assert record.refresh_token == "refresh_9"
        assert record.expires_in == 60

    @pytest.mark.asyncio
    async def test_update_only_touches_matching_record(self, manager, install):
        await install(location_id="loc_a", access_token="a")
        await install(location_id="loc_b", access_token="b")

        await manager.set_access_token("loc_a", "a2")

        assert await manager.get_access_token("loc_a") == "a2"
        assert await manager.get_access_token("loc_b") == "b"


class TestSaveInstallation:
    @pytest.mark.asyncio
    async def test_save_is_idempotent_per_location(self, manager, install, store):
        await install(access_token="first")
        await install(access_token="second")

        assert await _count(store) == 1
        assert await manager.get_access_token(SAMPLE_LOCATION_ID) == "second"

    @pytest.mark.asyncio
    async def test_save_is_idempotent_per_company(self, manager, install, store):
        await install(user_type=AppUserType.COMPANY, location_id=None, access_token="first")
        await install(user_type=AppUserType.COMPANY, location_id=None, access_token="second")

        assert await _count(store) == 1
        assert await manager.get_access_token(SAMPLE_COMPANY_ID) == "second"

    @pytest.mark.asyncio
    async def test_locations_of_one_company_are_separate_records(self, manager, install, store):
        await install(location_id="loc_a")
        await install(location_id="loc_b")
        await install(user_type=AppUserType.COMPANY, location_id=None)

        assert await _count(store) == 3

    @pytest.mark.asyncio
    async def test_saved_record_fields(self, install):
        record = await install()

        assert record.user_type == AppUserType.LOCATION
        assert record.company_id == SAMPLE_COMPANY_ID
        assert record.location_id == SAMPLE_LOCATION_ID
        assert record.token_type.value == "Bearer"
        assert record.resource_id == SAMPLE_LOCATION_ID
        assert record.created_at is not None


class TestCompanyForLocation:
    @pytest.mark.asyncio
    async def test_returns_parent_company(self, manager, install):
        await install()

        assert await manager.get_company_id_for_location(SAMPLE_LOCATION_ID) == SAMPLE_COMPANY_ID

    @pytest.mark.asyncio
    async def test_missing_location_raises(self, manager):
        with pytest.raises(NotFoundError) as exc_info:
            await manager.get_company_id_for_location("loc_missing")

        assert "loc_missing" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_location_without_company_raises(self, manager, install):
        await install(company_id=None)

        with pytest.raises(NotFoundError):
            await manager.get_company_id_for_location(SAMPLE_LOCATION_ID)
