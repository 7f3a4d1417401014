"""Tests for the license authority: verify, issue, toggle."""

import json
from datetime import timedelta

import pytest

from ghostguard.common.config import GhostGuardSettings
from ghostguard.common.exceptions import (
    HwidMismatchError,
    LicenseExpiredError,
    LicenseInactiveError,
    LicenseNotFoundError,
    MissingFieldsError,
    UnauthorizedError,
    UnknownLicenseError,
)
from ghostguard.common.models import as_utc, utcnow
from ghostguard.identity.models import CustomerModel
from ghostguard.licensing.keygen import verify_assertion
from ghostguard.licensing.service import LicenseAuthority


LICENSE_SECRET = "test-license-secret-for-unit-tests"


def make_settings(**overrides) -> GhostGuardSettings:
    defaults = {
        "license_secret": LICENSE_SECRET,
        "db_url": "sqlite+aiosqlite://",
    }
    defaults.update(overrides)
    return GhostGuardSettings(**defaults)


@pytest.fixture
def svc():
    return LicenseAuthority(make_settings())


async def _issue(db, svc, days_valid: int = 0) -> str:
    async with db.get_session() as session:
        lic = await svc.issue_license(session, days_valid)
        return lic.license_key


class TestIssue:
    async def test_issue_permanent(self, db, svc):
        async with db.get_session() as session:
            lic = await svc.issue_license(session)
            assert lic.status == "ACTIVE"
            assert lic.expires_at is None
            assert lic.hwid is None
            assert lic.license_key.startswith("GG-")

    async def test_issue_with_expiry(self, db, svc):
        async with db.get_session() as session:
            lic = await svc.issue_license(session, days_valid=30)
            delta = as_utc(lic.expires_at) - utcnow()
            assert timedelta(days=29, hours=23) < delta <= timedelta(days=30)

    async def test_custom_prefix(self, db):
        svc = LicenseAuthority(make_settings(license_prefix="GX"))
        key = await _issue(db, svc)
        assert key.startswith("GX-")

    async def test_list_newest_first(self, db, svc):
        first = await _issue(db, svc)
        second = await _issue(db, svc)
        async with db.get_session() as session:
            keys = [lic.license_key for lic in await svc.list_licenses(session)]
        assert keys == [second, first]


class TestVerify:
    async def test_missing_key(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(MissingFieldsError) as exc_info:
                await svc.verify(session, "")
        assert exc_info.value.code == "MISSING_KEY"

    async def test_unknown_key(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(UnknownLicenseError) as exc_info:
                await svc.verify(session, "GG-00000000-00000000")
        assert exc_info.value.code == "NOT_FOUND"

    async def test_inactive_status_is_reason(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            await svc.set_status(session, key, "SUSPENDED")
        async with db.get_session() as session:
            with pytest.raises(LicenseInactiveError) as exc_info:
                await svc.verify(session, key)
        assert exc_info.value.code == "SUSPENDED"

    async def test_expired(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            lic = await svc.get_license(session, key)
            lic.expires_at = utcnow() - timedelta(minutes=1)
        async with db.get_session() as session:
            with pytest.raises(LicenseExpiredError):
                await svc.verify(session, key)

    async def test_valid_returns_signed_assertion(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            result = await svc.verify(session, key)
        assert result["valid"] is True
        assert verify_assertion(result["payload"], result["signature"], LICENSE_SECRET)
        payload = json.loads(result["payload"])
        assert payload["license_key"] == key
        assert payload["status"] == "ACTIVE"
        assert payload["expires_at"] is None

    async def test_valid_updates_last_seen(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            await svc.verify(session, key)
        async with db.get_session() as session:
            lic = await svc.get_license(session, key)
            assert lic.last_seen is not None

    async def test_first_hwid_binds(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            await svc.verify(session, key, hwid="machine-a")
        async with db.get_session() as session:
            lic = await svc.get_license(session, key)
            assert lic.hwid == "machine-a"
        async with db.get_session() as session:
            result = await svc.verify(session, key, hwid="machine-a")
            assert result["valid"] is True

    async def test_different_hwid_mismatch(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            await svc.verify(session, key, hwid="machine-a")
        async with db.get_session() as session:
            with pytest.raises(HwidMismatchError) as exc_info:
                await svc.verify(session, key, hwid="machine-b")
        assert exc_info.value.code == "HWID_MISMATCH"

    async def test_bound_license_without_hwid_still_valid(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            await svc.verify(session, key, hwid="machine-a")
        async with db.get_session() as session:
            result = await svc.verify(session, key)
            assert result["valid"] is True


class TestStatus:
    async def test_set_status_free_text(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            await svc.set_status(session, key, "whatever-you-like")
        async with db.get_session() as session:
            assert (await svc.get_license(session, key)).status == "whatever-you-like"

    async def test_set_status_missing_fields(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(MissingFieldsError):
                await svc.set_status(session, "", "ACTIVE")

    async def test_owner_toggle(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            owner = CustomerModel(username="o", password="x", license_key=key)
            session.add(owner)
            await session.flush()
            token = owner.id
        async with db.get_session() as session:
            affected = await svc.set_status_via_owner_token(session, token, "PAUSED")
        assert affected == key
        async with db.get_session() as session:
            assert (await svc.get_license(session, key)).status == "PAUSED"

    async def test_owner_toggle_unknown_token(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(UnauthorizedError):
                await svc.set_status_via_owner_token(session, "nope", "PAUSED")

    async def test_owner_dashboard(self, db, svc):
        key = await _issue(db, svc)
        async with db.get_session() as session:
            owner = CustomerModel(username="o", password="x", license_key=key)
            session.add(owner)
            await session.flush()
            token = owner.id
        async with db.get_session() as session:
            data = await svc.owner_dashboard(session, token)
        assert data == {"license_key": key, "status": "ACTIVE", "expires_at": None}

    async def test_owner_dashboard_license_gone(self, db, svc):
        # SQLite does not enforce the foreign key, so a dangling owner is possible
        async with db.get_session() as session:
            owner = CustomerModel(username="o", password="x", license_key="GG-MISSING")
            session.add(owner)
            await session.flush()
            token = owner.id
        async with db.get_session() as session:
            with pytest.raises(LicenseNotFoundError):
                await svc.owner_dashboard(session, token)
