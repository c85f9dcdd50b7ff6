"""Shared fixtures: settings, a clean store, and an app wired to it."""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from dividend_catalog.api import create_app
from dividend_catalog.config import Settings
from dividend_catalog.storage import MemStorage
from dividend_catalog.user_auth import UserCreate, ensure_admin_user, issue_tokens, register_user


class FakeClock:
    """Deterministic clock: each call is one second after the previous one."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now = self.now + timedelta(seconds=1)
        return self.now


def make_dividend_payload(**overrides) -> dict:
    """Wire-format (camelCase) body for a valid dividend record."""
    payload = {
        "companyName": "Commercial Bank PLC",
        "ticker": "COMB",
        "sector": "Banking",
        "established": 1969,
        "quotedDate": 1970,
        "fyEnding": "December",
        "dividendAmount": "6.50",
        "frequency": "annual",
        "yearWiseData": ["2023:6.50", "2022:5.00"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        seed_sample_data=False,
        default_user_is_admin=False,
        admin_username=None,
        admin_password=None,
        jwt_secret_key="test-secret-key",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(clock):
    return MemStorage(default_user_is_admin=False, clock=clock)


@pytest.fixture
def client(settings, storage):
    return TestClient(create_app(settings, storage))


@pytest.fixture
def admin_headers(settings, storage):
    admin = ensure_admin_user(storage, "admin", "admin-pass")
    token = issue_tokens(admin, settings).access_token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(settings, storage):
    user = register_user(storage, UserCreate(username="bob", password="bob-pass"))
    token = issue_tokens(user, settings).access_token
    return {"Authorization": f"Bearer {token}"}
