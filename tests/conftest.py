# tests/conftest.py

from __future__ import annotations

import pytest

from coletor_client.config import AppSettings
from coletor_client.http import HttpClient
from coletor_client.models import SessionIdentity
from coletor_client.storage import SettingsStore

from .fakes import FakeColetorService, FakeRequestsSession, InMemoryPersistence

BASE_URL = "https://coletor.test"


@pytest.fixture()
def app_settings(tmp_path) -> AppSettings:
    return AppSettings(
        settings_path=str(tmp_path / "settings.json"),
        timeout_seconds=7,
        refocus_delay_ms=100,
        log_dir=str(tmp_path / "logs"),
        log_level="INFO",
    )


@pytest.fixture()
def store() -> SettingsStore:
    return SettingsStore("memory://settings", persistence=InMemoryPersistence())


@pytest.fixture()
def configured_store(store: SettingsStore) -> SettingsStore:
    store.save_settings(BASE_URL + "/", "ACME")
    store.save_validated_tenant_code("T-ACME")
    return store


@pytest.fixture()
def fake_session() -> FakeRequestsSession:
    return FakeRequestsSession()


@pytest.fixture()
def http_client(app_settings, configured_store, fake_session) -> HttpClient:
    return HttpClient(app_settings, configured_store, session=fake_session)


@pytest.fixture()
def service() -> FakeColetorService:
    return FakeColetorService()


@pytest.fixture()
def identity() -> SessionIdentity:
    return SessionIdentity(tenant_code="T-ACME", user_id=7)
