# tests/test_config.py

from __future__ import annotations

import pytest

from coletor_client.config import AppSettings, ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in (
        "COLETOR_SETTINGS_PATH",
        "COLETOR_TIMEOUT_SECONDS",
        "COLETOR_REFOCUS_DELAY_MS",
        "COLETOR_LOG_DIR",
        "COLETOR_LOG_LEVEL",
    ):
        # setenv first so teardown also removes values the .env loader writes
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("COLETOR_ENV_FILE", str(tmp_path / "missing.env"))
    monkeypatch.chdir(tmp_path)


def test_from_env_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))

    settings = AppSettings.from_env()

    assert settings.settings_path == str(tmp_path / "ColetorClient" / "settings.json")
    assert settings.timeout_seconds == 30
    assert settings.refocus_delay_ms == 100
    assert settings.log_dir == str(tmp_path / "ColetorClient" / "logs")
    assert settings.log_level == "INFO"


def test_from_env_reads_dotenv_without_overriding_environment(monkeypatch, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text(
        "# collector\nCOLETOR_TIMEOUT_SECONDS=12\nCOLETOR_LOG_LEVEL='debug'\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("COLETOR_ENV_FILE", str(env_file))
    monkeypatch.setenv("COLETOR_LOG_LEVEL", "WARNING")

    settings = AppSettings.from_env()

    assert settings.timeout_seconds == 12
    assert settings.log_level == "WARNING"


def test_non_integer_timeout_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("COLETOR_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ConfigurationError, match="COLETOR_TIMEOUT_SECONDS"):
        AppSettings.from_env()


def test_validate_reports_every_problem(tmp_path):
    settings = AppSettings(
        settings_path=str(tmp_path / "s.json"),
        timeout_seconds=0,
        refocus_delay_ms=-1,
        log_dir=str(tmp_path),
        log_level="LOUD",
    )

    with pytest.raises(ConfigurationError) as excinfo:
        settings.validate()

    message = str(excinfo.value)
    assert "COLETOR_TIMEOUT_SECONDS" in message
    assert "COLETOR_REFOCUS_DELAY_MS" in message
    assert "COLETOR_LOG_LEVEL" in message
