from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import sys


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class AppSettings:
    settings_path: str
    timeout_seconds: int
    refocus_delay_ms: int
    log_dir: str
    log_level: str

    @staticmethod
    def from_env() -> "AppSettings":
        _load_dotenv_if_present()

        default_settings_path = os.path.join(
            os.getenv("LOCALAPPDATA", os.getcwd()),
            "ColetorClient",
            "settings.json",
        )
        settings_path = os.getenv("COLETOR_SETTINGS_PATH", "").strip() or default_settings_path

        timeout_seconds = _int_from_env("COLETOR_TIMEOUT_SECONDS", 30)
        refocus_delay_ms = _int_from_env("COLETOR_REFOCUS_DELAY_MS", 100)

        default_log_dir = os.path.join(os.path.dirname(settings_path) or os.getcwd(), "logs")
        log_dir = os.getenv("COLETOR_LOG_DIR", "").strip() or default_log_dir
        log_level = os.getenv("COLETOR_LOG_LEVEL", "INFO").strip().upper()

        settings = AppSettings(
            settings_path=settings_path,
            timeout_seconds=timeout_seconds,
            refocus_delay_ms=refocus_delay_ms,
            log_dir=log_dir,
            log_level=log_level,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        problems = []
        if not self.settings_path:
            problems.append("COLETOR_SETTINGS_PATH must not be empty")
        if self.timeout_seconds <= 0:
            problems.append("COLETOR_TIMEOUT_SECONDS must be greater than 0")
        if self.refocus_delay_ms < 0:
            problems.append("COLETOR_REFOCUS_DELAY_MS must be 0 or greater")
        if not isinstance(logging.getLevelName(self.log_level), int):
            problems.append("COLETOR_LOG_LEVEL must be one of: DEBUG, INFO, WARNING, ERROR")

        if problems:
            raise ConfigurationError("Invalid settings: " + "; ".join(problems))


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _load_dotenv_if_present(file_name: str = ".env") -> None:
    for candidate in _candidate_env_files(file_name):
        _load_env_file(candidate)


def _candidate_env_files(file_name: str) -> list[Path]:
    candidates: list[Path] = []

    explicit = os.getenv("COLETOR_ENV_FILE", "").strip()
    if explicit:
        candidates.append(Path(explicit).expanduser())

    candidates.append(Path.cwd() / file_name)

    if getattr(sys, "frozen", False):
        exe_dir = Path(sys.executable).resolve().parent
        candidates.append(exe_dir / file_name)
    else:
        project_root = Path(__file__).resolve().parent.parent
        candidates.append(project_root / file_name)

    unique_candidates: list[Path] = []
    seen: set[str] = set()
    for path in candidates:
        normalized = str(path.resolve()) if path.exists() else str(path)
        if normalized in seen:
            continue
        seen.add(normalized)
        unique_candidates.append(path)
    return unique_candidates


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return

    try:
        with path.open("r", encoding="utf-8") as env_file:
            for raw_line in env_file:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")

                if key and key not in os.environ:
                    os.environ[key] = value
    except OSError:
        return
