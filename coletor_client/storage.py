from __future__ import annotations

import json
import logging
import os
import threading

from msal_extensions import FilePersistence, FilePersistenceWithDataProtection
from msal_extensions.persistence import PersistenceNotFound

from coletor_client.models import TenantConfig

logger = logging.getLogger(__name__)

KEY_URL_APIS = "@urlApis"
KEY_TENANT_CODE_INPUT = "@tenantCodeInput"
KEY_VALIDATED_TENANT_CODE = "@validatedTenantCode"
KEY_USER_ID = "@userId"


def normalize_service_url(url: str) -> str:
    return url.strip().rstrip("/")


class SettingsStore:
    """Persists the collector's tenant settings as string values under fixed keys.

    All four keys share one JSON document; every save re-reads it and rewrites
    only its own keys, so writes to different keys never clobber each other.
    """

    def __init__(self, path: str, persistence=None):
        self._path = path
        self._persistence = persistence if persistence is not None else self._build_persistence(path)
        self._lock = threading.Lock()

    @staticmethod
    def _build_persistence(path: str):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            return FilePersistenceWithDataProtection(path)
        except Exception:
            return FilePersistence(path)

    @property
    def path(self) -> str:
        return self._path

    def get_settings(self) -> TenantConfig:
        values = self._read_values()
        return TenantConfig(
            service_url=values.get(KEY_URL_APIS, ""),
            tenant_input=values.get(KEY_TENANT_CODE_INPUT, ""),
            validated_tenant_code=values.get(KEY_VALIDATED_TENANT_CODE, ""),
            user_id=_parse_user_id(values.get(KEY_USER_ID, "")),
        )

    def save_settings(self, url: str, tenant_input: str) -> None:
        self._write_values(
            {
                KEY_URL_APIS: normalize_service_url(url),
                KEY_TENANT_CODE_INPUT: tenant_input.strip(),
            }
        )

    def save_validated_tenant_code(self, code: str) -> None:
        self._write_values({KEY_VALIDATED_TENANT_CODE: code})

    def save_user_id(self, user_id: int) -> None:
        self._write_values({KEY_USER_ID: str(int(user_id))})

    def _read_values(self) -> dict[str, str]:
        try:
            raw = self._persistence.load()
        except PersistenceNotFound:
            return {}
        except OSError as exc:
            logger.warning("Failed to read settings from %s: %s", self._path, exc)
            return {}

        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Settings file %s is not valid JSON; ignoring it", self._path)
            return {}
        if not isinstance(parsed, dict):
            return {}
        return {str(key): str(value) for key, value in parsed.items() if value is not None}

    def _write_values(self, updates: dict[str, str]) -> None:
        with self._lock:
            values = self._read_values()
            values.update(updates)
            self._persistence.save(json.dumps(values))
        logger.debug("Saved settings keys: %s", ", ".join(sorted(updates)))


def _parse_user_id(raw: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0
