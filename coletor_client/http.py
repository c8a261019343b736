from __future__ import annotations

import logging
from typing import Any

import requests

from coletor_client.config import AppSettings, ConfigurationError
from coletor_client.storage import SettingsStore, normalize_service_url

logger = logging.getLogger(__name__)


class CommunicationError(RuntimeError):
    pass


class ApiHttpError(CommunicationError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class ApplicationError(RuntimeError):
    """The backend answered, but refused the request (``Ok: false``)."""


class HttpClient:
    def __init__(
        self,
        settings: AppSettings,
        store: SettingsStore,
        session: requests.Session | None = None,
    ):
        self._settings = settings
        self._store = store
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def base_url(self) -> str:
        base_url = normalize_service_url(self._store.get_settings().service_url)
        if not base_url:
            raise ConfigurationError("URL de serviços não configurada.")
        return base_url

    def post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url()}{path}"
        return self.post_absolute_json(url, payload)

    def post_absolute_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("POST %s", url)
        try:
            response = self._session.post(
                url,
                json=payload,
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("POST %s failed: %s", url, exc)
            raise CommunicationError(f"POST {url} failed: {exc}") from exc
        return self._decode(response)

    def get_json(self, path: str) -> dict[str, Any]:
        url = f"{self.base_url()}{path}"
        return self.get_absolute_json(url)

    def get_absolute_json(self, url: str) -> dict[str, Any]:
        logger.debug("GET %s", url)
        try:
            response = self._session.get(url, timeout=self._settings.timeout_seconds)
        except requests.RequestException as exc:
            logger.warning("GET %s failed: %s", url, exc)
            raise CommunicationError(f"GET {url} failed: {exc}") from exc
        return self._decode(response)

    @staticmethod
    def _decode(response: requests.Response) -> dict[str, Any]:
        if response.ok:
            if not response.content:
                return {}
            try:
                parsed = response.json()
            except ValueError as exc:
                raise CommunicationError(f"Invalid JSON from {response.url}") from exc
            if not isinstance(parsed, dict):
                raise CommunicationError(f"Unexpected response shape from {response.url}")
            return parsed

        # Some backends answer Ok:false envelopes with a 4xx status.
        try:
            parsed = response.json()
        except ValueError:
            parsed = None
        if isinstance(parsed, dict) and "Ok" in parsed:
            return parsed

        message = response.text[:500]
        logger.warning("HTTP %s from %s", response.status_code, response.url)
        raise ApiHttpError(
            status_code=response.status_code,
            message=f"HTTP {response.status_code}: {message}",
        )
