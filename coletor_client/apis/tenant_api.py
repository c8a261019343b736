from __future__ import annotations

from datetime import date
import logging
from urllib.parse import quote

from coletor_client.apis.decoding import TENANT_CODE_KEYS, first_present
from coletor_client.config import ConfigurationError
from coletor_client.http import ApplicationError, HttpClient
from coletor_client.storage import normalize_service_url

logger = logging.getLogger(__name__)


class TenantValidationError(ConfigurationError, ApplicationError):
    pass


def build_day_token(day: date | None = None) -> str:
    # Not a credential: the backend only uses it to gate tenant lookups.
    day = day or date.today()
    return f"D{day.day}M{day.month}Y{day.year}-TOKEN"


class TenantApi:
    validation_path_template = "/api/valida_tenant/by_name/tn={tenant}/t={token}"

    def __init__(self, http_client: HttpClient):
        self._http_client = http_client

    def validate(self, base_url: str, tenant_input: str, day: date | None = None) -> str:
        base_url = normalize_service_url(base_url)
        if not base_url:
            raise ConfigurationError("URL de serviços não configurada.")
        tenant = tenant_input.strip()
        if not tenant:
            raise ConfigurationError("Código da empresa não informado.")

        path = self.validation_path_template.format(
            tenant=quote(tenant, safe=""),
            token=build_day_token(day),
        )
        payload = self._http_client.get_absolute_json(f"{base_url}{path}")

        code = first_present(payload, TENANT_CODE_KEYS)
        if code is None or not str(code).strip():
            raise TenantValidationError("Retorno da API inválido: tenatCode não encontrado.")

        logger.info("Tenant %r validated", tenant)
        return str(code).strip()
