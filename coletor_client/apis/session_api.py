from __future__ import annotations

import logging

from coletor_client.apis.decoding import error_message, is_ok, task_from_payload, tasks_from_payload
from coletor_client.http import CommunicationError, HttpClient
from coletor_client.models import LoginResult, LogoutResult

logger = logging.getLogger(__name__)


class SessionApi:
    login_path = "/api/coletor/login"
    logout_path = "/api/coletor/logout"

    def __init__(self, http_client: HttpClient):
        self._http_client = http_client

    def login(self, tenant_code: str, user_code: str, password: str) -> LoginResult:
        payload = self._http_client.post_json(
            self.login_path,
            {"tenantCode": tenant_code, "login": user_code, "senha": password},
        )
        if not is_ok(payload):
            return LoginResult(ok=False, error_message=error_message(payload, "Falha no login"))

        try:
            user_id = int(payload.get("IdUsuario") or 0)
        except (TypeError, ValueError):
            user_id = 0
        if user_id <= 0:
            raise CommunicationError("Login response did not include IdUsuario")

        active_payload = payload.get("TarefaUsuario")
        try:
            if isinstance(active_payload, dict) and active_payload:
                # An active task wins over the free-task list.
                return LoginResult(ok=True, user_id=user_id, active_task=task_from_payload(active_payload))
            # No free-task list in the reply means the caller has to fetch it.
            open_tasks = tasks_from_payload(payload["TarefasLivres"]) if "TarefasLivres" in payload else None
            return LoginResult(ok=True, user_id=user_id, open_tasks=open_tasks)
        except ValueError as exc:
            raise CommunicationError(f"Invalid task data in login response: {exc}") from exc

    def logout(self, tenant_code: str, user_id: int) -> LogoutResult:
        payload = self._http_client.post_json(
            self.logout_path,
            {"tenantCode": tenant_code, "idUsuario": user_id},
        )
        if is_ok(payload):
            return LogoutResult(ok=True)
        return LogoutResult(ok=False, error_message=error_message(payload, "Erro ao sair"))
