from __future__ import annotations

import logging
from typing import Any

from coletor_client.apis.decoding import error_message, is_ok, task_from_payload, tasks_from_payload
from coletor_client.http import CommunicationError, HttpClient
from coletor_client.models import TaskListResult, TaskResult

logger = logging.getLogger(__name__)


class TaskApi:
    open_tasks_path = "/api/coletor/TarefasLivresUsuario"
    start_path = "/api/coletor/tarefa/inicia"
    pause_path = "/api/coletor/tarefa/pausa"
    data_path = "/api/coletor/tarefa/dados"
    finish_path = "/api/coletor/tarefa/encerra"
    cancel_path = "/api/coletor/tarefa/cancela"
    new_box_path = "/api/coletor/tarefa/novacaixa"

    def __init__(self, http_client: HttpClient):
        self._http_client = http_client

    def open_tasks(self, tenant_code: str, user_id: int) -> TaskListResult:
        payload = self._http_client.post_json(
            self.open_tasks_path,
            {"tenantCode": tenant_code, "idTarefa": 0, "idUsuario": user_id},
        )
        if not is_ok(payload):
            return TaskListResult(ok=False, error_message=error_message(payload, "Falha ao listar tarefas"))
        try:
            tasks = tasks_from_payload(payload.get("TarefasLivres"))
        except ValueError as exc:
            raise CommunicationError(f"Invalid task list: {exc}") from exc
        return TaskListResult(ok=True, tasks=tasks)

    def start(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._call(self.start_path, tenant_code, task_id, user_id, operation_name)

    def task_data(
        self,
        tenant_code: str,
        task_id: int,
        user_id: int,
        operation_name: str,
        barcode: str | None = None,
    ) -> TaskResult:
        extra = {"codigoBarras": barcode} if barcode else None
        return self._call(self.data_path, tenant_code, task_id, user_id, operation_name, extra)

    def pause(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._call(self.pause_path, tenant_code, task_id, user_id, operation_name)

    def finish(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._call(self.finish_path, tenant_code, task_id, user_id, operation_name)

    def cancel(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._call(self.cancel_path, tenant_code, task_id, user_id, operation_name)

    def new_box(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._call(self.new_box_path, tenant_code, task_id, user_id, operation_name)

    @staticmethod
    def build_envelope(
        tenant_code: str,
        task_id: int,
        user_id: int,
        operation_name: str,
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        envelope: dict[str, Any] = {
            "tenantCode": tenant_code,
            "idTarefa": task_id,
            "idUsuario": user_id,
            "nomeOperacao": operation_name,
        }
        if extra:
            envelope.update(extra)
        return envelope

    def _call(
        self,
        path: str,
        tenant_code: str,
        task_id: int,
        user_id: int,
        operation_name: str,
        extra: dict[str, Any] | None = None,
    ) -> TaskResult:
        payload = self._http_client.post_json(
            path,
            self.build_envelope(tenant_code, task_id, user_id, operation_name, extra),
        )
        if not is_ok(payload):
            message = error_message(payload, "Erro desconhecido")
            logger.info("Task %s rejected by %s: %s", task_id, path, message)
            return TaskResult(ok=False, error_message=message)

        task_payload = payload.get("DadosTarefa")
        if not isinstance(task_payload, dict) or not task_payload:
            return TaskResult(ok=True)
        try:
            return TaskResult(ok=True, task=task_from_payload(task_payload))
        except ValueError as exc:
            raise CommunicationError(f"Invalid task data from {path}: {exc}") from exc
