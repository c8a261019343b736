from __future__ import annotations

from datetime import date

from coletor_client.apis import SessionApi, TaskApi, TenantApi
from coletor_client.models import LoginResult, LogoutResult, TaskListResult, TaskResult


class ColetorService:
    """Single entry point for every backend call the collector makes.

    Each method is one attempt. Transport failures raise
    ``CommunicationError``; a missing service URL raises
    ``ConfigurationError``; ``Ok: false`` answers come back as results.
    """

    def __init__(
        self,
        tenant_api: TenantApi,
        session_api: SessionApi,
        task_api: TaskApi,
        request_timeout_seconds: int,
    ):
        self._tenant_api = tenant_api
        self._session_api = session_api
        self._task_api = task_api
        self._request_timeout_seconds = request_timeout_seconds

    @property
    def request_timeout_seconds(self) -> int:
        return self._request_timeout_seconds

    def validate_tenant(self, base_url: str, tenant_input: str, day: date | None = None) -> str:
        return self._tenant_api.validate(base_url, tenant_input, day)

    def login(self, user_code: str, password: str, tenant_code: str) -> LoginResult:
        return self._session_api.login(tenant_code, user_code, password)

    def logout(self, tenant_code: str, user_id: int) -> LogoutResult:
        return self._session_api.logout(tenant_code, user_id)

    def get_open_tasks(self, tenant_code: str, user_id: int) -> TaskListResult:
        return self._task_api.open_tasks(tenant_code, user_id)

    def start_task(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._task_api.start(tenant_code, task_id, user_id, operation_name)

    def submit_scan(
        self,
        tenant_code: str,
        task_id: int,
        user_id: int,
        operation_name: str,
        barcode: str | None = None,
    ) -> TaskResult:
        return self._task_api.task_data(tenant_code, task_id, user_id, operation_name, barcode)

    def pause_task(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._task_api.pause(tenant_code, task_id, user_id, operation_name)

    def finish_task(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._task_api.finish(tenant_code, task_id, user_id, operation_name)

    def cancel_task(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._task_api.cancel(tenant_code, task_id, user_id, operation_name)

    def generate_new_box(self, tenant_code: str, task_id: int, user_id: int, operation_name: str) -> TaskResult:
        return self._task_api.new_box(tenant_code, task_id, user_id, operation_name)
