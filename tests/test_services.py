# tests/test_services.py

from __future__ import annotations

import pytest

from coletor_client.apis import SessionApi, TaskApi, TenantApi
from coletor_client.models import ViewMode
from coletor_client.resolver import TaskListResolver
from coletor_client.services import ColetorService
from coletor_client.workflow import ColetorWorkflow

from .conftest import BASE_URL
from .fakes import FakeResponse


@pytest.fixture()
def coletor_service(app_settings, http_client) -> ColetorService:
    return ColetorService(
        tenant_api=TenantApi(http_client),
        session_api=SessionApi(http_client),
        task_api=TaskApi(http_client),
        request_timeout_seconds=app_settings.timeout_seconds,
    )


def test_workflow_exposes_service_timeout(coletor_service, configured_store):
    workflow = ColetorWorkflow(coletor_service, configured_store)

    assert workflow.service is coletor_service
    assert workflow.service.request_timeout_seconds == 7


def test_login_without_task_list_then_resolver_fetches_open_tasks(coletor_service, identity, fake_session):
    fake_session.responses.extend(
        [
            FakeResponse({"Ok": True, "IdUsuario": 7}),
            FakeResponse({"Ok": True, "TarefasLivres": [{"IdTarefa": 9, "NomeOperacao": "PICKING"}]}),
        ]
    )

    login_result = coletor_service.login("OP001", "123456", "T-ACME")
    view = TaskListResolver(coletor_service).resolve(identity, tasks_hint=login_result)

    assert view.mode is ViewMode.LIST_OF_TASKS
    assert [task.id for task in view.tasks] == [9]
    assert [call["url"] for call in fake_session.calls] == [
        BASE_URL + "/api/coletor/login",
        BASE_URL + "/api/coletor/TarefasLivresUsuario",
    ]
