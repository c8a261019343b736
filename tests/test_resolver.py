# tests/test_resolver.py

from __future__ import annotations

import pytest

from coletor_client.http import ApplicationError
from coletor_client.models import LoginResult, TaskListResult, ViewMode
from coletor_client.resolver import TaskListResolver

from .fakes import make_task


def test_active_task_hint_routes_straight_to_session(service, identity):
    active = make_task()
    hint = LoginResult(ok=True, user_id=7, active_task=active)

    view = TaskListResolver(service).resolve(identity, tasks_hint=hint)

    assert view.mode is ViewMode.ACTIVE_SESSION
    assert view.active_task is active
    assert service.calls == []


def test_login_task_list_hint_is_used_without_fetching(service, identity):
    tasks = [make_task(id=1), make_task(id=2)]

    view = TaskListResolver(service).resolve(identity, LoginResult(ok=True, user_id=7, open_tasks=tasks))

    assert view.mode is ViewMode.LIST_OF_TASKS
    assert [task.id for task in view.tasks] == [1, 2]
    assert service.calls == []


def test_login_hint_without_task_list_fetches_open_tasks(service, identity):
    service.queue("get_open_tasks", TaskListResult(ok=True, tasks=[make_task(id=9)]))

    view = TaskListResolver(service).resolve(identity, LoginResult(ok=True, user_id=7))

    assert view.mode is ViewMode.LIST_OF_TASKS
    assert [task.id for task in view.tasks] == [9]
    assert service.called("get_open_tasks") == [("T-ACME", 7)]


def test_empty_open_tasks_yields_empty_list(service, identity):
    service.queue("get_open_tasks", TaskListResult(ok=True, tasks=[]))

    view = TaskListResolver(service).resolve(identity)

    assert view.mode is ViewMode.LIST_OF_TASKS
    assert view.tasks == []
    assert view.active_task is None
    assert service.called("get_open_tasks") == [("T-ACME", 7)]


def test_rejected_listing_raises_application_error(service, identity):
    service.queue("get_open_tasks", TaskListResult(ok=False, error_message="Usuário inativo"))

    with pytest.raises(ApplicationError, match="Usuário inativo"):
        TaskListResolver(service).resolve(identity)
