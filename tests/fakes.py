# tests/fakes.py

from __future__ import annotations

import json
import threading
from typing import Any

from coletor_client.models import (
    LoginResult,
    LogoutResult,
    Task,
    TaskListResult,
    TaskResult,
    TaskStatus,
)


def make_task(**overrides: Any) -> Task:
    values: dict[str, Any] = {
        "id": 42,
        "operation_name": "INVENTÁRIO",
        "description": "Inventário - Setor A",
        "instruction": "Leia a posição A-01",
        "status": TaskStatus.IN_PROGRESS,
        "status_label": "EM ANDAMENTO",
    }
    values.update(overrides)
    return Task(**values)


class InMemoryPersistence:
    """Stand-in for msal_extensions file persistence."""

    def __init__(self, content: str = "") -> None:
        self.content = content
        self.saves = 0

    def save(self, content: str) -> None:
        self.content = content
        self.saves += 1

    def load(self) -> str:
        return self.content


class FakeResponse:
    def __init__(
        self,
        payload: Any = None,
        status_code: int = 200,
        text: str | None = None,
        url: str = "https://coletor.test/api",
    ) -> None:
        self.status_code = status_code
        self.url = url
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return json.loads(self.text)


class FakeRequestsSession:
    """Records requests and replays queued responses (or raises queued errors)."""

    def __init__(self, *responses: Any) -> None:
        self.headers: dict[str, str] = {}
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs: Any) -> Any:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    def post(self, url: str, **kwargs: Any) -> Any:
        return self._next("POST", url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> Any:
        return self._next("GET", url, **kwargs)


class FakeColetorService:
    """
    Deterministic ColetorService for session/workflow tests.

    Each method pops the next queued result for its name; an exception
    instance is raised instead of returned. Calls are recorded.
    """

    request_timeout_seconds = 5

    def __init__(self) -> None:
        self.results: dict[str, list[Any]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.gate: threading.Event | None = None
        self.entered = threading.Event()

    def queue(self, name: str, *results: Any) -> None:
        self.results.setdefault(name, []).extend(results)

    def _answer(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        queued = self.results.get(name)
        if not queued:
            raise AssertionError(f"No result queued for {name}")
        result = queued.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call_name, args in self.calls if call_name == name]

    def validate_tenant(self, base_url: str, tenant_input: str, day=None) -> str:
        return self._answer("validate_tenant", base_url, tenant_input)

    def login(self, user_code: str, password: str, tenant_code: str) -> LoginResult:
        return self._answer("login", user_code, password, tenant_code)

    def logout(self, tenant_code: str, user_id: int) -> LogoutResult:
        return self._answer("logout", tenant_code, user_id)

    def get_open_tasks(self, tenant_code: str, user_id: int) -> TaskListResult:
        return self._answer("get_open_tasks", tenant_code, user_id)

    def start_task(self, *args: Any) -> TaskResult:
        return self._answer("start_task", *args)

    def submit_scan(self, *args: Any) -> TaskResult:
        return self._answer("submit_scan", *args)

    def pause_task(self, *args: Any) -> TaskResult:
        return self._answer("pause_task", *args)

    def finish_task(self, *args: Any) -> TaskResult:
        return self._answer("finish_task", *args)

    def cancel_task(self, *args: Any) -> TaskResult:
        return self._answer("cancel_task", *args)

    def generate_new_box(self, *args: Any) -> TaskResult:
        return self._answer("generate_new_box", *args)
