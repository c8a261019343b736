from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import logging
import threading

from coletor_client import messages
from coletor_client.config import ConfigurationError
from coletor_client.http import ApplicationError, CommunicationError
from coletor_client.models import ResolvedView, SessionIdentity, Task, TenantConfig, ViewMode
from coletor_client.resolver import TaskListResolver
from coletor_client.services import ColetorService
from coletor_client.session import SessionBusyError, SessionStateError, TaskSession
from coletor_client.storage import SettingsStore

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    NO_SESSION = "NO_SESSION"
    LISTING = "LISTING"
    ACTIVE = "ACTIVE"


@dataclass(frozen=True)
class SettingsOutcome:
    ok: bool
    message: str
    validated_code: str | None = None
    validated_at: datetime | None = None


@dataclass(frozen=True)
class WorkflowOutcome:
    ok: bool
    message: str = ""
    tasks: list[Task] = field(default_factory=list)
    session: TaskSession | None = None


class ColetorWorkflow:
    """Screen-level actions of the collector, from settings to logout.

    Every public action catches configuration, transport and application
    errors and turns them into an outcome carrying a user-facing message.
    """

    def __init__(
        self,
        service: ColetorService,
        store: SettingsStore,
        resolver: TaskListResolver | None = None,
    ):
        self._service = service
        self._store = store
        self._resolver = resolver or TaskListResolver(service)
        self._state = WorkflowState.NO_SESSION
        self._identity: SessionIdentity | None = None
        self._session: TaskSession | None = None
        self._tasks: list[Task] = []
        self._validated_at: datetime | None = None
        self._busy = threading.Lock()

    @property
    def service(self) -> ColetorService:
        return self._service

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def identity(self) -> SessionIdentity | None:
        return self._identity

    @property
    def session(self) -> TaskSession | None:
        return self._session

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def validated_at(self) -> datetime | None:
        return self._validated_at

    def load_settings(self) -> TenantConfig:
        return self._store.get_settings()

    def save_settings(self, url: str, tenant_input: str) -> SettingsOutcome:
        if not url.strip() or not tenant_input.strip():
            return SettingsOutcome(ok=False, message=messages.SETTINGS_REQUIRED)

        with self._exclusive("save settings"):
            self._store.save_settings(url, tenant_input)
            self._store.save_validated_tenant_code("")
            try:
                code = self._service.validate_tenant(url, tenant_input)
            except (ConfigurationError, CommunicationError, ApplicationError) as exc:
                logger.warning("Tenant validation failed: %s", exc)
                return SettingsOutcome(ok=False, message=f"{messages.SETTINGS_INVALID}\n{exc}")

            self._store.save_validated_tenant_code(code)
            self._validated_at = datetime.now()
            return SettingsOutcome(
                ok=True,
                message=messages.SETTINGS_SAVED,
                validated_code=code,
                validated_at=self._validated_at,
            )

    def login(self, user_code: str, password: str) -> WorkflowOutcome:
        if self._state is not WorkflowState.NO_SESSION:
            raise SessionStateError("Already logged in")
        if not user_code.strip() or not password:
            return WorkflowOutcome(ok=False, message=messages.CREDENTIALS_REQUIRED)

        settings = self._store.get_settings()
        tenant_code = settings.validated_tenant_code or settings.tenant_input
        if not tenant_code:
            return WorkflowOutcome(ok=False, message=messages.TENANT_NOT_CONFIGURED)

        with self._exclusive("login"):
            try:
                result = self._service.login(user_code.strip(), password, tenant_code)
                if not result.ok:
                    return WorkflowOutcome(ok=False, message=result.error_message or messages.LOGIN_FAILED)

                self._store.save_user_id(result.user_id)
                identity = SessionIdentity(tenant_code=tenant_code, user_id=result.user_id)
                view = self._resolver.resolve(identity, tasks_hint=result)
            except ConfigurationError as exc:
                return WorkflowOutcome(ok=False, message=str(exc))
            except CommunicationError as exc:
                logger.warning("Login failed: %s", exc)
                return WorkflowOutcome(ok=False, message=messages.COMMUNICATION_ERROR)
            except ApplicationError as exc:
                return WorkflowOutcome(ok=False, message=str(exc))

            self._identity = identity
            logger.info("User %s logged in on tenant %s", identity.user_id, identity.tenant_code)
            return self._apply_view(view)

    def refresh_tasks(self) -> WorkflowOutcome:
        identity = self._require_identity()
        if self._state is WorkflowState.ACTIVE:
            raise SessionStateError("Cannot list tasks while a task session is active")

        with self._exclusive("refresh tasks"):
            try:
                view = self._resolver.resolve(identity)
            except ConfigurationError as exc:
                return WorkflowOutcome(ok=False, message=str(exc), tasks=self.tasks)
            except CommunicationError as exc:
                logger.warning("Listing tasks failed: %s", exc)
                return WorkflowOutcome(ok=False, message=messages.LIST_FAILED, tasks=self.tasks)
            except ApplicationError as exc:
                return WorkflowOutcome(ok=False, message=str(exc), tasks=self.tasks)
            return self._apply_view(view)

    def select_task(self, task: Task) -> WorkflowOutcome:
        identity = self._require_identity()
        if self._state is not WorkflowState.LISTING:
            raise SessionStateError(f"Cannot start a task while {self._state.value.lower()}")
        if not task.is_selectable:
            raise SessionStateError(f"Task {task.id} is {task.status.value.lower()} and cannot be started")

        with self._exclusive("start task"):
            try:
                result = self._service.start_task(
                    identity.tenant_code,
                    task.id,
                    identity.user_id,
                    task.operation_name,
                )
            except ConfigurationError as exc:
                return WorkflowOutcome(ok=False, message=str(exc), tasks=self.tasks)
            except CommunicationError as exc:
                logger.warning("Starting task %s failed: %s", task.id, exc)
                return WorkflowOutcome(ok=False, message=messages.LIST_FAILED, tasks=self.tasks)

            if not result.ok or result.task is None:
                return WorkflowOutcome(
                    ok=False,
                    message=result.error_message or messages.START_FAILED,
                    tasks=self.tasks,
                )
            return self._open_session(result.task)

    def end_session(self, session: TaskSession) -> bool:
        """Return to the list once ``session`` has exited. Stale sessions are ignored."""
        if session is not self._session or session.is_active:
            return False
        self._session = None
        self._state = WorkflowState.LISTING
        return True

    def leave_session(self) -> None:
        if self._session is None:
            return
        self._session.discard()
        self._session = None
        self._state = WorkflowState.LISTING

    def logout(self) -> WorkflowOutcome:
        identity = self._require_identity()
        self.leave_session()

        try:
            result = self._service.logout(identity.tenant_code, identity.user_id)
            outcome = WorkflowOutcome(ok=result.ok, message=result.error_message or "")
        except ConfigurationError as exc:
            outcome = WorkflowOutcome(ok=False, message=str(exc))
        except CommunicationError as exc:
            logger.warning("Logout failed: %s", exc)
            outcome = WorkflowOutcome(ok=False, message=messages.COMMUNICATION_ERROR)
        finally:
            self._identity = None
            self._tasks = []
            self._state = WorkflowState.NO_SESSION
        logger.info("User %s logged out", identity.user_id)
        return outcome

    def _apply_view(self, view: ResolvedView) -> WorkflowOutcome:
        if view.mode is ViewMode.ACTIVE_SESSION:
            return self._open_session(view.active_task)
        self._tasks = list(view.tasks)
        self._state = WorkflowState.LISTING
        return WorkflowOutcome(ok=True, tasks=self.tasks)

    def _open_session(self, task: Task) -> WorkflowOutcome:
        self._session = TaskSession(self._service, self._require_identity(), task)
        self._state = WorkflowState.ACTIVE
        return WorkflowOutcome(ok=True, session=self._session)

    def _require_identity(self) -> SessionIdentity:
        if self._identity is None:
            raise SessionStateError("Not logged in")
        return self._identity

    @contextmanager
    def _exclusive(self, action: str):
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError(f"Cannot {action} while another request is in progress")
        try:
            yield
        finally:
            self._busy.release()
