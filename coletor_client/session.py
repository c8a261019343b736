from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
import logging
import threading
from typing import Callable
import uuid

from coletor_client import messages
from coletor_client.config import ConfigurationError
from coletor_client.http import CommunicationError
from coletor_client.models import OperationKind, ScanResult, SessionIdentity, Task, TaskResult
from coletor_client.services import ColetorService

logger = logging.getLogger(__name__)

FINISH_CANCEL_KINDS = frozenset({OperationKind.INVENTORY, OperationKind.ADDRESSING})
NEW_BOX_KINDS = frozenset({OperationKind.PACKING})


class SessionStateError(RuntimeError):
    pass


class SessionBusyError(SessionStateError):
    pass


class SessionState(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"
    DISCARDED = "DISCARDED"


@dataclass(frozen=True)
class ConfirmationToken:
    action: str
    task_id: int
    nonce: str
    title: str
    prompt: str


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    message: str
    exit_state: SessionState | None = None

    @property
    def exited(self) -> bool:
        return self.exit_state is not None


class TaskSession:
    """Live execution of one task: the scan loop and its terminal actions.

    The session owns the task mirror exclusively. Only one mutating call may
    be in flight; a second one raises ``SessionBusyError``. Once the session
    leaves ``ACTIVE`` every action raises ``SessionStateError`` and late
    responses from calls started before the exit are dropped.
    """

    def __init__(self, service: ColetorService, identity: SessionIdentity, task: Task):
        self._service = service
        self._identity = identity
        self._task: Task | None = task
        self._state = SessionState.ACTIVE
        self._barcode = ""
        self._message: ScanResult | None = None
        self._mutation_lock = threading.Lock()
        # Guards the state and mirror against discard() from the UI thread.
        self._state_lock = threading.Lock()
        self._pending_tokens: dict[str, ConfirmationToken] = {}
        logger.info("Task %s (%s) session started", task.id, task.operation_name)

    @property
    def identity(self) -> SessionIdentity:
        return self._identity

    @property
    def task(self) -> Task | None:
        return self._task

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def barcode(self) -> str:
        return self._barcode

    @property
    def message(self) -> ScanResult | None:
        return self._message

    @property
    def in_flight(self) -> bool:
        return self._mutation_lock.locked()

    def set_barcode(self, value: str) -> None:
        self._require_active("edit barcode")
        self._barcode = value

    def can_finish(self) -> bool:
        return self.is_active and self._task.operation_kind in FINISH_CANCEL_KINDS

    can_cancel = can_finish

    def can_generate_new_box(self) -> bool:
        return self.is_active and self._task.operation_kind in NEW_BOX_KINDS

    def submit_scan(self, barcode: str | None = None) -> ScanResult | None:
        self._require_active("scan")
        code = (self._barcode if barcode is None else barcode).strip()
        if not code:
            return None

        with self._mutation("scan"):
            self._message = None
            task_id = self._task.id
            result, failure = self._call(self._service.submit_scan, code)
            with self._state_lock:
                if not self.is_active:
                    return ScanResult(success=False, message=messages.SESSION_DISCARDED)

                if failure is not None:
                    # Transport failure: keep the barcode so the operator can resend it.
                    outcome = ScanResult(success=False, message=failure)
                elif result.ok and result.task is not None:
                    self._task = result.task
                    self._barcode = ""
                    outcome = ScanResult(success=True, message=messages.SCAN_OK)
                else:
                    self._barcode = ""
                    outcome = ScanResult(success=False, message=result.error_message or messages.UNKNOWN_ERROR)

                self._message = outcome
            logger.debug("Scan on task %s: %s", task_id, outcome.message)
            return outcome

    def refresh(self) -> ScanResult:
        self._require_active("refresh")
        with self._mutation("refresh"):
            result, failure = self._call(self._service.submit_scan, None)
            with self._state_lock:
                if not self.is_active:
                    return ScanResult(success=False, message=messages.SESSION_DISCARDED)
                if failure is not None:
                    outcome = ScanResult(success=False, message=failure)
                elif result.ok and result.task is not None:
                    self._task = result.task
                    outcome = ScanResult(success=True, message=messages.TASK_REFRESHED)
                else:
                    outcome = ScanResult(success=False, message=result.error_message or messages.UNKNOWN_ERROR)
                self._message = outcome
            return outcome

    def pause(self) -> ActionResult:
        self._require_active("pause")
        with self._mutation("pause"):
            result, failure = self._call(self._service.pause_task)
            return self._conclude(
                result,
                failure,
                exit_state=SessionState.PAUSED,
                success_message=messages.TASK_PAUSED,
                failure_message=messages.PAUSE_FAILED,
            )

    def request_finish(self) -> ConfirmationToken:
        return self._issue_token("finish", messages.CONFIRM_FINISH_TITLE, messages.CONFIRM_FINISH_PROMPT)

    def confirm_finish(self, token: ConfirmationToken) -> ActionResult:
        self._require_active("finish")
        with self._mutation("finish"):
            # The token is consumed only under the mutation lock.
            self._redeem_token(token, "finish")
            result, failure = self._call(self._service.finish_task)
            return self._conclude(
                result,
                failure,
                exit_state=SessionState.FINISHED,
                success_message=messages.TASK_FINISHED,
                failure_message=messages.FINISH_FAILED,
            )

    def request_cancel(self) -> ConfirmationToken:
        return self._issue_token("cancel", messages.CONFIRM_CANCEL_TITLE, messages.CONFIRM_CANCEL_PROMPT)

    def confirm_cancel(self, token: ConfirmationToken) -> ActionResult:
        self._require_active("cancel")
        with self._mutation("cancel"):
            self._redeem_token(token, "cancel")
            result, failure = self._call(self._service.cancel_task)
            return self._conclude(
                result,
                failure,
                exit_state=SessionState.CANCELLED,
                success_message=messages.TASK_CANCELLED,
                failure_message=messages.CANCEL_FAILED,
            )

    def decline(self, token: ConfirmationToken) -> None:
        self._pending_tokens.pop(token.nonce, None)

    def new_box(self) -> ActionResult:
        self._require_active("new box")
        if not self.can_generate_new_box():
            raise SessionStateError(
                f"New box is not available for operation {self._task.operation_name!r}"
            )
        with self._mutation("new box"):
            result, failure = self._call(self._service.generate_new_box)
            with self._state_lock:
                if not self.is_active:
                    return ActionResult(ok=False, message=messages.SESSION_DISCARDED)
                if failure is not None:
                    outcome = ActionResult(ok=False, message=failure)
                elif result.ok and result.task is not None:
                    self._task = result.task
                    outcome = ActionResult(ok=True, message=messages.NEW_BOX_OK)
                else:
                    outcome = ActionResult(ok=False, message=result.error_message or messages.NEW_BOX_FAILED)
                self._message = ScanResult(success=outcome.ok, message=outcome.message)
            return outcome

    def discard(self) -> None:
        """Drop the session without telling the server (screen dismissed)."""
        with self._state_lock:
            if self._state is SessionState.ACTIVE:
                logger.info("Task %s session discarded", self._task.id)
                self._close(SessionState.DISCARDED)

    def _issue_token(self, action: str, title: str, prompt: str) -> ConfirmationToken:
        self._require_active(action)
        if not self.can_finish():
            raise SessionStateError(
                f"{action.capitalize()} is not available for operation {self._task.operation_name!r}"
            )
        token = ConfirmationToken(
            action=action,
            task_id=self._task.id,
            nonce=uuid.uuid4().hex,
            title=title,
            prompt=prompt,
        )
        self._pending_tokens[token.nonce] = token
        return token

    def _redeem_token(self, token: ConfirmationToken, action: str) -> None:
        self._require_active(action)
        pending = self._pending_tokens.get(token.nonce)
        if pending is None or pending != token or token.action != action:
            raise SessionStateError(f"Invalid or already used confirmation for {action}")
        del self._pending_tokens[token.nonce]

    def _require_active(self, action: str) -> None:
        if self._state is not SessionState.ACTIVE:
            raise SessionStateError(f"Cannot {action}: session is {self._state.value.lower()}")

    @contextmanager
    def _mutation(self, action: str):
        if not self._mutation_lock.acquire(blocking=False):
            raise SessionBusyError(f"Cannot {action} while another request is in progress")
        try:
            yield
        finally:
            self._mutation_lock.release()

    def _call(self, method: Callable[..., TaskResult], *extra) -> tuple[TaskResult | None, str | None]:
        task = self._task
        try:
            result = method(
                self._identity.tenant_code,
                task.id,
                self._identity.user_id,
                task.operation_name,
                *extra,
            )
        except ConfigurationError as exc:
            return None, str(exc)
        except CommunicationError as exc:
            logger.warning("Request for task %s failed: %s", task.id, exc)
            return None, messages.COMMUNICATION_ERROR
        return result, None

    def _conclude(
        self,
        result: TaskResult | None,
        failure: str | None,
        exit_state: SessionState,
        success_message: str,
        failure_message: str,
    ) -> ActionResult:
        with self._state_lock:
            if not self.is_active:
                return ActionResult(ok=False, message=messages.SESSION_DISCARDED)
            if failure is not None:
                outcome = ActionResult(ok=False, message=failure)
            elif result.ok:
                logger.info("Task %s session ended: %s", self._task.id, exit_state.value)
                self._close(exit_state)
                return ActionResult(ok=True, message=success_message, exit_state=exit_state)
            else:
                outcome = ActionResult(ok=False, message=result.error_message or failure_message)
            self._message = ScanResult(success=False, message=outcome.message)
            return outcome

    def _close(self, state: SessionState) -> None:
        self._state = state
        self._task = None
        self._barcode = ""
        self._message = None
        self._pending_tokens.clear()
