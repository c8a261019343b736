from __future__ import annotations

import logging

from coletor_client import messages
from coletor_client.http import ApplicationError
from coletor_client.models import LoginResult, ResolvedView, SessionIdentity, ViewMode
from coletor_client.services import ColetorService

logger = logging.getLogger(__name__)


class TaskListResolver:
    """Decides whether the operator lands on a running task or on the task list."""

    def __init__(self, service: ColetorService):
        self._service = service

    def resolve(self, identity: SessionIdentity, tasks_hint: LoginResult | None = None) -> ResolvedView:
        if tasks_hint is not None and tasks_hint.active_task is not None:
            logger.info("Resuming active task %s for user %s", tasks_hint.active_task.id, identity.user_id)
            return ResolvedView(mode=ViewMode.ACTIVE_SESSION, active_task=tasks_hint.active_task)

        if tasks_hint is not None and tasks_hint.open_tasks is not None:
            return ResolvedView(mode=ViewMode.LIST_OF_TASKS, tasks=list(tasks_hint.open_tasks))

        result = self._service.get_open_tasks(identity.tenant_code, identity.user_id)
        if not result.ok:
            raise ApplicationError(result.error_message or messages.LIST_FAILED)
        logger.debug("Fetched %d open tasks", len(result.tasks))
        return ResolvedView(mode=ViewMode.LIST_OF_TASKS, tasks=list(result.tasks))
