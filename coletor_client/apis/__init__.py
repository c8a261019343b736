from .session_api import SessionApi
from .task_api import TaskApi
from .tenant_api import TenantApi, TenantValidationError, build_day_token

__all__ = ["SessionApi", "TaskApi", "TenantApi", "TenantValidationError", "build_day_token"]
