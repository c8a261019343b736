from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import unicodedata


def fold_name(value: str) -> str:
    """Uppercase, strip accents and collapse separators so 'Inventário' == 'INVENTARIO'."""
    decomposed = unicodedata.normalize("NFKD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.replace("_", " ").replace("-", " ").upper().split())


class OperationKind(str, Enum):
    INVENTORY = "INVENTORY"
    PICKING = "PICKING"
    ADDRESSING = "ADDRESSING"
    SHIPPING = "SHIPPING"
    PACKING = "PACKING"
    OTHER = "OTHER"

    @classmethod
    def from_name(cls, name: str) -> "OperationKind":
        return _OPERATION_ALIASES.get(fold_name(name), cls.OTHER)


_OPERATION_ALIASES = {
    "INVENTARIO": OperationKind.INVENTORY,
    "INVENTORY": OperationKind.INVENTORY,
    "SEPARACAO": OperationKind.PICKING,
    "PICKING": OperationKind.PICKING,
    "ENDERECAMENTO": OperationKind.ADDRESSING,
    "ADDRESSING": OperationKind.ADDRESSING,
    "EXPEDICAO": OperationKind.SHIPPING,
    "SHIPPING": OperationKind.SHIPPING,
    "EMBALAGEM": OperationKind.PACKING,
    "PACKING": OperationKind.PACKING,
}


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def from_label(cls, label: str, closed: bool = False) -> "TaskStatus":
        status = _STATUS_ALIASES.get(fold_name(label))
        if status is not None:
            return status
        return cls.COMPLETED if closed else cls.PENDING


_STATUS_ALIASES = {
    "PENDENTE": TaskStatus.PENDING,
    "LIVRE": TaskStatus.PENDING,
    "ABERTA": TaskStatus.PENDING,
    "PENDING": TaskStatus.PENDING,
    "EM ANDAMENTO": TaskStatus.IN_PROGRESS,
    "INICIADA": TaskStatus.IN_PROGRESS,
    "EM EXECUCAO": TaskStatus.IN_PROGRESS,
    "IN PROGRESS": TaskStatus.IN_PROGRESS,
    "PAUSADA": TaskStatus.PAUSED,
    "PAUSED": TaskStatus.PAUSED,
    "ENCERRADA": TaskStatus.COMPLETED,
    "CONCLUIDA": TaskStatus.COMPLETED,
    "FINALIZADA": TaskStatus.COMPLETED,
    "COMPLETED": TaskStatus.COMPLETED,
    "CANCELADA": TaskStatus.CANCELLED,
    "CANCELLED": TaskStatus.CANCELLED,
    "CANCELED": TaskStatus.CANCELLED,
}


@dataclass(frozen=True)
class TenantConfig:
    service_url: str = ""
    tenant_input: str = ""
    validated_tenant_code: str = ""
    user_id: int = 0

    @property
    def is_validated(self) -> bool:
        return bool(self.validated_tenant_code)


@dataclass(frozen=True)
class SessionIdentity:
    tenant_code: str
    user_id: int

    def __post_init__(self):
        if not self.tenant_code:
            raise ValueError("tenant_code is required")
        if self.user_id <= 0:
            raise ValueError("user_id must be a positive integer")


@dataclass(frozen=True)
class Task:
    id: int
    operation_name: str
    description: str
    instruction: str
    status: TaskStatus
    status_label: str = ""
    closed: bool = False
    next_material_hint: str | None = None
    remaining_qty: str | None = None
    source_position: str | None = None
    dest_position: str | None = None
    operator_id: int | None = None
    volumes_read: int | None = None

    @property
    def operation_kind(self) -> OperationKind:
        return OperationKind.from_name(self.operation_name)

    @property
    def is_selectable(self) -> bool:
        return self.status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


@dataclass(frozen=True)
class ScanResult:
    success: bool
    message: str


@dataclass(frozen=True)
class LoginResult:
    ok: bool
    user_id: int | None = None
    active_task: Task | None = None
    open_tasks: list[Task] | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class TaskListResult:
    ok: bool
    tasks: list[Task] = field(default_factory=list)
    error_message: str | None = None


@dataclass(frozen=True)
class TaskResult:
    ok: bool
    task: Task | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class LogoutResult:
    ok: bool
    error_message: str | None = None


class ViewMode(str, Enum):
    ACTIVE_SESSION = "ACTIVE_SESSION"
    LIST_OF_TASKS = "LIST_OF_TASKS"


@dataclass(frozen=True)
class ResolvedView:
    mode: ViewMode
    active_task: Task | None = None
    tasks: list[Task] = field(default_factory=list)
