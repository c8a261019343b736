"""Normalize the backend's loosely-typed JSON into model objects.

Accepted aliases are part of the wire contract:

- task description: ``DescrTarefa`` or ``DescricaoTarefa``
- validated tenant code: ``tenatCode`` or ``tenantCode``
- error message: ``MensErro`` or ``Mensagem``
"""

from __future__ import annotations

from typing import Any

from coletor_client.models import Task, TaskStatus

DESCRIPTION_KEYS = ("DescrTarefa", "DescricaoTarefa")
TENANT_CODE_KEYS = ("tenatCode", "tenantCode")
ERROR_MESSAGE_KEYS = ("MensErro", "Mensagem")


def first_present(payload: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return value
    return None


def is_ok(payload: dict[str, Any]) -> bool:
    return payload.get("Ok") is True


def error_message(payload: dict[str, Any], default: str) -> str:
    message = first_present(payload, ERROR_MESSAGE_KEYS)
    return str(message).strip() if message is not None else default


def task_from_payload(payload: dict[str, Any]) -> Task:
    if not isinstance(payload, dict):
        raise ValueError("Task payload must be a JSON object")

    task_id = _optional_int(payload.get("IdTarefa"))
    if task_id is None:
        raise ValueError("Task payload is missing IdTarefa")

    status_label = str(payload.get("StatusTarefa") or "").strip()
    closed = bool(payload.get("FlEncerrada", False))

    return Task(
        id=task_id,
        operation_name=str(payload.get("NomeOperacao") or "").strip(),
        description=str(first_present(payload, DESCRIPTION_KEYS) or "").strip(),
        instruction=str(payload.get("Instrucao") or "").strip(),
        status=TaskStatus.from_label(status_label, closed=closed),
        status_label=status_label,
        closed=closed,
        next_material_hint=_optional_str(payload.get("ProxMaterial")),
        remaining_qty=_optional_str(payload.get("QtdRestante")),
        source_position=_optional_str(payload.get("PosicaoOrigem")),
        dest_position=_optional_str(payload.get("PosicaoDestino")),
        operator_id=_optional_int(payload.get("Operador")),
        volumes_read=_optional_int(payload.get("NumVolumesLidos")),
    )


def tasks_from_payload(items: Any) -> list[Task]:
    if not isinstance(items, list):
        return []
    return [task_from_payload(item) for item in items if isinstance(item, dict)]


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
