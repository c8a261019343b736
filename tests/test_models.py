# tests/test_models.py

from __future__ import annotations

import pytest

from coletor_client.models import OperationKind, SessionIdentity, TaskStatus

from .fakes import make_task


@pytest.mark.parametrize(
    "name, expected",
    [
        ("INVENTÁRIO", OperationKind.INVENTORY),
        ("inventário", OperationKind.INVENTORY),
        ("Inventario", OperationKind.INVENTORY),
        ("SEPARAÇÃO", OperationKind.PICKING),
        ("endereçamento", OperationKind.ADDRESSING),
        ("EXPEDIÇÃO", OperationKind.SHIPPING),
        ("Embalagem", OperationKind.PACKING),
        ("packing", OperationKind.PACKING),
        ("CONFERÊNCIA", OperationKind.OTHER),
        ("", OperationKind.OTHER),
    ],
)
def test_operation_kind_is_case_and_accent_insensitive(name, expected):
    assert OperationKind.from_name(name) is expected


@pytest.mark.parametrize(
    "label, closed, expected",
    [
        ("Pendente", False, TaskStatus.PENDING),
        ("EM ANDAMENTO", False, TaskStatus.IN_PROGRESS),
        ("em_andamento", False, TaskStatus.IN_PROGRESS),
        ("in-progress", False, TaskStatus.IN_PROGRESS),
        ("PAUSADA", False, TaskStatus.PAUSED),
        ("Concluída", False, TaskStatus.COMPLETED),
        ("CANCELADA", True, TaskStatus.CANCELLED),
        ("???", True, TaskStatus.COMPLETED),
        ("", False, TaskStatus.PENDING),
    ],
)
def test_status_labels(label, closed, expected):
    assert TaskStatus.from_label(label, closed=closed) is expected


def test_only_pending_and_in_progress_tasks_are_selectable():
    assert make_task(status=TaskStatus.PENDING).is_selectable
    assert make_task(status=TaskStatus.IN_PROGRESS).is_selectable
    assert not make_task(status=TaskStatus.PAUSED).is_selectable
    assert not make_task(status=TaskStatus.COMPLETED).is_selectable
    assert not make_task(status=TaskStatus.CANCELLED).is_selectable


def test_session_identity_requires_positive_user():
    with pytest.raises(ValueError):
        SessionIdentity(tenant_code="T", user_id=0)
    with pytest.raises(ValueError):
        SessionIdentity(tenant_code="", user_id=1)
