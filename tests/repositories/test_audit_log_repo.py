"""AuditLogRepository: recording and searching entries"""

import pytest

from core.context import set_current_user
from core.enums import AuditAction, PermissionModule
from repositories.audit_log_repo import AuditLogRepository
from repositories.user_repo import UserRepository


@pytest.mark.asyncio
async def test_actor_defaults_to_request_context(test_db):
    set_current_user("user_abc", ip_address="10.0.0.7")

    entry = await AuditLogRepository(test_db).record(
        action=AuditAction.UPDATED,
        entity_type="invoice",
        entity_id="inv_1",
        module=PermissionModule.FINANCE.value,
        metadata={"entity": {"status": "Paid"}},
    )

    assert entry.actor_id == "user_abc"
    assert entry.ip_address == "10.0.0.7"
    assert entry.action == "updated"
    assert entry.details == {"entity": {"status": "Paid"}}


@pytest.mark.asyncio
async def test_explicit_actor_wins(test_db):
    set_current_user("someone_else")

    entry = await AuditLogRepository(test_db).record(
        action=AuditAction.LOGIN, entity_type="user", entity_id="u1", actor_id="u1"
    )

    assert entry.actor_id == "u1"


@pytest.mark.asyncio
async def test_search_filters_and_counts(test_db):
    repo = AuditLogRepository(test_db)
    for i in range(5):
        await repo.record(
            action=AuditAction.CREATED,
            entity_type="payment",
            entity_id=f"pay_{i}",
            module=PermissionModule.FINANCE.value,
            actor_id="accountant",
        )
    await repo.record(
        action=AuditAction.CREATED,
        entity_type="student",
        entity_id="stu_1",
        module=PermissionModule.STUDENT.value,
        actor_id="registrar",
    )

    items, total = await repo.search(page=2, limit=2, module=PermissionModule.FINANCE.value)
    assert total == 5
    assert len(items) == 2

    items, total = await repo.search(actor_id="registrar")
    assert total == 1
    assert items[0].entity_id == "stu_1"

    items, total = await repo.search(page=4, limit=2)
    assert items == []
    assert total == 6


@pytest.mark.asyncio
async def test_auditing_can_be_disabled_per_repository(test_db):
    audited = await UserRepository(test_db).create_user(
        name="Audited", email="audited@example.com", password="securepass1"
    )
    silent = await UserRepository(test_db, enable_audit=False).create_user(
        name="Silent", email="silent@example.com", password="securepass1"
    )

    entity_ids = {entry.entity_id for entry in (await AuditLogRepository(test_db).search())[0]}
    assert audited.id in entity_ids
    assert silent.id not in entity_ids
