from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db
from core.enums import PermissionAction, PermissionModule
from repositories.audit_log_repo import AuditLogRepository
from schemas.audit_log import AuditLogPage, AuditLogResponse

router = APIRouter()


@router.get(
    "",
    response_model=AuditLogPage,
    dependencies=[
        Depends(require_permission(PermissionAction.READ, PermissionModule.AUDIT_LOG))
    ],
)
async def list_audit_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user_id: str | None = None,
    module: PermissionModule | None = None,
):
    """Audit trail, newest first"""
    items, total = await AuditLogRepository(db).search(
        page=page,
        limit=limit,
        actor_id=user_id,
        module=module.value if module else None,
    )
    return AuditLogPage(
        items=[AuditLogResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        limit=limit,
    )
