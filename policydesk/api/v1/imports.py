import hmac
from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.api.deps import get_db, get_today, require_role
from policydesk.common.exceptions import NotFoundError, PermissionDeniedError
from policydesk.common.logging import get_logger
from policydesk.config import settings
from policydesk.core.contracts.importer import ImportReconciler
from policydesk.core.contracts.lifecycle import REQUIRED_ROLES
from policydesk.core.contracts.schemas import ImportResult
from policydesk.db.models.user import User

router = APIRouter(prefix="/import", tags=["Import"])

logger = get_logger("api.imports")

RowsBody = list[dict[str, Any]] | dict[str, Any]


@router.post("", response_model=ImportResult)
async def import_contracts(
    rows: RowsBody = Body(..., description="Spreadsheet rows, or a single row"),
    current_user: User = Depends(require_role(*REQUIRED_ROLES["import"])),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    batch = rows if isinstance(rows, list) else [rows]
    logger.info("Import of %d rows started by %s", len(batch), current_user.username)
    return await ImportReconciler(db).import_batch(batch, today)


@router.post("/webhook", response_model=ImportResult)
async def import_webhook(
    rows: RowsBody = Body(...),
    x_import_token: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    """Ingestion entry point for automation tools, authenticated by a shared token."""
    if not settings.IMPORT_WEBHOOK_TOKEN:
        raise NotFoundError("Import webhook")
    if not x_import_token or not hmac.compare_digest(x_import_token, settings.IMPORT_WEBHOOK_TOKEN):
        raise PermissionDeniedError("Invalid import token")

    batch = rows if isinstance(rows, list) else [rows]
    logger.info("Webhook import of %d rows received", len(batch))
    return await ImportReconciler(db).import_batch(batch, today)
