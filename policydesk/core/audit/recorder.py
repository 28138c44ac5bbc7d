from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.common.enums import HistoryAction
from policydesk.common.exceptions import NotFoundError
from policydesk.common.logging import get_logger
from policydesk.db.models.contract import Contract
from policydesk.db.models.history import HistoryEntry

logger = get_logger("audit.recorder")


class AuditRecorder:
    """Append-only writer for contract history.

    Writes are best-effort: each entry goes through its own SAVEPOINT so a
    failed insert is rolled back alone and the contract mutation around it
    still commits.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        contract_id: int,
        action: HistoryAction,
        details: str,
        *,
        user_id: int | None = None,
        username: str | None = None,
    ) -> HistoryEntry | None:
        try:
            return await self._write(contract_id, action, details, user_id, username)
        except Exception:
            logger.exception(
                "Failed to write %s history entry for contract %s", action.value, contract_id
            )
            return None

    async def _write(
        self,
        contract_id: int,
        action: HistoryAction,
        details: str,
        user_id: int | None,
        username: str | None,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            contract_id=contract_id,
            user_id=user_id,
            username=username,
            timestamp=datetime.now(timezone.utc),
            action=action.value,
            details=details,
        )
        async with self.db.begin_nested():
            self.db.add(entry)
        logger.debug("History %s for contract %s by %s", action.value, contract_id, username)
        return entry

    async def history(self, contract_id: int) -> list[HistoryEntry]:
        """Entries for a contract, newest first. Works for deleted contracts too."""
        result = await self.db.execute(
            select(HistoryEntry)
            .where(HistoryEntry.contract_id == contract_id)
            .order_by(HistoryEntry.timestamp.desc(), HistoryEntry.id.desc())
        )
        entries = list(result.scalars().all())
        if not entries and await self.db.get(Contract, contract_id) is None:
            raise NotFoundError("Contract", contract_id)
        return entries
