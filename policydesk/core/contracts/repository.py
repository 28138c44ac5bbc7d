from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.common.exceptions import NotFoundError
from policydesk.core.contracts.schemas import CONTRACT_FIELDS
from policydesk.db.models.contract import Contract


def snapshot(contract: Contract) -> dict[str, Any]:
    """Plain copy of the business fields, safe to keep across mutations."""
    data = {field: getattr(contract, field) for field in CONTRACT_FIELDS}
    data["notes"] = list(contract.notes or [])
    return data


class ContractRepository:
    """Sole owner of persisted contract rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, contract_id: int) -> Contract | None:
        return await self.db.get(Contract, contract_id)

    async def get_or_404(self, contract_id: int) -> Contract:
        contract = await self.get(contract_id)
        if contract is None:
            raise NotFoundError("Contract", contract_id)
        return contract

    async def list(self, *, archived: bool, order_by: Any = None) -> list[Contract]:
        if order_by is None:
            if archived:
                order_by = (Contract.updated_at.desc(), Contract.id.desc())
            else:
                order_by = (Contract.valid_until.asc(), Contract.id.asc())
        if not isinstance(order_by, tuple | list):
            order_by = (order_by,)

        result = await self.db.execute(
            select(Contract).where(Contract.is_archived.is_(archived)).order_by(*order_by)
        )
        return list(result.scalars().all())

    async def find_by_business_key(self, policy_no: str, registration_no: str | None) -> Contract | None:
        result = await self.db.execute(
            select(Contract).where(
                Contract.policy_no == policy_no,
                Contract.registration_no == (registration_no or ""),
            )
        )
        return result.scalars().first()

    async def create(self, fields: Mapping[str, Any], *, updated_at: datetime | None = None) -> int:
        contract = Contract(
            **{key: fields[key] for key in CONTRACT_FIELDS if key in fields},
            updated_at=updated_at or datetime.now(timezone.utc),
            is_archived=False,
        )
        if contract.valid_from is None:
            contract.valid_from = datetime.now(timezone.utc).date()
        contract.notes = list(contract.notes or [])
        self.db.add(contract)
        await self.db.flush()
        return contract.id

    async def update(
        self, contract_id: int, fields: Mapping[str, Any], *, updated_at: datetime | None = None
    ) -> Contract:
        contract = await self.get_or_404(contract_id)
        for key in CONTRACT_FIELDS:
            if key in fields:
                value = fields[key]
                # Fresh list so the JSON column is flagged dirty
                setattr(contract, key, list(value or []) if key == "notes" else value)
        contract.updated_at = updated_at or datetime.now(timezone.utc)
        await self.db.flush()
        return contract

    async def set_archived(self, contract_id: int, archived: bool) -> Contract:
        contract = await self.get_or_404(contract_id)
        contract.is_archived = archived
        contract.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return contract

    async def delete(self, contract_id: int) -> None:
        contract = await self.get_or_404(contract_id)
        await self.db.delete(contract)
        await self.db.flush()
