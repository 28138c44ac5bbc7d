"""Create / update / archive / delete orchestration for contracts.

The archival flag is the only modelled state (ACTIVE <-> ARCHIVED); deletion
removes the row. Every mutation is followed by a best-effort history entry.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.common.enums import ContractView, ExpiryStatus, HistoryAction, UserRole
from policydesk.common.exceptions import ConflictError, PermissionDeniedError, ValidationError
from policydesk.common.logging import get_logger
from policydesk.core.audit.recorder import AuditRecorder
from policydesk.core.contracts.diff import diff_contracts
from policydesk.core.contracts.repository import ContractRepository, snapshot
from policydesk.core.contracts.schemas import CONTRACT_FIELDS
from policydesk.core.contracts.status import classify, view_of
from policydesk.db.models.contract import Contract
from policydesk.db.models.history import HistoryEntry
from policydesk.db.models.user import User

logger = get_logger("contracts.lifecycle")

CONTRACT_EDITOR_ROLES = (UserRole.ADMIN, UserRole.SALES)
CONTRACT_ADMIN_ROLES = (UserRole.ADMIN,)

# Operation -> roles allowed to perform it. The HTTP layer reads this too.
REQUIRED_ROLES: dict[str, tuple[UserRole, ...]] = {
    "create": CONTRACT_EDITOR_ROLES,
    "update": CONTRACT_EDITOR_ROLES,
    "toggle_archive": CONTRACT_EDITOR_ROLES,
    "import": CONTRACT_EDITOR_ROLES,
    "delete": CONTRACT_ADMIN_ROLES,
}

REQUIRED_FIELDS = {
    "client_name": "client name",
    "policy_no": "policy number",
    "valid_until": "valid-until date",
}

# Optional text columns stored as "" rather than NULL
OPTIONAL_TEXT_FIELDS = ("salesperson", "insurance_type", "registration_no")


def ensure_permitted(operation: str, actor: User) -> None:
    allowed = REQUIRED_ROLES[operation]
    if actor.role not in [r.value for r in allowed]:
        raise PermissionDeniedError(
            f"This action requires one of the following roles: {', '.join(r.value for r in allowed)}"
        )


def _check_required(data: Mapping[str, Any]) -> None:
    missing = [label for field, label in REQUIRED_FIELDS.items() if not data.get(field)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def _blank_to_empty(data: dict[str, Any]) -> None:
    for field in OPTIONAL_TEXT_FIELDS:
        data[field] = data.get(field) or ""


def _duplicate_message(contract: Contract) -> str:
    return (
        f"Contract {contract.id} already uses policy number '{contract.policy_no}' "
        f"with registration '{contract.registration_no}'"
    )


class ContractLifecycle:
    def __init__(self, db: AsyncSession):
        self.repository = ContractRepository(db)
        self.recorder = AuditRecorder(db)

    async def create(self, fields: Mapping[str, Any], actor: User) -> Contract:
        ensure_permitted("create", actor)
        data = {key: fields[key] for key in CONTRACT_FIELDS if key in fields}
        _check_required(data)
        _blank_to_empty(data)

        existing = await self.repository.find_by_business_key(
            data["policy_no"], data["registration_no"]
        )
        if existing:
            raise ConflictError(_duplicate_message(existing))

        contract_id = await self.repository.create(data)
        await self.recorder.record(
            contract_id,
            HistoryAction.CREATED,
            "Contract created",
            user_id=actor.id,
            username=actor.username,
        )
        logger.info("Contract %s created by %s", contract_id, actor.username)
        return await self.repository.get_or_404(contract_id)

    async def update(
        self, contract_id: int, fields: Mapping[str, Any], actor: User
    ) -> tuple[Contract, list[str]]:
        """Apply a full or partial replacement; only keys present in ``fields`` change."""
        ensure_permitted("update", actor)
        contract = await self.repository.get_or_404(contract_id)

        before = snapshot(contract)
        after = {**before, **{key: fields[key] for key in CONTRACT_FIELDS if key in fields}}
        _check_required(after)
        _blank_to_empty(after)

        key_changed = (after["policy_no"], after["registration_no"]) != (
            before["policy_no"],
            before["registration_no"],
        )
        if key_changed:
            existing = await self.repository.find_by_business_key(
                after["policy_no"], after["registration_no"]
            )
            if existing and existing.id != contract_id:
                raise ConflictError(_duplicate_message(existing))

        changes = diff_contracts(before, after)
        contract = await self.repository.update(contract_id, after)

        if changes:
            await self.recorder.record(
                contract_id,
                HistoryAction.UPDATED,
                "; ".join(changes),
                user_id=actor.id,
                username=actor.username,
            )
            logger.info("Contract %s updated by %s (%d changes)", contract_id, actor.username, len(changes))
        return contract, changes

    async def toggle_archive(self, contract_id: int, actor: User) -> Contract:
        ensure_permitted("toggle_archive", actor)
        contract = await self.repository.get_or_404(contract_id)

        archived = not contract.is_archived
        contract = await self.repository.set_archived(contract_id, archived)

        action = HistoryAction.ARCHIVED if archived else HistoryAction.RESTORED
        await self.recorder.record(
            contract_id,
            action,
            f"Contract {action.value.lower()}",
            user_id=actor.id,
            username=actor.username,
        )
        logger.info("Contract %s %s by %s", contract_id, action.value.lower(), actor.username)
        return contract

    async def delete(self, contract_id: int, actor: User) -> None:
        ensure_permitted("delete", actor)
        await self.repository.get_or_404(contract_id)

        # Row first, then the history entry
        await self.repository.delete(contract_id)
        await self.recorder.record(
            contract_id,
            HistoryAction.DELETED,
            "Contract permanently deleted",
            user_id=actor.id,
            username=actor.username,
        )
        logger.info("Contract %s deleted by %s", contract_id, actor.username)

    async def list_contracts(
        self, view: ContractView, today: date
    ) -> list[tuple[Contract, ExpiryStatus]]:
        contracts = await self.repository.list(archived=view == ContractView.ARCHIVED)
        listed = []
        for contract in contracts:
            status = classify(contract.valid_until, today)
            if view_of(contract.is_archived, status) == view:
                listed.append((contract, status))
        return listed

    async def history(self, contract_id: int) -> list[HistoryEntry]:
        return await self.recorder.history(contract_id)
