from datetime import date

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.api.deps import get_current_user, get_db, get_today, require_role
from policydesk.common.enums import ContractView
from policydesk.core.contracts.lifecycle import REQUIRED_ROLES, ContractLifecycle
from policydesk.core.contracts.schemas import (
    ArchiveToggleResponse,
    ContractMutationResponse,
    ContractPayload,
    ContractResponse,
    HistoryEntryResponse,
)
from policydesk.core.contracts.status import classify, view_of
from policydesk.db.models.contract import Contract
from policydesk.db.models.user import User

router = APIRouter(prefix="/contracts", tags=["Contracts"])


# ---------- Endpoints ----------


@router.get("", response_model=list[ContractResponse])
async def list_contracts(
    view: ContractView = Query(ContractView.ACTIVE, description="active, ended or archived"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    listed = await ContractLifecycle(db).list_contracts(view, today)
    return [_contract_response(contract, today) for contract, _ in listed]


@router.get("/archived", response_model=list[ContractResponse])
async def list_archived_contracts(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    listed = await ContractLifecycle(db).list_contracts(ContractView.ARCHIVED, today)
    return [_contract_response(contract, today) for contract, _ in listed]


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    contract = await ContractLifecycle(db).repository.get_or_404(contract_id)
    return _contract_response(contract, today)


@router.post("", response_model=ContractMutationResponse)
async def save_contract(
    body: ContractPayload,
    response: Response,
    current_user: User = Depends(require_role(*REQUIRED_ROLES["create"])),
    db: AsyncSession = Depends(get_db),
):
    """Create a contract, or replace an existing one when the body carries ``id``."""
    lifecycle = ContractLifecycle(db)
    if body.id is not None:
        contract, changes = await lifecycle.update(body.id, body.fields(), current_user)
        return ContractMutationResponse(message="Updated", id=contract.id, changes=changes)

    contract = await lifecycle.create(body.fields(), current_user)
    response.status_code = 201
    return ContractMutationResponse(message="Created", id=contract.id)


@router.put("/{contract_id}", response_model=ContractMutationResponse)
async def replace_contract(
    contract_id: int,
    body: ContractPayload,
    current_user: User = Depends(require_role(*REQUIRED_ROLES["update"])),
    db: AsyncSession = Depends(get_db),
):
    contract, changes = await ContractLifecycle(db).update(contract_id, body.fields(), current_user)
    return ContractMutationResponse(message="Updated", id=contract.id, changes=changes)


@router.patch("/{contract_id}", response_model=ContractMutationResponse)
async def patch_contract(
    contract_id: int,
    body: ContractPayload,
    current_user: User = Depends(require_role(*REQUIRED_ROLES["update"])),
    db: AsyncSession = Depends(get_db),
):
    contract, changes = await ContractLifecycle(db).update(
        contract_id, body.fields(partial=True), current_user
    )
    return ContractMutationResponse(message="Updated", id=contract.id, changes=changes)


@router.post("/{contract_id}/archive", response_model=ArchiveToggleResponse)
async def toggle_archive(
    contract_id: int,
    current_user: User = Depends(require_role(*REQUIRED_ROLES["toggle_archive"])),
    db: AsyncSession = Depends(get_db),
):
    contract = await ContractLifecycle(db).toggle_archive(contract_id, current_user)
    message = "ARCHIVED" if contract.is_archived else "RESTORED"
    return ArchiveToggleResponse(message=message, is_archived=contract.is_archived)


@router.delete("/{contract_id}")
async def delete_contract(
    contract_id: int,
    current_user: User = Depends(require_role(*REQUIRED_ROLES["delete"])),
    db: AsyncSession = Depends(get_db),
):
    await ContractLifecycle(db).delete(contract_id, current_user)
    return {"message": "Deleted"}


@router.get("/{contract_id}/history", response_model=list[HistoryEntryResponse])
async def contract_history(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ContractLifecycle(db).history(contract_id)


def _contract_response(contract: Contract, today: date) -> ContractResponse:
    status = classify(contract.valid_until, today)
    return ContractResponse(
        id=contract.id,
        client_name=contract.client_name,
        salesperson=contract.salesperson,
        insurance_type=contract.insurance_type,
        policy_no=contract.policy_no,
        valid_from=contract.valid_from,
        valid_until=contract.valid_until,
        registration_no=contract.registration_no,
        yearly_premium=contract.yearly_premium,
        payout=contract.payout,
        notes=contract.notes or [],
        updated_at=contract.updated_at,
        is_archived=contract.is_archived,
        status=status,
        view=view_of(contract.is_archived, status),
    )
