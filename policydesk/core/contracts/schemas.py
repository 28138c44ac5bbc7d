from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from policydesk.common.enums import ContractView, ExpiryStatus

MONEY_QUANTUM = Decimal("0.01")

# Business fields in storage order; also the keys of a contract snapshot
CONTRACT_FIELDS = (
    "client_name",
    "salesperson",
    "insurance_type",
    "policy_no",
    "valid_from",
    "valid_until",
    "registration_no",
    "yearly_premium",
    "payout",
    "notes",
)


class ContractPayload(BaseModel):
    """Incoming contract fields.

    Keys follow the legacy front-end JSON (``draudejas``, ``policyNo`` ...);
    the Python field names are accepted as well. Unset fields are left out of
    ``model_dump(exclude_unset=True)`` which is how partial updates work.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    client_name: str = Field("", alias="draudejas")
    salesperson: str = Field("", alias="pardavejas")
    insurance_type: str = Field("", alias="ldGrupe")
    policy_no: str = Field("", alias="policyNo")
    valid_from: date | None = Field(None, alias="galiojaNuo")
    valid_until: date | None = Field(None, alias="galiojaIki")
    registration_no: str = Field("", alias="valstybinisNr")
    yearly_premium: Decimal = Field(Decimal("0.00"), ge=0, alias="metineIsmoka")
    payout: Decimal = Field(Decimal("0.00"), ge=0, alias="ismoka")
    notes: list[str] = Field(default_factory=list)

    @field_validator(
        "client_name", "salesperson", "insurance_type", "policy_no", "registration_no",
        mode="before",
    )
    @classmethod
    def _clean_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("valid_from", "valid_until", mode="before")
    @classmethod
    def _blank_date(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("yearly_premium", "payout", mode="before")
    @classmethod
    def _blank_amount(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return Decimal("0.00")
        return value

    @field_validator("yearly_premium", "payout")
    @classmethod
    def _quantize(cls, value: Decimal) -> Decimal:
        return value.quantize(MONEY_QUANTUM)

    @field_validator("notes", mode="before")
    @classmethod
    def _null_notes(cls, value: Any) -> Any:
        return [] if value is None else value

    def fields(self, *, partial: bool = False) -> dict[str, Any]:
        return self.model_dump(exclude={"id"}, exclude_unset=partial)


class ContractResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    client_name: str = Field(alias="draudejas")
    salesperson: str = Field(alias="pardavejas")
    insurance_type: str = Field(alias="ldGrupe")
    policy_no: str = Field(alias="policyNo")
    valid_from: date | None = Field(alias="galiojaNuo")
    valid_until: date = Field(alias="galiojaIki")
    registration_no: str = Field(alias="valstybinisNr")
    yearly_premium: Decimal = Field(alias="metineIsmoka")
    payout: Decimal = Field(alias="ismoka")
    notes: list[str]
    updated_at: datetime = Field(alias="atnaujinimoData")
    is_archived: bool
    status: ExpiryStatus
    view: ContractView


class ContractMutationResponse(BaseModel):
    message: str
    id: int
    changes: list[str] = []


class ArchiveToggleResponse(BaseModel):
    message: str
    is_archived: bool


class HistoryEntryResponse(BaseModel):
    id: int
    contract_id: int
    user_id: int | None
    username: str | None
    timestamp: datetime
    action: str
    details: str

    model_config = {"from_attributes": True}


class ImportResult(BaseModel):
    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    errors: list[str] = []
