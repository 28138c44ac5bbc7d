from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from policydesk.db.base import BaseModel, UTCDateTime


class Contract(BaseModel):
    __tablename__ = "contracts"
    __table_args__ = (
        UniqueConstraint("policy_no", "registration_no", name="uq_contracts_business_key"),
        # ids are never reused; history rows point at them without a foreign key
        {"sqlite_autoincrement": True},
    )

    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    salesperson: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    insurance_type: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    policy_no: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    valid_from: Mapped[date | None] = mapped_column(Date, nullable=True)
    valid_until: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    registration_no: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    yearly_premium: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    payout: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    notes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
