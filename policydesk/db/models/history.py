from datetime import datetime

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from policydesk.db.base import BaseModel, UTCDateTime


class HistoryEntry(BaseModel):
    """Insert-only audit row.

    ``contract_id`` is deliberately not a database foreign key: history has to
    outlive the contract it describes.
    """

    __tablename__ = "history"
    __table_args__ = {"sqlite_autoincrement": True}

    contract_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False, default="")
