"""Spreadsheet ingestion: upsert loosely-typed rows by business key.

Rows come from exported spreadsheets whose headers vary between exports, so
each logical field is resolved from a prioritised list of header aliases,
compared case-insensitively. Imported changes are not diffed or audited.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.common.logging import get_logger
from policydesk.core.contracts.repository import ContractRepository
from policydesk.core.contracts.schemas import MONEY_QUANTUM, ImportResult

logger = get_logger("contracts.importer")

# Field -> header candidates, first non-empty match wins
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "policy_no": ("Poliso Nr.", "Poliso Nr", "POLISO_NR", "policyNo", "Policy No", "policy_no"),
    "client_name": ("Draudėjo pavadinimas", "KLIENTAS", "draudejas", "Client", "client_name"),
    "salesperson": ("Kuratorius", "BROKERIS", "pardavejas", "Salesperson", "salesperson"),
    "insurance_type": (
        "Draudimo rūšis",
        "Draudimo produktas",
        "DRAUDIMO_PRODUKTAS",
        "ldGrupe",
        "Insurance Type",
        "insurance_type",
    ),
    "valid_from": ("Galioja nuo", "POLISO_PRADZIA", "galiojaNuo", "Valid From", "valid_from"),
    "valid_until": ("Galioja iki", "POLISO_PABAIGA", "galiojaIki", "Valid Until", "valid_until"),
    "registration_no": (
        "Valstybinis Nr.",
        "Valstybinis Nr",
        "VALSTYBINIS_NR",
        "valstybinisNr",
        "Reg No",
        "registration_no",
    ),
    "yearly_premium": (
        "Metinė įmoka",
        "Pasirašyta įmoka",
        "METINE_IMOKA",
        "metineIsmoka",
        "Yearly Premium",
        "yearly_premium",
    ),
    "payout": ("Draudimo suma", "ISMOKA", "ismoka", "Payout", "payout"),
    "updated_at": (
        "Atnaujini-mo data",
        "Atnaujinimo data",
        "ATNAUJINIMO_DATA",
        "atnaujinimoData",
        "Last Updated",
        "updated_at",
    ),
}

# Numbers above this are spreadsheet serial dates; smaller ones are not dates
SERIAL_DATE_THRESHOLD = 20000
SPREADSHEET_EPOCH = datetime(1899, 12, 30)

DATE_FORMATS = ("%Y-%m-%d", "%Y.%m.%d", "%Y/%m/%d", "%d.%m.%Y", "%d/%m/%Y")

# Fields overwritten on an existing contract; notes and archive flag stay
UPDATABLE_FIELDS = (
    "client_name",
    "salesperson",
    "insurance_type",
    "valid_from",
    "valid_until",
    "registration_no",
    "yearly_premium",
    "payout",
)


class ImportRowError(Exception):
    pass


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def resolve(row: Mapping[str, Any], field: str) -> Any:
    lowered = {str(key).strip().lower(): value for key, value in row.items()}
    for candidate in COLUMN_ALIASES[field]:
        value = lowered.get(candidate.lower())
        if not _is_blank(value):
            return value
    return None


def parse_date(value: Any, today: date) -> date:
    if _is_blank(value):
        return today
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    number = None
    if isinstance(value, int | float | Decimal) and not isinstance(value, bool):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            number = None

    if number is not None:
        if number > SERIAL_DATE_THRESHOLD:
            return (SPREADSHEET_EPOCH + timedelta(days=number)).date()
        return today

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return today


def parse_amount(value: Any) -> Decimal:
    if _is_blank(value) or isinstance(value, bool):
        return Decimal("0.00")
    try:
        amount = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation:
        return Decimal("0.00")
    if not amount.is_finite():
        return Decimal("0.00")
    return amount.quantize(MONEY_QUANTUM)


def normalize_row(row: Mapping[str, Any], today: date) -> dict[str, Any] | None:
    """Map a raw row onto contract fields; ``None`` means the row has no policy number."""
    policy_no = resolve(row, "policy_no")
    if policy_no is None:
        return None

    fields = {
        "policy_no": str(policy_no).strip(),
        "client_name": str(resolve(row, "client_name") or "Unknown").strip(),
        "salesperson": str(resolve(row, "salesperson") or "").strip(),
        "insurance_type": str(resolve(row, "insurance_type") or "").strip(),
        "valid_from": parse_date(resolve(row, "valid_from"), today),
        "valid_until": parse_date(resolve(row, "valid_until"), today),
        "registration_no": str(resolve(row, "registration_no") or "").strip(),
        "yearly_premium": parse_amount(resolve(row, "yearly_premium")),
        "payout": parse_amount(resolve(row, "payout")),
        "updated_at": parse_date(resolve(row, "updated_at"), today),
    }
    if not fields["policy_no"]:
        return None
    for amount_field in ("yearly_premium", "payout"):
        if fields[amount_field] < 0:
            raise ImportRowError(f"{amount_field} cannot be negative: {fields[amount_field]}")
    return fields


class ImportReconciler:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = ContractRepository(db)

    async def import_batch(
        self, rows: Iterable[Mapping[str, Any]], today: date | None = None
    ) -> ImportResult:
        today = today or datetime.now(timezone.utc).date()
        result = ImportResult()

        for index, row in enumerate(rows, start=1):
            try:
                async with self.db.begin_nested():
                    imported = await self._import_row(row, today)
            except IntegrityError as e:
                result.failed_count += 1
                result.errors.append(f"Row {index}: duplicate policy/registration pair ({e.orig})")
                logger.warning("Import row %d conflicted: %s", index, e.orig)
                continue
            except Exception as e:
                result.failed_count += 1
                result.errors.append(f"Row {index}: {e}")
                logger.warning("Import row %d failed: %s", index, e)
                continue

            if imported:
                result.success_count += 1
            else:
                result.skipped_count += 1

        logger.info(
            "Import finished: %d succeeded, %d failed, %d skipped",
            result.success_count,
            result.failed_count,
            result.skipped_count,
        )
        return result

    async def _import_row(self, row: Mapping[str, Any], today: date) -> bool:
        if not isinstance(row, Mapping):
            raise ImportRowError(f"expected a record, got {type(row).__name__}")

        fields = normalize_row(row, today)
        if fields is None:
            return False

        updated_at = datetime.combine(fields.pop("updated_at"), time.min, tzinfo=timezone.utc)
        existing = await self.repository.find_by_business_key(
            fields["policy_no"], fields["registration_no"]
        )
        if existing:
            await self.repository.update(
                existing.id,
                {key: fields[key] for key in UPDATABLE_FIELDS},
                updated_at=updated_at,
            )
        else:
            await self.repository.create({**fields, "notes": []}, updated_at=updated_at)
        return True
