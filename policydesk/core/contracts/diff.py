"""Human-readable field diff used for UPDATED history entries."""

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

# (field, label) in the order changes are reported
DIFF_FIELDS: list[tuple[str, str]] = [
    ("client_name", "Client"),
    ("salesperson", "Salesperson"),
    ("insurance_type", "Type"),
    ("policy_no", "Policy No"),
    ("valid_from", "Valid From"),
    ("valid_until", "Valid Until"),
    ("registration_no", "Reg No"),
    ("yearly_premium", "Yearly Price"),
    ("payout", "Payout"),
]


def _display(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _describe_notes(old_notes: Sequence[str], new_notes: Sequence[str]) -> str | None:
    if list(old_notes) == list(new_notes):
        return None
    if len(new_notes) > len(old_notes):
        return f'Added note: "{new_notes[-1]}"'
    if len(new_notes) < len(old_notes):
        return "Removed note"
    return "Notes updated"


def diff_contracts(old: Mapping[str, Any], new: Mapping[str, Any]) -> list[str]:
    """Compare two contract snapshots field by field.

    Values are compared by their string form, so ``100.00`` and ``100.0`` count
    as a change. Notes get a single coarse line at most.
    """
    changes: list[str] = []
    for field, label in DIFF_FIELDS:
        before = _display(old.get(field))
        after = _display(new.get(field))
        if before != after:
            changes.append(f"{label}: {before} -> {after}")

    notes_change = _describe_notes(old.get("notes") or [], new.get("notes") or [])
    if notes_change:
        changes.append(notes_change)

    return changes
