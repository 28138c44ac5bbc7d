"""Expiry classification and the three-way view partition.

Nothing here reads the clock: callers pass ``today`` explicitly.
"""

from datetime import date, datetime

from policydesk.common.enums import ContractView, ExpiryStatus

WARNING_WINDOW_DAYS = 30


def _as_date(value: date | datetime) -> date:
    # datetime is a date subclass, check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def classify(valid_until: date | datetime, today: date | datetime) -> ExpiryStatus:
    diff_days = (_as_date(valid_until) - _as_date(today)).days
    if diff_days < 0:
        return ExpiryStatus.EXPIRED
    if diff_days <= WARNING_WINDOW_DAYS:
        return ExpiryStatus.WARNING
    return ExpiryStatus.VALID


def view_of(is_archived: bool, status: ExpiryStatus) -> ContractView:
    """Archived wins regardless of dates; otherwise expiry decides active vs ended."""
    if is_archived:
        return ContractView.ARCHIVED
    if status == ExpiryStatus.EXPIRED:
        return ContractView.ENDED
    return ContractView.ACTIVE
