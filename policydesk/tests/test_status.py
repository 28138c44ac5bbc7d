from datetime import date, datetime, timedelta

import pytest

from policydesk.common.enums import ContractView, ExpiryStatus
from policydesk.core.contracts.status import classify, view_of

TODAY = date(2026, 3, 15)


@pytest.mark.parametrize(
    "offset_days, expected",
    [
        (-365, ExpiryStatus.EXPIRED),
        (-1, ExpiryStatus.EXPIRED),
        (0, ExpiryStatus.WARNING),
        (1, ExpiryStatus.WARNING),
        (30, ExpiryStatus.WARNING),
        (31, ExpiryStatus.VALID),
        (400, ExpiryStatus.VALID),
    ],
)
def test_classify_boundaries(offset_days, expected):
    assert classify(TODAY + timedelta(days=offset_days), TODAY) == expected


def test_classify_ignores_time_of_day():
    late_today = datetime(2026, 3, 15, 23, 59, 59)
    early_tomorrow = datetime(2026, 3, 16, 0, 0, 1)
    assert classify(late_today, datetime(2026, 3, 15, 0, 0)) == ExpiryStatus.WARNING
    assert classify(datetime(2026, 3, 14, 23, 59), late_today) == ExpiryStatus.EXPIRED
    assert classify(early_tomorrow + timedelta(days=30), late_today) == ExpiryStatus.VALID


def test_classify_uses_supplied_today_only():
    valid_until = date(2020, 1, 10)
    assert classify(valid_until, date(2020, 1, 1)) == ExpiryStatus.WARNING
    assert classify(valid_until, date(2019, 1, 1)) == ExpiryStatus.VALID


@pytest.mark.parametrize("is_archived", [True, False])
def test_every_contract_lands_in_exactly_one_view(is_archived):
    for offset in range(-120, 121, 3):
        status = classify(TODAY + timedelta(days=offset), TODAY)
        view = view_of(is_archived, status)

        memberships = [
            not is_archived and status != ExpiryStatus.EXPIRED,
            not is_archived and status == ExpiryStatus.EXPIRED,
            is_archived,
        ]
        assert memberships.count(True) == 1
        assert view == [ContractView.ACTIVE, ContractView.ENDED, ContractView.ARCHIVED][
            memberships.index(True)
        ]


def test_archived_contract_keeps_its_status_but_leaves_active_view():
    status = classify(TODAY + timedelta(days=200), TODAY)
    assert status == ExpiryStatus.VALID
    assert view_of(True, status) == ContractView.ARCHIVED
    assert view_of(False, status) == ContractView.ACTIVE
