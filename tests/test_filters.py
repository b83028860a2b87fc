from datetime import date

import pytest

from household_ledger.domain.filters import (
    ALL_MONTHS,
    FilterState,
    month_key,
    parse_month_key,
    resolve_filters,
)
from household_ledger.models import Transaction


def test_month_key_is_one_based_and_unpadded() -> None:
    assert month_key(date(2024, 6, 2)) == "2024-6"
    assert month_key(date(2024, 12, 31)) == "2024-12"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-6", (2024, 6)),
        ("2024-06", (2024, 6)),
        ("2024-13", None),
        ("2024-0", None),
        ("june", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_month_key(raw: str | None, expected: tuple[int, int] | None) -> None:
    assert parse_month_key(raw) == expected


def test_select_month_keeps_day_inside_month() -> None:
    state = FilterState().select_date(date(2024, 6, 2)).select_month("2024-6")
    assert state.selected_date == date(2024, 6, 2)


def test_select_month_clears_day_outside_month() -> None:
    state = FilterState().select_date(date(2024, 6, 2)).select_month("2024-5")
    assert state.selected_month == "2024-5"
    assert state.selected_date is None


def test_select_all_months_keeps_day() -> None:
    state = FilterState().select_date(date(2024, 6, 2)).select_month(ALL_MONTHS)
    assert state.selected_month == ALL_MONTHS
    assert state.selected_date == date(2024, 6, 2)


def test_unselect_day_keeps_month() -> None:
    state = FilterState().select_date(date(2024, 6, 2)).select_date(None)
    assert state.selected_month == "2024-6"
    assert state.selected_date is None


def test_clear_resets_everything() -> None:
    state = FilterState(search="food").select_date(date(2024, 6, 2))
    assert state.is_active
    cleared = state.clear()
    assert cleared == FilterState()
    assert not cleared.is_active


def test_matches_handles_timestamps() -> None:
    tx = Transaction(
        id="9",
        description="Late dinner",
        amount=10,
        category="food",
        type="expense",
        date="2024-06-02T23:45:00.000Z",
    )
    assert FilterState().select_date(date(2024, 6, 2)).matches(tx)
    assert not FilterState().select_date(date(2024, 6, 3)).matches(tx)


def test_as_params_round_trips_through_resolve() -> None:
    state = FilterState(search="bus").select_date(date(2024, 7, 3))
    params = state.as_params()
    assert params == {"search": "bus", "month": "2024-7", "day": "2024-07-03"}
    assert resolve_filters(params.get("search"), params.get("month"), params.get("day")) == state


def test_resolve_day_wins_over_stale_month() -> None:
    state = resolve_filters(None, "2024-5", "2024-06-02")
    assert state.selected_month == "2024-6"
    assert state.selected_date == date(2024, 6, 2)


def test_resolve_changed_month_clears_day() -> None:
    state = resolve_filters(None, "2024-5", "2024-06-02", changed="month")
    assert state.selected_month == "2024-5"
    assert state.selected_date is None


def test_resolve_ignores_invalid_values() -> None:
    state = resolve_filters("", "not-a-month", "2024-02-30")
    assert state == FilterState()


def test_resolve_normalizes_padded_month() -> None:
    assert resolve_filters(None, "2024-06", None).selected_month == "2024-6"
