from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from household_ledger.domain.timefmt import parse_day, parse_day_param
from household_ledger.logger import get_logger
from household_ledger.models import Transaction

logger = get_logger(__name__)

ALL_MONTHS = "all"


def month_key(day: date) -> str:
    """Grouping key for a calendar month: ``"{year}-{month}"`` with a 1-based month."""
    return f"{day.year}-{day.month}"


def parse_month_key(key: str | None) -> tuple[int, int] | None:
    if not key:
        return None
    year_raw, sep, month_raw = key.strip().partition("-")
    if not sep:
        return None
    try:
        year, month = int(year_raw), int(month_raw)
    except ValueError:
        return None
    if not 1 <= month <= 12 or year < 1:
        return None
    return year, month


@dataclass(frozen=True)
class FilterState:
    search: str = ""
    selected_month: str = ALL_MONTHS
    selected_date: date | None = None

    @property
    def is_active(self) -> bool:
        return bool(self.search) or self.selected_month != ALL_MONTHS or self.selected_date is not None

    def with_search(self, search: str | None) -> FilterState:
        return replace(self, search=search or "")

    def select_month(self, key: str | None) -> FilterState:
        key = key or ALL_MONTHS
        selected_date = self.selected_date
        if selected_date is not None and key != ALL_MONTHS and month_key(selected_date) != key:
            selected_date = None
        return replace(self, selected_month=key, selected_date=selected_date)

    def select_date(self, day: date | None) -> FilterState:
        if day is None:
            return replace(self, selected_date=None)
        return replace(self, selected_date=day, selected_month=month_key(day))

    def clear(self) -> FilterState:
        return FilterState()

    def matches_search(self, transaction: Transaction) -> bool:
        if not self.search:
            return True
        needle = self.search.lower()
        return needle in transaction.description.lower() or needle in transaction.category.lower()

    def matches(self, transaction: Transaction) -> bool:
        if not self.matches_search(transaction):
            return False
        day = parse_day(transaction.date)
        if self.selected_month != ALL_MONTHS:
            if day is None or month_key(day) != self.selected_month:
                return False
        if self.selected_date is not None and day != self.selected_date:
            return False
        return True

    def as_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.search:
            params["search"] = self.search
        if self.selected_month != ALL_MONTHS:
            params["month"] = self.selected_month
        if self.selected_date is not None:
            params["day"] = self.selected_date.isoformat()
        return params


def resolve_filters(
    search: str | None,
    month: str | None,
    day: str | None,
    changed: str | None = None,
) -> FilterState:
    """Rebuild filter state from request parameters.

    ``changed="month"`` marks the month selector as the control the user just
    touched, so it is applied after the day and may clear it. Otherwise a
    selected day decides the month.
    """
    state = FilterState().with_search(search)

    month_value: str | None = None
    if month and month != ALL_MONTHS:
        parsed = parse_month_key(month)
        if parsed is None:
            logger.warning("[FILTER] Ignoring invalid month '%s'.", month)
        else:
            month_value = f"{parsed[0]}-{parsed[1]}"

    day_value = parse_day_param(day)
    if day and day_value is None:
        logger.warning("[FILTER] Ignoring invalid day '%s'.", day)

    if day_value is None:
        return state.select_month(month_value)
    if changed == "month":
        return state.select_date(day_value).select_month(month_value)
    return state.select_date(day_value)
