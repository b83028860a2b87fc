from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from household_ledger.domain.filters import ALL_MONTHS, FilterState, month_key, parse_month_key
from household_ledger.domain.timefmt import format_month_label, format_stored_day, parse_day
from household_ledger.models import Transaction

UNDATED = "undated"


@dataclass(frozen=True)
class Totals:
    income: float = 0.0
    expense: float = 0.0

    @property
    def balance(self) -> float:
        return self.income - self.expense


@dataclass(frozen=True)
class MonthOption:
    key: str
    label: str


@dataclass
class MonthGroup:
    key: str
    label: str
    transactions: list[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class LedgerView:
    filters: FilterState
    reference_month: MonthOption
    monthly: Totals
    today: Totals
    months: list[MonthOption]
    groups: list[MonthGroup]
    filtered_count: int
    total_count: int
    owner_name: str = ""

    @property
    def is_empty(self) -> bool:
        return self.filtered_count == 0

    @property
    def has_transactions(self) -> bool:
        return self.total_count > 0

    @property
    def empty_message(self) -> str | None:
        if not self.is_empty:
            return None
        if not self.has_transactions:
            owner = f" for {self.owner_name}" if self.owner_name else ""
            return f"No transactions yet{owner}. Add a new one to get started."
        return "No transactions match the current filters."


def month_label(key: str) -> str:
    parsed = parse_month_key(key)
    if parsed is None:
        return key
    return format_month_label(*parsed)


def sum_totals(transactions: Iterable[Transaction]) -> Totals:
    income = 0.0
    expense = 0.0
    for transaction in transactions:
        if transaction.type == "income":
            income += transaction.amount
        elif transaction.type == "expense":
            expense += transaction.amount
    return Totals(income=income, expense=expense)


def transaction_month(transaction: Transaction) -> str | None:
    day = parse_day(transaction.date)
    return month_key(day) if day is not None else None


def _sort_day(transaction: Transaction) -> date:
    return parse_day(transaction.date) or date.min


def monthly_totals(transactions: Iterable[Transaction], reference: date) -> Totals:
    key = month_key(reference)
    return sum_totals(t for t in transactions if transaction_month(t) == key)


def daily_totals(transactions: Iterable[Transaction], day: date) -> Totals:
    return sum_totals(t for t in transactions if parse_day(t.date) == day)


def sort_newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    # Stable: same-day rows keep the store's order. Undated rows sink to the end.
    return sorted(transactions, key=_sort_day, reverse=True)


def filter_transactions(transactions: Iterable[Transaction], state: FilterState) -> list[Transaction]:
    return sort_newest_first(t for t in transactions if state.matches(t))


def group_by_month(transactions: Iterable[Transaction]) -> list[MonthGroup]:
    groups: dict[str, MonthGroup] = {}
    for transaction in transactions:
        key = transaction_month(transaction) or UNDATED
        group = groups.get(key)
        if group is None:
            label = "Undated" if key == UNDATED else month_label(key)
            group = groups[key] = MonthGroup(key=key, label=label)
        group.transactions.append(transaction)
    return sorted(
        groups.values(),
        key=lambda g: _sort_day(g.transactions[0]),
        reverse=True,
    )


def available_months(transactions: Iterable[Transaction]) -> list[MonthOption]:
    seen: dict[str, date] = {}
    for transaction in transactions:
        day = parse_day(transaction.date)
        if day is None:
            continue
        key = month_key(day)
        if key not in seen or day > seen[key]:
            seen[key] = day
    ordered = sorted(seen.items(), key=lambda item: (item[1].year, item[1].month), reverse=True)
    return [MonthOption(key=key, label=month_label(key)) for key, _ in ordered]


def resolve_reference_month(state: FilterState, today: date) -> date:
    """The selected month when concrete, otherwise the month of ``today``."""
    if state.selected_month != ALL_MONTHS:
        parsed = parse_month_key(state.selected_month)
        if parsed is not None:
            return date(parsed[0], parsed[1], 1)
    return today


def build_view(
    transactions: Sequence[Transaction],
    state: FilterState,
    today: date,
    *,
    owner_name: str = "",
) -> LedgerView:
    reference = resolve_reference_month(state, today)
    reference_key = month_key(reference)
    filtered = filter_transactions(transactions, state)
    return LedgerView(
        filters=state,
        reference_month=MonthOption(key=reference_key, label=month_label(reference_key)),
        monthly=monthly_totals(transactions, reference),
        today=daily_totals(transactions, today),
        months=available_months(transactions),
        groups=group_by_month(filtered),
        filtered_count=len(filtered),
        total_count=len(transactions),
        owner_name=owner_name,
    )


def _totals_payload(totals: Totals) -> dict[str, float]:
    return {
        "income": round(totals.income, 2),
        "expense": round(totals.expense, 2),
        "balance": round(totals.balance, 2),
    }


def build_view_payload(view: LedgerView) -> dict[str, Any]:
    filters = view.filters
    return {
        "filters": {
            "search": filters.search,
            "month": filters.selected_month,
            "day": filters.selected_date.isoformat() if filters.selected_date else None,
        },
        "reference_month": {"key": view.reference_month.key, "label": view.reference_month.label},
        "monthly": _totals_payload(view.monthly),
        "today": _totals_payload(view.today),
        "months": [{"key": m.key, "label": m.label} for m in view.months],
        "groups": [
            {
                "key": group.key,
                "label": group.label,
                "transactions": [
                    {
                        **t.model_dump(),
                        "date_formatted": format_stored_day(t.date),
                    }
                    for t in group.transactions
                ],
            }
            for group in view.groups
        ],
        "filtered_count": view.filtered_count,
        "total_count": view.total_count,
        "empty_message": view.empty_message,
    }
