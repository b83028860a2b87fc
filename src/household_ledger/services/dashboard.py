import math
from dataclasses import dataclass
from datetime import date

from household_ledger.core import settings
from household_ledger.domain.catalog import DEFAULT_CATEGORY, is_known_category, resolve_user
from household_ledger.domain.filters import FilterState
from household_ledger.domain.ledger import LedgerView, build_view
from household_ledger.errors import LedgerError, ValidationError
from household_ledger.logger import get_logger
from household_ledger.models import Transaction, TransactionCreate, UserProfile
from household_ledger.services.store import TransactionStore

logger = get_logger(__name__)

LOAD_FAILED = "Failed to load transactions. Please try again."
ADD_FAILED = "Failed to add transaction. Please try again."
DELETE_FAILED = "Failed to delete transaction. Please try again."

TRANSACTION_TYPES = ("income", "expense")


@dataclass
class TransactionForm:
    """Raw values posted by the add-transaction form."""
    description: str = ""
    amount: str | None = None
    category: str = DEFAULT_CATEGORY
    type: str = "expense"
    date: str | None = None

    def to_create(self, user_id: str) -> TransactionCreate:
        raw_amount = (self.amount or "").strip()
        if not raw_amount:
            raise ValidationError("Please enter an amount.", field="amount")
        try:
            amount = float(raw_amount)
        except ValueError as exc:
            raise ValidationError("Amount must be a number.", field="amount") from exc
        if not math.isfinite(amount) or amount <= 0:
            raise ValidationError("Amount must be greater than zero.", field="amount")
        if self.type not in TRANSACTION_TYPES:
            raise ValidationError("Choose income or expense.", field="type")
        if not is_known_category(self.category):
            raise ValidationError(f"Unknown category '{self.category}'.", field="category")
        if self.date:
            try:
                date.fromisoformat(self.date)
            except ValueError as exc:
                raise ValidationError("Date must be in YYYY-MM-DD format.", field="date") from exc
        return TransactionCreate(
            description=self.description,
            amount=amount,
            category=self.category,
            type=self.type,
            date=self.date or None,
            user_id=user_id,
        )


class DashboardSession:
    """State behind one dashboard: selected user, fetched list, filters and error banner."""

    def __init__(
        self,
        store: TransactionStore,
        user: UserProfile,
        filters: FilterState | None = None,
    ) -> None:
        self.store = store
        self.user = user
        self.filters = filters or FilterState()
        self.transactions: list[Transaction] = []
        self.error: str | None = None

    async def load(self) -> bool:
        self.error = None
        try:
            self.transactions = await self.store.list_transactions(self.user.user_id)
        except LedgerError as exc:
            logger.error("[DASHBOARD] Failed to fetch transactions for '%s': %s", self.user.user_id, exc)
            self.error = LOAD_FAILED
            return False
        return True

    async def switch_user(self, user: UserProfile) -> bool:
        self.user = user
        self.transactions = []
        return await self.load()

    async def add(self, form: TransactionForm) -> bool:
        self.error = None
        try:
            payload = form.to_create(self.user.user_id)
        except ValidationError as exc:
            logger.info("[DASHBOARD] Rejected form input (%s): %s", exc.field, exc.message)
            self.error = exc.message
            return False
        try:
            created = await self.store.create_transaction(payload, user_id=self.user.user_id)
        except LedgerError as exc:
            logger.error("[DASHBOARD] Failed to add transaction: %s", exc)
            self.error = ADD_FAILED
            return False
        self.transactions = [created, *self.transactions]
        return True

    async def delete(self, transaction_id: str) -> bool:
        self.error = None
        try:
            await self.store.delete_transaction(transaction_id)
        except LedgerError as exc:
            logger.error("[DASHBOARD] Failed to delete transaction %s: %s", transaction_id, exc)
            self.error = DELETE_FAILED
            return False
        self.transactions = [t for t in self.transactions if t.id != transaction_id]
        return True

    def dismiss_error(self) -> None:
        self.error = None

    def clear_filters(self) -> None:
        self.filters = self.filters.clear()

    def view(self, today: date | None = None) -> LedgerView:
        return build_view(
            self.transactions,
            self.filters,
            today or date.today(),
            owner_name=self.user.name,
        )


async def open_session(
    store: TransactionStore,
    user_id: str | None,
    filters: FilterState | None = None,
) -> DashboardSession:
    user = resolve_user(user_id, settings.DEFAULT_USER)
    if user_id and user.user_id != user_id:
        logger.warning("[DASHBOARD] Unknown user '%s', showing '%s'.", user_id, user.user_id)
    session = DashboardSession(store, user, filters)
    await session.load()
    return session
