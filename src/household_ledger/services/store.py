from typing import Any

import pydantic

from household_ledger.core import settings
from household_ledger.domain.timefmt import utc_timestamp
from household_ledger.errors import QueryError
from household_ledger.integration.supabase import SupabaseClient
from household_ledger.logger import get_logger
from household_ledger.models import ANONYMOUS_USER, Transaction, TransactionCreate

logger = get_logger(__name__)


def _to_transaction(row: dict[str, Any]) -> Transaction:
    try:
        return Transaction.model_validate(row)
    except pydantic.ValidationError as exc:
        logger.warning("[STORE] Rejected malformed row id=%s: %s", row.get("id"), exc)
        raise QueryError("Store returned an invalid transaction") from exc


class TransactionStore:
    """Maps the ledger operations onto the ``transactions`` table."""

    def __init__(self, client: SupabaseClient, table: str | None = None) -> None:
        self.client = client
        self.table = table or settings.SUPABASE_TABLE

    async def list_transactions(self, user_id: str | None) -> list[Transaction]:
        owner = user_id or ANONYMOUS_USER
        rows = await self.client.select_rows(
            self.table,
            filters={"user_id": owner},
            order="date.desc",
        )
        transactions = [_to_transaction(row) for row in rows]
        logger.debug("[STORE] Loaded %d transaction(s) for '%s'.", len(transactions), owner)
        return transactions

    async def create_transaction(
        self,
        payload: TransactionCreate,
        user_id: str | None = None,
    ) -> Transaction:
        row: dict[str, Any] = {
            "description": payload.description,
            "amount": payload.amount,
            "category": payload.category,
            "type": payload.type,
            "date": payload.date or utc_timestamp(),
            "user_id": user_id or payload.user_id or ANONYMOUS_USER,
        }
        created = await self.client.insert_rows(self.table, [row])
        if not created:
            raise QueryError("Store did not return the created transaction")
        transaction = _to_transaction(created[0])
        logger.info(
            "[STORE] Created %s %s for '%s' (id=%s).",
            transaction.type,
            transaction.amount,
            transaction.user_id,
            transaction.id,
        )
        return transaction

    async def delete_transaction(self, transaction_id: str) -> bool:
        # No existence check: an unknown id deletes nothing and still succeeds.
        await self.client.delete_rows(self.table, filters={"id": transaction_id})
        logger.info("[STORE] Deleted transaction id=%s.", transaction_id)
        return True
