from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from household_ledger.api.dependencies import get_store
from household_ledger.errors import QueryError
from household_ledger.logger import get_logger
from household_ledger.models import TransactionCreate
from household_ledger.services.store import TransactionStore

logger = get_logger(__name__)

router = APIRouter()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.get("/transactions", response_model=None)
async def list_transactions(
    store: Annotated[TransactionStore, Depends(get_store)],
    user_id: str | None = None,
) -> dict[str, Any] | JSONResponse:
    try:
        transactions = await store.list_transactions(user_id)
    except QueryError as exc:
        return _error(exc.message, 400)
    except Exception:
        logger.exception("[API] Error fetching transactions.")
        return _error("Failed to fetch transactions", 500)
    return {"data": [t.model_dump() for t in transactions]}


@router.post("/transactions", response_model=None)
async def create_transaction(
    payload: TransactionCreate,
    store: Annotated[TransactionStore, Depends(get_store)],
) -> dict[str, Any] | JSONResponse:
    try:
        transaction = await store.create_transaction(payload, user_id=payload.user_id)
    except QueryError as exc:
        return _error(exc.message, 400)
    except Exception:
        logger.exception("[API] Error creating transaction.")
        return _error("Failed to create transaction", 500)
    return {"data": transaction.model_dump()}


@router.delete("/transactions/{transaction_id}", response_model=None)
async def delete_transaction(
    transaction_id: str,
    store: Annotated[TransactionStore, Depends(get_store)],
) -> dict[str, Any] | JSONResponse:
    try:
        await store.delete_transaction(transaction_id)
    except QueryError as exc:
        return _error(exc.message, 400)
    except Exception:
        logger.exception("[API] Error deleting transaction %s.", transaction_id)
        return _error("Failed to delete transaction", 500)
    return {"success": True}
