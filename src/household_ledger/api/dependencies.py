from fastapi import HTTPException, Request

from household_ledger.services.store import TransactionStore


def get_store(request: Request) -> TransactionStore:
    store = getattr(request.app.state, "store", None)
    if not store:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return store
