from typing import Annotated, Any

from fastapi import APIRouter, Depends

from household_ledger.api.dependencies import get_store
from household_ledger.domain.filters import resolve_filters
from household_ledger.domain.ledger import build_view_payload
from household_ledger.services.dashboard import open_session
from household_ledger.services.store import TransactionStore

router = APIRouter()


@router.get("/api/dashboard")
async def get_dashboard(
    store: Annotated[TransactionStore, Depends(get_store)],
    user_id: str | None = None,
    search: str | None = None,
    month: str | None = None,
    day: str | None = None,
    changed: str | None = None,
) -> dict[str, Any]:
    filters = resolve_filters(search, month, day, changed)
    session = await open_session(store, user_id, filters)
    return {
        "user": session.user.model_dump(),
        "error": session.error,
        "view": build_view_payload(session.view()),
    }
