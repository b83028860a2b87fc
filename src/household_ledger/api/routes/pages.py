import os
from datetime import date
from typing import Annotated, Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from household_ledger.api.dependencies import get_store
from household_ledger.domain.catalog import CATEGORIES, DEFAULT_CATEGORY, USERS
from household_ledger.domain.filters import FilterState, resolve_filters
from household_ledger.domain.timefmt import format_amount, format_stored_day
from household_ledger.services.dashboard import DashboardSession, TransactionForm, open_session
from household_ledger.services.store import TransactionStore

router = APIRouter()

templates_dir = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "web", "templates")
)
templates = Jinja2Templates(directory=templates_dir)
templates.env.filters["money"] = format_amount
templates.env.filters["day_label"] = format_stored_day

NOTICES = {
    "added": "Transaction added.",
    "deleted": "Transaction deleted.",
}


def dashboard_url(user_id: str, filters: FilterState | None = None, **extra: str | None) -> str:
    params = {"user": user_id}
    if filters is not None:
        params.update(filters.as_params())
    params.update({key: value for key, value in extra.items() if value})
    return f"/?{urlencode(params)}"


def _render(
    request: Request,
    session: DashboardSession,
    *,
    notice: str | None = None,
    form: TransactionForm | None = None,
) -> HTMLResponse:
    view = session.view()
    filters = session.filters
    context: dict[str, Any] = {
        "user": session.user,
        "users": USERS,
        "categories": CATEGORIES,
        "view": view,
        "filters": filters,
        "error": session.error,
        "notice": NOTICES.get(notice or ""),
        "form": form or TransactionForm(date=date.today().isoformat()),
        "filter_params": filters.as_params(),
        "current_url": dashboard_url(session.user.user_id, filters),
        "clear_url": dashboard_url(session.user.user_id),
    }
    return templates.TemplateResponse(request, "index.html", context)


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    store: Annotated[TransactionStore, Depends(get_store)],
    user: str | None = None,
    search: str | None = None,
    month: str | None = None,
    day: str | None = None,
    changed: str | None = None,
    notice: str | None = None,
) -> HTMLResponse:
    filters = resolve_filters(search, month, day, changed)
    session = await open_session(store, user, filters)
    return _render(request, session, notice=notice)


@router.post("/dashboard/transactions", response_class=HTMLResponse)
async def add_transaction(
    request: Request,
    store: Annotated[TransactionStore, Depends(get_store)],
    user: Annotated[str | None, Form()] = None,
    description: Annotated[str, Form()] = "",
    amount: Annotated[str | None, Form()] = None,
    category: Annotated[str, Form()] = DEFAULT_CATEGORY,
    type_: Annotated[str, Form(alias="type")] = "expense",
    tx_date: Annotated[str | None, Form(alias="date")] = None,
    search: Annotated[str | None, Form()] = None,
    month: Annotated[str | None, Form()] = None,
    day: Annotated[str | None, Form()] = None,
) -> Response:
    filters = resolve_filters(search, month, day)
    session = await open_session(store, user, filters)
    form = TransactionForm(
        description=description,
        amount=amount,
        category=category,
        type=type_,
        date=tx_date,
    )
    if await session.add(form):
        return RedirectResponse(
            url=dashboard_url(session.user.user_id, filters, notice="added"),
            status_code=303,
        )
    return _render(request, session, form=form)


@router.post("/dashboard/transactions/{transaction_id}/delete", response_class=HTMLResponse)
async def delete_transaction(
    request: Request,
    transaction_id: str,
    store: Annotated[TransactionStore, Depends(get_store)],
    user: Annotated[str | None, Form()] = None,
    search: Annotated[str | None, Form()] = None,
    month: Annotated[str | None, Form()] = None,
    day: Annotated[str | None, Form()] = None,
) -> Response:
    filters = resolve_filters(search, month, day)
    session = await open_session(store, user, filters)
    if await session.delete(transaction_id):
        return RedirectResponse(
            url=dashboard_url(session.user.user_id, filters, notice="deleted"),
            status_code=303,
        )
    return _render(request, session)
