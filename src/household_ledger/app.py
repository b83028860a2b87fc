import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from household_ledger.api.routes import catalog, dashboard, pages, transactions
from household_ledger.core import settings
from household_ledger.integration.supabase import SupabaseClient
from household_ledger.logger import get_logger, setup_logging
from household_ledger.services.store import TransactionStore

logger = get_logger(__name__)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    logger.info("[API] Rejected %s %s: %s", request.method, request.url.path, details)
    return JSONResponse({"error": f"Invalid request: {details}"}, status_code=422)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        supabase = SupabaseClient()
        if not supabase.is_configured:
            logger.warning("SUPABASE_URL or SUPABASE_ANON_KEY not set. Store requests will fail.")

        app.state.supabase = supabase
        app.state.store = TransactionStore(client=supabase)

        logger.info("Services initialized.")
        yield
        await supabase.aclose()
        logger.info("Service shutting down.")

    app = FastAPI(title="Household Ledger", lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    static_dir = os.path.join(os.path.dirname(__file__), "web/static")
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

    app.include_router(transactions.router)
    app.include_router(catalog.router)
    app.include_router(dashboard.router)
    app.include_router(pages.router)

    return app


app = create_app()
