import os

import uvicorn

from household_ledger.app import app
from household_ledger.core import settings
from household_ledger.logger import get_logging_config

__all__ = ["app", "run"]


def run() -> None:
    host = os.getenv("HOST") or settings.DEFAULT_HOST
    port = settings.get_env_int("PORT", settings.DEFAULT_PORT, min_value=1)
    uvicorn.run(app, host=host, port=port, log_config=get_logging_config())


if __name__ == "__main__":
    run()
