"""
FastAPI application for the invoice printer.
"""
import logging
import os
import secrets
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from src.shared.logging_config import configure_logging, level_from_name

_HERE = Path(__file__).resolve().parent
_DATA_ROOT = Path(os.environ.get("INVOICE_DATA_ROOT", "./data"))

log = logging.getLogger(__name__)


def _get_session_secret() -> str:
    """Get or generate a persistent session secret key."""
    env_key = os.environ.get("SESSION_SECRET")
    if env_key:
        return env_key
    _DATA_ROOT.mkdir(parents=True, exist_ok=True)
    key_file = _DATA_ROOT / ".session_key"
    if key_file.exists():
        return key_file.read_text().strip()
    key = secrets.token_hex(32)
    key_file.write_text(key)
    return key


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: make sure the history store is reachable."""
    from src.web.dependencies import get_invoice_repository
    count = len(get_invoice_repository().load())
    log.info("Invoice history holds %d printed invoice(s)", count)
    yield


app = FastAPI(title="Invoice Printer", version="0.1.0", lifespan=lifespan)
app.add_middleware(SessionMiddleware, secret_key=_get_session_secret())
app.mount("/static", StaticFiles(directory=_HERE / "static"), name="static")

from src.web.routers import invoice  # noqa: E402

app.include_router(invoice.router)


@app.get("/")
async def index():
    return RedirectResponse(url="/invoice")


def main():
    configure_logging(level_from_name(os.environ.get("INVOICE_LOG_LEVEL")))
    uvicorn.run(
        "src.web.app:app",
        host=os.environ.get("INVOICE_HOST", "127.0.0.1"),
        port=int(os.environ.get("INVOICE_PORT", "8000")),
        reload=False,
    )


if __name__ == "__main__":
    main()
