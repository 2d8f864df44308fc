"""
Cash-flow dashboard API: FastAPI app factory with startup data loading.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from cashflow.analytics.stats import GlobalStatsView
from cashflow.auth.gate import AuthGate
from cashflow.auth.users import UserDirectory
from cashflow.config import AUTO_REFRESH_SECONDS, REPORTS_FOLDER
from cashflow.data.loader import build_source
from cashflow.data.store import AutoRefresher, TransactionStore
from cashflow.exceptions import DataNotLoadedError, SourceError
from cashflow.logs import configure_logging
from cashflow.api.router_meta import router as meta_router
from cashflow.api.router_transactions import router as transactions_router
from cashflow.api.router_reports import router as reports_router
from cashflow.api.router_auth import router as auth_router


def _lifespan(
    store: Optional[TransactionStore],
    users: Optional[UserDirectory],
    auto_refresh_seconds: float,
):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the store and auth gate, load the ledger, start auto-refresh."""
        configure_logging()
        REPORTS_FOLDER.mkdir(parents=True, exist_ok=True)

        app.state.store = store or TransactionStore(build_source())
        app.state.gate = AuthGate(users or UserDirectory.load())
        app.state.stats_view = GlobalStatsView(app.state.store)

        logger.info(f"Ledger source: {app.state.store.source.describe()}")
        try:
            app.state.store.ensure_loaded()
        except SourceError as exc:
            logger.error(f"Startup load failed, serving without data: {exc}")

        if app.state.store.is_loaded:
            logger.info(f"Cash-flow dashboard ready: {app.state.store.row_count():,} transactions")
        else:
            logger.warning("Cash-flow dashboard ready: no data yet. POST /api/reload to retry.")

        refresher = None
        if auto_refresh_seconds > 0:
            refresher = AutoRefresher(app.state.store, auto_refresh_seconds).start()

        yield

        if refresher is not None:
            refresher.stop()
        app.state.stats_view.close()

    return lifespan


def create_app(
    store: Optional[TransactionStore] = None,
    users: Optional[UserDirectory] = None,
    auto_refresh_seconds: float = AUTO_REFRESH_SECONDS,
) -> FastAPI:
    app = FastAPI(
        title="Cash-flow Dashboard API",
        description="Payables/receivables ledger: filtered queries, KPIs, reports, login",
        version="1.0.0",
        lifespan=_lifespan(store, users, auto_refresh_seconds),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DataNotLoadedError)
    async def data_not_loaded(request: Request, exc: DataNotLoadedError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    app.include_router(meta_router)
    app.include_router(transactions_router)
    app.include_router(reports_router)
    app.include_router(auth_router)

    return app


app = create_app()
