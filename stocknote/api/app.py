"""
STOCKNOTE - FastAPI Application
Quote snapshots, company profiles, portfolio refresh and annotated chart endpoints.
"""
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import Callable, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from stocknote.chart.service import ChartService
from stocknote.config.settings import AppSettings, load_settings
from stocknote.data.adapters.base import BaseQuoteSource
from stocknote.data.adapters.fmp_adapter import FMPQuoteSource
from stocknote.data.cache.price_cache import DEFAULT_USER, PriceCache
from stocknote.data.cache.store import InMemorySnapshotStore, SnapshotStore
from stocknote.data.models import Note
from stocknote.db.schema import init_db
from stocknote.db.snapshot_store import SqlSnapshotStore
from stocknote.utils.helpers import normalize_symbol, today_in, utc_timestamp
from stocknote.utils.logger import get_logger, setup_logging

logger = get_logger("api")


class PortfolioQuotesRequest(BaseModel):
    user_id: str = DEFAULT_USER
    symbols: List[str]


class ChartRequest(BaseModel):
    time_range: Optional[str] = None
    notes: List[Note] = Field(default_factory=list)


async def _build_store(settings: AppSettings) -> SnapshotStore:
    if settings.database.use_database:
        session_factory = await init_db(settings.database.db_url, echo=settings.database.echo_sql)
        return SqlSnapshotStore(session_factory)
    return InMemorySnapshotStore(maxsize=settings.cache.max_snapshots)


def create_app(
    settings: Optional[AppSettings] = None,
    quote_source: Optional[BaseQuoteSource] = None,
    snapshot_store: Optional[SnapshotStore] = None,
    clock: Optional[Callable[[], date]] = None,
) -> FastAPI:
    """Build the app. Collaborators not supplied are constructed at startup."""
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)
        app.state.started_at = utc_timestamp()

        source = quote_source or FMPQuoteSource(settings.data)
        await source.connect()
        store = snapshot_store or await _build_store(settings)
        today = clock or (lambda: today_in(settings.cache.timezone))

        app.state.quote_source = source
        app.state.price_cache = PriceCache(source, store, clock=today)
        app.state.chart_service = ChartService(source, settings.data, settings.chart, clock=today)

        logger.info("stocknote_ready", version=settings.version, instance=app.state.instance_id)
        yield

        logger.info("stocknote_shutting_down")
        await source.disconnect()

    app = FastAPI(
        title=settings.app_name,
        description="Daily quote cache and annotated price charts",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.instance_id = str(uuid.uuid4())[:8]
    app.state.started_at = None

    # ─── Health & Metrics ───────────────────────────────────────────

    @app.get("/healthz", tags=["System"])
    async def health_check(request: Request):
        """Fast health check endpoint for load balancers and monitoring."""
        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy",
                "instance": request.app.state.instance_id,
                "uptime_since": request.app.state.started_at,
                "timestamp": utc_timestamp(),
            },
        )

    @app.get("/metrics", tags=["System"])
    async def metrics(request: Request):
        state = request.app.state
        cache = getattr(state, "price_cache", None)
        chart = getattr(state, "chart_service", None)
        return {
            "app": {
                "name": settings.app_name,
                "version": settings.version,
                "instance_id": state.instance_id,
                "started_at": state.started_at,
            },
            "components": {
                "price_cache": cache.stats if cache else None,
                "stored_snapshots": await cache.store.count() if cache else 0,
                "chart_service": chart.stats if chart else None,
            },
            "timestamp": utc_timestamp(),
        }

    # ─── Quotes ─────────────────────────────────────────────────────

    @app.get("/api/v1/quote/{symbol}", tags=["Quotes"])
    async def get_quote(request: Request, symbol: str, user_id: str = Query(DEFAULT_USER)):
        """Snapshot for a symbol, refreshed at most once per calendar day."""
        cache: PriceCache = request.app.state.price_cache
        try:
            snapshot = await cache.get_fresh_snapshot(symbol, user_id=user_id)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        if snapshot is None:
            raise HTTPException(status_code=404, detail=f"No price data for {symbol}")
        return snapshot.model_dump(mode="json")

    @app.post("/api/v1/portfolio/quotes", tags=["Quotes"])
    async def portfolio_quotes(request: Request, body: PortfolioQuotesRequest):
        """Refresh every symbol of a portfolio concurrently."""
        cache: PriceCache = request.app.state.price_cache
        try:
            results = await cache.refresh_portfolio(body.user_id, body.symbols)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return {
            "user_id": body.user_id,
            "snapshots": {
                symbol: snapshot.model_dump(mode="json") if snapshot else None
                for symbol, snapshot in results.items()
            },
            "timestamp": utc_timestamp(),
        }

    @app.get("/api/v1/profile/{symbol}", tags=["Quotes"])
    async def profile(request: Request, symbol: str):
        """Company display name from the quote provider."""
        source: BaseQuoteSource = request.app.state.quote_source
        try:
            symbol = normalize_symbol(symbol)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        name = await source.fetch_company_name(symbol)
        if not name:
            raise HTTPException(status_code=404, detail=f"No profile for {symbol}")
        return {"symbol": symbol, "name": name}

    # ─── Charts ─────────────────────────────────────────────────────

    @app.post("/api/v1/chart/{symbol}", tags=["Charts"])
    async def chart(request: Request, symbol: str, body: ChartRequest):
        """Price series for the window with the given notes attached to their trading days."""
        service: ChartService = request.app.state.chart_service
        try:
            projection = await service.get_chart(symbol, body.notes, body.time_range)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return projection.to_dict()

    return app


app = create_app()
