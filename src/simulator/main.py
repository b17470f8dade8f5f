"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.routes import health, transport
from .config import settings
from .services.simulation.ticker import Ticker
from .services.simulation.transport import SimulatedTransport, create_simulation

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    simulation: SimulatedTransport | None = app.state.transport
    if simulation is None and settings.autostart:
        if not settings.loop_waypoints:
            logger.warning("SIM_LOOP_WAYPOINTS is not set; starting without a simulation")
        else:
            # Loop construction failures abort startup
            simulation = create_simulation(settings)
            app.state.transport = simulation

    ticker = None
    if simulation is not None and app.state.start_ticker:
        ticker = Ticker(simulation, settings.tick_interval_seconds)
        ticker.start()
    app.state.ticker = ticker
    try:
        yield
    finally:
        if ticker is not None:
            ticker.stop(timeout=settings.tick_interval_seconds + settings.request_timeout_seconds)
        if simulation is not None:
            simulation.stop()


def create_app(simulation: SimulatedTransport | None = None, start_ticker: bool = True) -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.transport = simulation
    app.state.start_ticker = start_ticker
    app.state.ticker = None

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(transport.router, prefix=settings.api_prefix)
    return app


app = create_app()
