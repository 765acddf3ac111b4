"""
FastAPI Main Application
Mutual fund portfolio tracker: funds, NAV refresh, history, projection, reports
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from app.config import settings
from app.infrastructure.db.database import init_db, close_db
from app.infrastructure.market_data.provider_factory import get_nav_data_provider
from app.utils.logging_redaction import install_redaction_filter

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
install_redaction_filter()

# Reduce noisy loggers in production
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Opens the database and NAV client on startup, closes them on shutdown
    """
    logger.info("Starting portfolio tracker")

    await init_db()
    logger.info("Database initialized")

    app.state.nav_provider = get_nav_data_provider()
    app.state.refreshing_users = set()
    logger.info(f"NAV provider: {settings.NAV_API_BASE_URL}")

    yield

    logger.info("Shutting down portfolio tracker")
    provider = getattr(app.state, "nav_provider", None)
    if provider is not None and hasattr(provider, "aclose"):
        await provider.aclose()
    await close_db()
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Mutual Fund Portfolio Tracker",
    description="Track mutual fund holdings, refresh NAVs and project growth",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Mutual Fund Portfolio Tracker",
        "version": "1.0.0",
        "docs": "/docs"
    }


# Import and include routers
from app.api.routes import funds, health, nav, projection, report  # noqa: E402

app.include_router(health.router, tags=["Health"])
app.include_router(funds.router, prefix="/api/v1/funds", tags=["Funds"])
app.include_router(nav.router, prefix="/api/v1", tags=["NAV"])
app.include_router(projection.router, prefix="/api/v1/projection", tags=["Projection"])
app.include_router(report.router, prefix="/api/v1/report", tags=["Reports"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
