"""FastAPI application entry point."""

from dotenv import load_dotenv

from fastapi import FastAPI

# Load environment variables from .env file
load_dotenv()

from app import models  # noqa: F401
from app.api.errors import register_error_handlers
from app.api.routes import router
from app.core.config import settings
from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.services.cache import QueryCache

setup_logging(settings.log_level)

app = FastAPI(title=settings.project_name)
app.include_router(router, prefix=settings.api_prefix)
register_error_handlers(app)


@app.on_event("startup")
def on_startup() -> None:
    """Initialize database artifacts and the shared query cache."""
    init_db()
    app.state.query_cache = QueryCache.from_settings(settings)


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Basic sanity endpoint."""
    return {"message": "EuroLoo API is running"}


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Health check endpoint for Docker."""
    return {"status": "healthy"}
