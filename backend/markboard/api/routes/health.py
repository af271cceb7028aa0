import logging

from fastapi import APIRouter, Request
from sqlalchemy import text

from markboard.db import engine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", summary="Health check", tags=["health"])
def read_health(request: Request) -> dict:
    """Return basic service health information."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = "error"

    state = request.app.state
    return {
        "status": "ok",
        "database": database,
        "push_enabled": state.dispatcher.enabled,
        "sweeper_running": state.sweeper.is_running,
        "connections": state.broadcaster.connection_count,
    }
