"""Select the call record store at startup."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Settings
from app.db.database import create_engine, create_session_factory, init_db
from app.services.persistence.base import CallRecordStore
from app.services.persistence.memory import InMemoryCallRecordStore
from app.services.persistence.sql import SqlCallRecordStore

logger = logging.getLogger(__name__)


async def build_call_store(settings: Settings) -> CallRecordStore:
    """
    Build the configured call record store.

    Falls back to the in-memory store when the database cannot be
    initialised, so calls keep flowing without persistence.
    """
    if settings.call_store_backend == "memory":
        logger.info("[CALL STORE] Using in-memory call record store")
        return InMemoryCallRecordStore()

    engine = create_engine(settings.database_url)
    try:
        await init_db(engine)
    except (SQLAlchemyError, OSError) as e:
        logger.warning(
            f"[CALL STORE] Database unavailable, running without persistence - "
            f"Error: {type(e).__name__}: {str(e)}"
        )
        await engine.dispose()
        return InMemoryCallRecordStore()

    logger.info("[CALL STORE] Using SQL call record store")
    return SqlCallRecordStore(create_session_factory(engine), engine=engine)
