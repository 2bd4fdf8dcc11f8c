# storefront/main.py
from fastapi import FastAPI
from sqlalchemy.orm import sessionmaker
import uvicorn

from storefront.api import include_routers
from storefront.data.database import build_engine, build_session_factory, init_db
from storefront.services.lock_service import LockService
from storefront.utils.logging import get_logger
from storefront.utils.settings import DATABASE_URL, REDIS_URL

logger = get_logger(__name__)


def create_app(
    session_factory: sessionmaker | None = None,
    lock_service: LockService | None = None,
) -> FastAPI:
    """
    Handles (db sessions, redis lock) are passed in; when missing they are
    built from settings here, at startup, not at import time.
    """
    if session_factory is None:
        engine = build_engine(DATABASE_URL)
        init_db(engine)
        logger.info("Database tables ready")
        session_factory = build_session_factory(engine)

    if lock_service is None:
        lock_service = LockService(REDIS_URL)

    app = FastAPI(
        title="Storefront",
        version="1.0.0",
    )
    app.state.session_factory = session_factory
    app.state.lock_service = lock_service

    return include_routers(app)


if __name__ == "__main__":
    uvicorn.run("storefront.main:create_app", factory=True, host="0.0.0.0", port=8000)
