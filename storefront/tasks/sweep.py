# storefront/tasks/sweep.py
from functools import lru_cache

from sqlalchemy.orm import sessionmaker

from storefront.celery_worker import celery_app
from storefront.data.database import build_engine, build_session_factory
from storefront.services.idempotency_service import IdempotencyService
from storefront.utils.logging import get_logger
from storefront.utils.settings import DATABASE_URL

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    #one engine per worker process
    return build_session_factory(build_engine(DATABASE_URL))


@celery_app.task(name="storefront.tasks.sweep.sweep_idempotency_keys_task")
def sweep_idempotency_keys_task() -> int:
    logger.info("Idempotency key sweep started")

    db = get_session_factory()()
    try:
        return IdempotencyService(db).cleanup_expired()
    finally:
        db.close()
