# storefront/services/idempotency_service.py
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy.orm import Session

from storefront.data.models.idempotency_key import IdempotencyKeyModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import ConflictError
from storefront.repos.idempotency_repo import IdempotencyRepo
from storefront.services.lock_service import LockService
from storefront.utils import ids
from storefront.utils.ids import EntityPrefix
from storefront.utils.logging import get_logger
from storefront.utils.retry import lock_wait_retry
from storefront.utils.settings import (
    IDEMPOTENCY_LOCK_TTL_SECONDS,
    IDEMPOTENCY_LOCK_WAIT_ATTEMPTS,
    IDEMPOTENCY_LOCK_WAIT_SECONDS,
    IDEMPOTENCY_TTL_HOURS,
)

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    #sqlite gives back naive datetimes, everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class IdempotencyService:
    """
    Guards product creation with a client supplied key.

    First request with a key creates the product and stores (user, key) ->
    product for IDEMPOTENCY_TTL_HOURS. Keys are scoped to the user. A retry by the same user inside that window
    gets the stored product back and nothing is created.

    Concurrent retries of one key are serialized with a redis lock; the one
    that waits re-checks the record once it holds the lock.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService | None = None,
        ttl: timedelta = timedelta(hours=IDEMPOTENCY_TTL_HOURS),
        lock_ttl: int = IDEMPOTENCY_LOCK_TTL_SECONDS,
        lock_attempts: int = IDEMPOTENCY_LOCK_WAIT_ATTEMPTS,
        lock_wait_seconds: float = IDEMPOTENCY_LOCK_WAIT_SECONDS,
    ):
        self.repo = IdempotencyRepo(db)
        self.lock_service = lock_service
        self.ttl = ttl
        self.lock_ttl = lock_ttl
        self.lock_attempts = lock_attempts
        self.lock_wait_seconds = lock_wait_seconds

    def find_replay(self, key: str, user_id: str) -> ProductModel | None:
        record = self.repo.get_by_key(key, user_id)
        if not record:
            return None

        if _as_utc(record.expires_at) <= _utcnow():
            logger.info(f"Idempotency key {key} of user {user_id} expired, ignoring")
            return None

        return record.product

    def create_with_idempotency(
        self,
        key: str | None,
        user_id: str,
        create_fn: Callable[[], ProductModel],
    ) -> ProductModel:
        if not key:
            return create_fn()

        existing = self.find_replay(key, user_id)
        if existing is not None:
            logger.info(f"Idempotency key {key} replayed, returning product {existing.id}")
            return existing

        if self.lock_service is None:
            return self._create_and_store(key, user_id, create_fn)

        lock_name = LockService.idempotency_key_lock(user_id, key)
        owner = ids.generate(EntityPrefix.IDEMPOTENCY_KEY)

        if not self._wait_for_lock(lock_name, owner):
            # the holder may have finished and not released yet
            existing = self.find_replay(key, user_id)
            if existing is not None:
                logger.info(f"Idempotency key {key} replayed without lock, product {existing.id}")
                return existing
            raise ConflictError("Request with this idempotency key is already being processed")

        try:
            # the request that held the lock before us may have finished the job
            existing = self.find_replay(key, user_id)
            if existing is not None:
                logger.info(f"Idempotency key {key} replayed after wait, product {existing.id}")
                return existing

            return self._create_and_store(key, user_id, create_fn, record_id=owner)
        finally:
            self.lock_service.release(lock_name, owner)

    def store(self, key: str, user_id: str, product_id: str, record_id: str | None = None) -> None:
        record = self.repo.get_by_key(key, user_id)

        if record is None:
            record = IdempotencyKeyModel(
                id=record_id or ids.generate(EntityPrefix.IDEMPOTENCY_KEY),
                key=key,
                user_id=user_id,
            )

        # an expired record of the same key is reused
        record.product_id = product_id
        record.expires_at = _utcnow() + self.ttl
        self.repo.save(record)

    def cleanup_expired(self) -> int:
        removed = self.repo.delete_expired(_utcnow())
        logger.info(f"Removed {removed} expired idempotency keys")
        return removed

    def _create_and_store(
        self,
        key: str,
        user_id: str,
        create_fn: Callable[[], ProductModel],
        record_id: str | None = None,
    ) -> ProductModel:
        product = create_fn()
        self.store(key, user_id, product.id, record_id=record_id)
        logger.info(f"Idempotency key {key} stored for product {product.id}")
        return product

    def _wait_for_lock(self, name: str, owner: str) -> bool:
        @lock_wait_retry(self.lock_attempts, self.lock_wait_seconds)
        def attempt() -> bool:
            return self.lock_service.acquire(name, owner, self.lock_ttl)

        return attempt()
