from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.idempotency_key import IdempotencyKeyModel


class IdempotencyRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_key(self, key: str, user_id: str) -> IdempotencyKeyModel | None:
        return self.db.execute(
            select(IdempotencyKeyModel)
            .where(IdempotencyKeyModel.key == key, IdempotencyKeyModel.user_id == user_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def save(self, record: IdempotencyKeyModel) -> IdempotencyKeyModel:
        self.db.add(record)
        self.db.commit()
        return record

    def delete_expired(self, now: datetime) -> int:
        result = self.db.execute(
            delete(IdempotencyKeyModel).where(IdempotencyKeyModel.expires_at < now)
        )
        self.db.commit()
        return result.rowcount
