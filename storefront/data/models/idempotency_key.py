from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class IdempotencyKeyModel(Base):
    __tablename__ = "idempotency_keys"

    id = Column(String(30), primary_key=True)
    key = Column(String(255), nullable=False)
    user_id = Column(String(30), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(30), ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    product = relationship("ProductModel")

    # a key is unique per user, two users may pick the same one
    __table_args__ = (UniqueConstraint("user_id", "key", name="u_idempotency_user_key"),)
