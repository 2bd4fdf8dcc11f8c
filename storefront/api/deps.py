# storefront/api/deps.py
import re
from typing import Iterator

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from storefront.domain.context import AuthContext
from storefront.domain.errors import BadRequestError, UnauthorizedError
from storefront.repos.user_repo import UserRepo
from storefront.services.lock_service import LockService
from storefront.utils import ids
from storefront.utils.ids import EntityPrefix

IDEMPOTENCY_KEY_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
IDEMPOTENCY_KEY_MAX_LENGTH = 255


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_lock_service(request: Request) -> LockService | None:
    return request.app.state.lock_service


def get_auth_context(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> AuthContext:
    """
    Identity comes from the auth layer in front of this service as X-User-Id.
    Only shape and existence are checked here.
    """
    if not x_user_id or not ids.validate_prefix(x_user_id, EntityPrefix.USER):
        raise UnauthorizedError("Please authenticate")

    if not UserRepo(db).get_user(x_user_id):
        raise UnauthorizedError("Please authenticate")

    return AuthContext(user_id=x_user_id)


def get_idempotency_key(
    x_idempotency_key: str | None = Header(None, alias="X-Idempotency-Key"),
) -> str:
    if not x_idempotency_key:
        raise BadRequestError("X-Idempotency-Key header is required")

    if len(x_idempotency_key) > IDEMPOTENCY_KEY_MAX_LENGTH:
        raise BadRequestError("Idempotency key cannot exceed 255 characters")

    if not IDEMPOTENCY_KEY_RE.match(x_idempotency_key):
        raise BadRequestError(
            "Idempotency key can only contain alphanumeric characters, hyphens, and underscores"
        )

    return x_idempotency_key


def require_product_id(product_id: str) -> str:
    if not ids.validate_prefix(product_id, EntityPrefix.PRODUCT):
        raise BadRequestError("productId must be a valid prd_ identifier")
    return product_id
