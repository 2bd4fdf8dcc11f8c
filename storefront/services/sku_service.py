# storefront/services/sku_service.py
from sqlalchemy.orm import Session

from storefront.domain.errors import BadRequestError, NotFoundError
from storefront.repos.category_repo import CategoryRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils import ids
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CATEGORY_CODES = {
    "Electronics": "ELEC",
    "Clothing": "CLTH",
    "Books": "BOOK",
    "Home & Garden": "HOME",
    "Sports": "SPRT",
    "Beauty": "BEAU",
    "Automotive": "AUTO",
    "Toys": "TOYS",
    "Health": "HLTH",
    "Food": "FOOD",
}

CODE_LENGTH = 4
RANDOM_LENGTH = 6


def category_code_for(name: str) -> str:
    """
    Known categories use the static table, others are derived:
    one word -> first 4 letters, several words -> initials.
    Always 4 upper case chars, padded with X.
    """
    if name in CATEGORY_CODES:
        return CATEGORY_CODES[name]

    words = name.split()
    if len(words) == 1:
        code = words[0][:CODE_LENGTH]
    else:
        code = "".join(word[0] for word in words)

    return code.ljust(CODE_LENGTH, "X")[:CODE_LENGTH].upper()


def user_code_for(user_id: str) -> str:
    """Last 4 chars of the user's ULID."""
    _, _, ulid = user_id.partition("_")
    try:
        ids.decode_time(ulid)
    except ValueError:
        raise BadRequestError("Invalid user ID format: must be a valid ULID") from None
    return ulid[-CODE_LENGTH:].upper()


def random_suffix() -> str:
    return ids.new_ulid()[-RANDOM_LENGTH:]


class SkuService:
    """SKU = {CATEGORY}-{USER}-{RANDOM6}, e.g. ELEC-0FEG-VHD8TK"""

    def __init__(self, db: Session):
        self.categories = CategoryRepo(db)
        self.products = ProductRepo(db)

    def get_category_code(self, category_id: str) -> str:
        category = self.categories.get_category(category_id)
        if not category:
            raise NotFoundError(f"Category with id {category_id} not found")
        return category_code_for(category.name)

    def generate_product_sku(self, category_id: str, user_id: str) -> str:
        category_code = self.get_category_code(category_id)
        user_code = user_code_for(user_id)

        candidate = f"{category_code}-{user_code}-{random_suffix()}"

        if not self.products.sku_exists(candidate):
            return candidate

        # one replacement, not re-checked; the unique index on products.sku
        # rejects the insert if this one collides too
        replacement = f"{category_code}-{user_code}-{random_suffix()}"
        logger.warning(f"SKU collision on {candidate}, using {replacement}")
        return replacement
