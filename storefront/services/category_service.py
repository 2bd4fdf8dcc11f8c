from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.domain.errors import ConflictError
from storefront.domain.schemas import CategoryCreate, CategoryOut
from storefront.repos.category_repo import CategoryRepo
from storefront.utils import ids
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CategoryService:
    def __init__(self, db: Session):
        self.repo = CategoryRepo(db)

    def create_category(self, payload: CategoryCreate) -> CategoryOut:
        name = payload.name.strip()
        if self.repo.get_category_by_name(name):
            raise ConflictError("Category already exists")

        created = self.repo.create_category(CategoryModel(id=ids.new_category_id(), name=name))
        logger.info(f"Created category {created.id} ({created.name})")
        return CategoryOut.model_validate(created)

    def list_categories(self) -> list[CategoryOut]:
        return [CategoryOut.model_validate(c) for c in self.repo.list_categories()]
