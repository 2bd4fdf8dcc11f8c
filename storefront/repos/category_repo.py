from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_category(self, category_id: str) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_category_by_name(self, name: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.name == name)
        ).scalar_one_or_none()

    def list_categories(self) -> list[CategoryModel]:
        return list(
            self.db.execute(select(CategoryModel).order_by(CategoryModel.name.asc())).scalars()
        )

    def create_category(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category
