from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import ConflictError, NotFoundError
from storefront.domain.schemas import UserCreate, UserRead
from storefront.repos.user_repo import UserRepo
from storefront.utils import ids
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        email = payload.email.lower()
        if self.repo.get_user_by_email(email):
            raise ConflictError("Email already taken")

        user = UserModel(id=ids.new_user_id(), name=payload.name, email=email)
        created = self.repo.create_user(user)
        logger.info(f"Registered user {created.id}")
        return UserRead.model_validate(created)

    def get_user(self, user_id: str) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)
