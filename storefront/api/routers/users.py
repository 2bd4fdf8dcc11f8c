from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_auth_context, get_db
from storefront.domain.context import AuthContext
from storefront.domain.schemas import UserCreate, UserRead
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return UserService(db).create_user(payload)


@router.get("/me", response_model=UserRead)
def get_me(
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return UserService(db).get_user(auth.user_id)
