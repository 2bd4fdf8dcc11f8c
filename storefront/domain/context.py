# storefront/domain/context.py
from pydantic import BaseModel, ConfigDict


class AuthContext(BaseModel):
    """Authenticated caller, built by the transport layer and passed to services."""

    user_id: str

    model_config = ConfigDict(frozen=True)
