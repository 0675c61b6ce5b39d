"""Identity provider payloads."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    """User as known to the identity provider."""

    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    confirmed: bool = False


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: AuthUser
