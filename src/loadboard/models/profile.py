"""Profile model: identity and role of a platform user."""

from datetime import datetime
from typing import Optional
import re

from pydantic import BaseModel, Field, field_validator

from .enums import UserRole


class Profile(BaseModel):
    """Identity record. `id` is the identity provider's user id."""

    id: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    country_code: str = "+966"
    role: UserRole
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True

    @field_validator("full_name", "phone", mode="before")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return str(v).strip() if v is not None else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        digits = re.sub(r"\D", "", v)
        if not digits:
            raise ValueError(f"Invalid phone number: {v}")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        v = str(v).strip()
        if not re.match(r"^[\w\.\-\+]+@[\w\.\-]+\.\w+$", v):
            raise ValueError(f"Invalid email: {v}")
        return v.lower()

    @property
    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER

    @property
    def is_shipper(self) -> bool:
        return self.role == UserRole.SHIPPER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def international_phone(self) -> str:
        """Phone prefixed with the country code, leading zero dropped."""
        local = re.sub(r"\D", "", self.phone).lstrip("0")
        return f"{self.country_code}{local}"
