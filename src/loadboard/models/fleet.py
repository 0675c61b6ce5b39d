"""Driver fleet models: vehicle capability, extra trucks, sub-drivers."""

from datetime import datetime
from typing import Optional
import uuid

from pydantic import BaseModel, Field, field_validator

from .enums import BodyType, TruckDimensions, TruckType


class VehicleSpec(BaseModel):
    """Vehicle declaration submitted by a driver during registration."""

    truck_type: TruckType
    body_type: Optional[BodyType] = None
    dimensions: Optional[TruckDimensions] = None
    plate_number: Optional[str] = None

    class Config:
        use_enum_values = True

    @field_validator("truck_type", "body_type", "dimensions", "plate_number", mode="before")
    @classmethod
    def strip_text(cls, v):
        # blank selections count as missing
        return (v.strip() or None) if isinstance(v, str) else v


class DriverDetails(BaseModel):
    """The single capability record owned by a driver profile."""

    owner_id: str
    truck_type: Optional[str] = None
    body_type: Optional[str] = None
    dimensions: Optional[str] = None
    plate_number: Optional[str] = None
    is_available: bool = True
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class DriverSummary(BaseModel):
    """Profile fields shown next to a driver in listings."""

    id: str
    full_name: str
    phone: str
    country_code: str


class AvailableDriver(BaseModel):
    """A driver profile joined with its (possibly missing) details."""

    driver: DriverSummary
    details: Optional[DriverDetails] = None

    @property
    def truck_type(self) -> Optional[str]:
        return self.details.truck_type if self.details else None

    @property
    def is_setup_complete(self) -> bool:
        return self.details is not None


class TruckDraft(BaseModel):
    """Input for registering an additional truck."""

    plate_number: str = Field(..., min_length=1)
    brand: Optional[str] = None
    model_year: Optional[int] = Field(default=None, ge=1950, le=2100)
    truck_type: Optional[TruckType] = None

    class Config:
        use_enum_values = True

    @field_validator("plate_number", "brand", "truck_type", mode="before")
    @classmethod
    def strip_text(cls, v):
        return (v.strip() or None) if isinstance(v, str) else v


class Truck(TruckDraft):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class SubDriverDraft(BaseModel):
    """Input for adding a driver employed by a carrier account."""

    driver_name: str = Field(..., min_length=1)
    driver_phone: str = Field(..., min_length=1)
    id_number: Optional[str] = None

    @field_validator("driver_name", "driver_phone", "id_number", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class SubDriver(SubDriverDraft):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    carrier_id: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
