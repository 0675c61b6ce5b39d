"""Load model: a shipment request and its lifecycle fields."""

from datetime import date, datetime
from typing import Optional
import uuid

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from .enums import ASSIGNED_STATUSES, BodyType, LoadStatus, TruckType


class Coordinates(BaseModel):
    """A latitude/longitude pair."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def __str__(self) -> str:
        return f"{self.lat:.5f},{self.lng:.5f}"


class Receiver(BaseModel):
    """Delivery recipient."""

    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class Product(BaseModel):
    """One line of the cargo manifest."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: Optional[str] = None  # e.g. foodstuff, building materials
    unit: Optional[str] = None
    quantity: float = Field(..., gt=0)


class RouteInfo(BaseModel):
    """Driving distance and duration between two points."""

    distance_km: float = Field(..., ge=0)
    duration_minutes: float = Field(..., ge=0)


class LoadDraft(BaseModel):
    """Everything a shipper submits when posting a load."""

    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    origin_coords: Optional[Coordinates] = None
    destination_coords: Optional[Coordinates] = None

    weight: float = Field(default=0, ge=0)
    price: float = Field(default=0, ge=0)

    truck_type_required: Optional[TruckType] = None
    body_type: Optional[BodyType] = None
    cargo_type: Optional[str] = None
    package_type: Optional[str] = None
    description: str = ""
    pickup_date: Optional[date] = None

    receiver: Optional[Receiver] = None
    products: list[Product] = Field(default_factory=list)

    class Config:
        use_enum_values = True

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def strip_place(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("truck_type_required", "body_type", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        return (v.strip() or None) if isinstance(v, str) else v

    @property
    def has_coordinates(self) -> bool:
        return self.origin_coords is not None and self.destination_coords is not None


class Load(LoadDraft):
    """
    A posted load.

    `driver_id` is set exactly while the load is in progress or completed.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    status: LoadStatus = LoadStatus.AVAILABLE
    driver_id: Optional[str] = None

    distance_km: Optional[float] = None
    duration_minutes: Optional[float] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def check_assignment(self) -> "Load":
        assigned = LoadStatus(self.status).value in ASSIGNED_STATUSES
        if assigned and self.driver_id is None:
            raise ValueError(f"Load in status '{self.status}' must have a driver")
        if not assigned and self.driver_id is not None:
            raise ValueError(f"Load in status '{self.status}' cannot have a driver")
        return self

    @computed_field
    @property
    def route(self) -> str:
        return f"{self.origin} -> {self.destination}"

    @property
    def is_assigned(self) -> bool:
        return self.driver_id is not None


class OwnerSummary(BaseModel):
    """Display fields of the shipper who posted a load."""

    full_name: str
    phone: str
    country_code: Optional[str] = None


class LoadWithOwner(Load):
    """A load enriched with its owner's display name and phone."""

    owner: Optional[OwnerSummary] = None
