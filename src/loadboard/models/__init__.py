"""Data models for the Loadboard service."""

from .enums import (
    UserRole,
    LoadStatus,
    TruckType,
    BodyType,
    TruckDimensions,
)
from .profile import Profile
from .fleet import (
    VehicleSpec,
    DriverDetails,
    DriverSummary,
    AvailableDriver,
    TruckDraft,
    Truck,
    SubDriverDraft,
    SubDriver,
)
from .load import (
    Coordinates,
    Receiver,
    Product,
    RouteInfo,
    LoadDraft,
    Load,
    OwnerSummary,
    LoadWithOwner,
)
from .stats import AdminStats, DriverStats
from .auth import AuthUser, AuthSession

__all__ = [
    # Enums
    "UserRole",
    "LoadStatus",
    "TruckType",
    "BodyType",
    "TruckDimensions",
    # Profile
    "Profile",
    # Fleet
    "VehicleSpec",
    "DriverDetails",
    "DriverSummary",
    "AvailableDriver",
    "TruckDraft",
    "Truck",
    "SubDriverDraft",
    "SubDriver",
    # Load
    "Coordinates",
    "Receiver",
    "Product",
    "RouteInfo",
    "LoadDraft",
    "Load",
    "OwnerSummary",
    "LoadWithOwner",
    # Stats
    "AdminStats",
    "DriverStats",
    # Auth
    "AuthUser",
    "AuthSession",
]
