"""Enumerations for the Loadboard service."""

from enum import Enum


class UserRole(str, Enum):
    """Role of a platform user. Fixed at registration."""

    DRIVER = "driver"
    SHIPPER = "shipper"
    ADMIN = "admin"


class LoadStatus(str, Enum):
    """Status of a load in its lifecycle."""

    AVAILABLE = "available"
    PENDING = "pending"  # reserved, no transition leads here
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"  # reserved, no transition leads here


# Statuses in which a load must carry a driver
ASSIGNED_STATUSES: frozenset[str] = frozenset({
    LoadStatus.IN_PROGRESS.value,
    LoadStatus.COMPLETED.value,
})

# Statuses counted as "active" on the admin dashboard
ACTIVE_STATUSES: frozenset[str] = frozenset({
    LoadStatus.AVAILABLE.value,
    LoadStatus.IN_PROGRESS.value,
})


class TruckType(str, Enum):
    """Truck classes offered in driver registration."""

    TRELLA = "trella"
    LORRY = "lorry"
    DYNA = "dyna"
    SIGS = "sigs"
    VAN = "van"
    PICKUP = "pickup"
    HEAVY = "heavy"  # heavy equipment carrier
    CARS = "cars"  # car carrier
    REFRIGERATED = "refrigerated"
    TANKER = "tanker"
    FLATBED = "flatbed"
    CONTAINER = "container"
    UNKNOWN = "unknown"


class BodyType(str, Enum):
    """Trailer / body types."""

    FLATBED = "flatbed"
    CURTAIN = "curtain"
    BOX = "box"
    REFRIGERATED = "refrigerated"
    LOWBOY = "lowboy"
    TANK = "tank"


class TruckDimensions(str, Enum):
    """Coarse size class of a truck."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extra_large"
