"""Dashboard statistics."""

from pydantic import BaseModel


class AdminStats(BaseModel):
    total_users: int = 0
    total_drivers: int = 0
    total_shippers: int = 0
    active_loads: int = 0
    completed_trips: int = 0


class DriverStats(BaseModel):
    active_loads: int = 0
    completed_trips: int = 0
    earnings: float = 0.0
    commissions: float = 0.0
