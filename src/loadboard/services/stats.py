"""Statistics Aggregator: read-only dashboard counts."""

from typing import Optional

from ..config import settings
from ..db import Repository
from ..models import AdminStats, DriverStats, LoadStatus, UserRole
from ..models.enums import ACTIVE_STATUSES


class StatisticsAggregator:
    """Derives dashboard counts from profiles and loads."""

    def __init__(
        self,
        repository: Repository,
        derive_shippers: Optional[bool] = None,
        commission_rate: Optional[float] = None,
    ):
        self.repository = repository
        self.derive_shippers = (
            settings.STATS_DERIVE_SHIPPERS if derive_shippers is None else derive_shippers
        )
        self.commission_rate = (
            settings.COMMISSION_RATE if commission_rate is None else commission_rate
        )

    def get_admin_stats(self) -> AdminStats:
        """
        Platform-wide counts for the admin dashboard.

        `total_shippers` is a role count unless derive_shippers is set, in
        which case it is total_users - total_drivers (admins included).
        """
        total_users = self.repository.count_profiles()
        total_drivers = self.repository.count_profiles(role=UserRole.DRIVER)

        if self.derive_shippers:
            total_shippers = total_users - total_drivers
        else:
            total_shippers = self.repository.count_profiles(role=UserRole.SHIPPER)

        return AdminStats(
            total_users=total_users,
            total_drivers=total_drivers,
            total_shippers=total_shippers,
            active_loads=self.repository.count_loads(statuses=set(ACTIVE_STATUSES)),
            completed_trips=self.repository.count_loads(statuses={LoadStatus.COMPLETED.value}),
        )

    def get_driver_stats(self, driver_id: str) -> DriverStats:
        """Counts and earnings of a single driver."""
        earnings = self.repository.sum_load_price(LoadStatus.COMPLETED.value, driver_id=driver_id)
        return DriverStats(
            active_loads=self.repository.count_loads(
                statuses={LoadStatus.IN_PROGRESS.value}, driver_id=driver_id
            ),
            completed_trips=self.repository.count_loads(
                statuses={LoadStatus.COMPLETED.value}, driver_id=driver_id
            ),
            earnings=round(earnings, 2),
            commissions=round(earnings * self.commission_rate, 2),
        )
