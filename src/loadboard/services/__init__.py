"""Loadboard services."""

from .profiles import ProfileDirectory
from .fleet import FleetRegistry
from .loads import LoadLifecycleManager
from .stats import StatisticsAggregator
from .accounts import AccountService
from .container import Services, build_services

__all__ = [
    "ProfileDirectory",
    "FleetRegistry",
    "LoadLifecycleManager",
    "StatisticsAggregator",
    "AccountService",
    "Services",
    "build_services",
]
