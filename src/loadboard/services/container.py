"""Wiring of the services around one repository."""

from dataclasses import dataclass
from typing import Optional

from ..config import settings
from ..db import Repository
from ..identity import GoTrueIdentityProvider, IdentityProvider
from ..routing import RoutingClient
from .accounts import AccountService
from .fleet import FleetRegistry
from .loads import LoadLifecycleManager
from .profiles import ProfileDirectory
from .stats import StatisticsAggregator


@dataclass
class Services:
    """The core components sharing one store, plus accounts when auth is configured."""

    repository: Repository
    profiles: ProfileDirectory
    fleet: FleetRegistry
    loads: LoadLifecycleManager
    stats: StatisticsAggregator
    accounts: Optional[AccountService] = None


def build_services(
    repository: Repository,
    routing: Optional[RoutingClient] = None,
    identity: Optional[IdentityProvider] = None,
) -> Services:
    profiles = ProfileDirectory(repository)

    if identity is None and settings.validate_auth_keys():
        identity = GoTrueIdentityProvider()

    return Services(
        repository=repository,
        profiles=profiles,
        fleet=FleetRegistry(repository, profiles),
        loads=LoadLifecycleManager(repository, profiles, routing),
        stats=StatisticsAggregator(repository),
        accounts=AccountService(identity, profiles) if identity is not None else None,
    )
