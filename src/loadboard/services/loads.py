"""
Load Lifecycle Manager.

Posts loads and moves them through their status lifecycle:

    available --accept--> in_progress --complete--> completed
        ^                      |
        +-------cancel---------+

`cancelled` and `pending` are part of the status domain but no
operation here produces them. Assignment writes are single conditional
UPDATEs, so two drivers racing for one load cannot both win.
"""

import logging
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..db import Repository
from ..exceptions import Conflict, Forbidden, NotFound, validation_error_from
from ..models import Load, LoadDraft, LoadStatus, LoadWithOwner, Profile
from ..routing import RoutingClient
from .profiles import ProfileDirectory

logger = logging.getLogger(__name__)


class LoadLifecycleManager:
    """Creates, lists, assigns and transitions loads."""

    def __init__(
        self,
        repository: Repository,
        profiles: Optional[ProfileDirectory] = None,
        routing: Optional[RoutingClient] = None,
    ):
        self.repository = repository
        self.profiles = profiles or ProfileDirectory(repository)
        self.routing = routing

    def _require_role(self, profile_id: str, role: str) -> Profile:
        profile = self.profiles.get_profile(profile_id)
        if profile.role != role:
            raise Forbidden(f"Profile '{profile_id}' is not a {role}")
        return profile

    def _missing_or_conflict(self, load_id: str, message: str) -> Exception:
        if not self.repository.load_exists(load_id):
            return NotFound("Load", load_id)
        return Conflict(message)

    # =========================================================================
    # Posting
    # =========================================================================

    def post_load(self, shipper_id: str, draft: Union[LoadDraft, dict]) -> Load:
        """
        Post a new load on behalf of a shipper.

        Args:
            shipper_id: Profile id of the posting shipper
            draft: Load fields (LoadDraft or a plain dict)

        Returns:
            The stored load, status available and unassigned

        Raises:
            ValidationError: Missing origin/destination or negative weight/price
            NotFound: The shipper has no profile
            Forbidden: The profile is not a shipper
            PersistenceError: The store rejected the write
        """
        if not isinstance(draft, LoadDraft):
            try:
                draft = LoadDraft.model_validate(draft)
            except PydanticValidationError as e:
                raise validation_error_from(e, "Invalid load") from e

        self._require_role(shipper_id, "shipper")

        route = None
        if self.routing is not None and draft.has_coordinates:
            route = self.routing.route(draft.origin_coords, draft.destination_coords)

        load = Load(
            owner_id=shipper_id,
            status=LoadStatus.AVAILABLE,
            driver_id=None,
            distance_km=route.distance_km if route else None,
            duration_minutes=route.duration_minutes if route else None,
            **draft.model_dump(),
        )
        self.repository.insert_load(load)

        logger.info("Shipper %s posted load %s (%s)", shipper_id, load.id, load.route)
        return load

    # =========================================================================
    # Transitions
    # =========================================================================

    def accept_load(self, load_id: str, driver_id: str) -> LoadWithOwner:
        """
        Assign an available load to a driver.

        Raises:
            NotFound: Unknown load or driver profile
            Forbidden: The profile is not a driver
            Conflict: The load is no longer available
        """
        self._require_role(driver_id, "driver")

        updated = self.repository.transition_load(
            load_id,
            new_status=LoadStatus.IN_PROGRESS.value,
            new_driver_id=driver_id,
            expected_status=LoadStatus.AVAILABLE.value,
        )
        if updated == 0:
            error = self._missing_or_conflict(load_id, f"Load '{load_id}' is no longer available")
            if isinstance(error, Conflict):
                logger.warning("Driver %s lost the race for load %s", driver_id, load_id)
            raise error

        logger.info("Driver %s accepted load %s", driver_id, load_id)
        return self.get_load_by_id(load_id)

    def cancel_load(self, load_id: str, actor_id: str) -> LoadWithOwner:
        """
        Release a load back to the marketplace, clearing its driver.

        Idempotent: releasing an available load changes nothing. The actor
        must be the load's owner, its current driver or an admin. Only the
        owner or an admin can reopen a completed load.

        Raises:
            NotFound: Unknown load, or an unknown actor
            Forbidden: The actor may not release this load
            Conflict: The driver's load is completed or was reassigned
        """
        load = self.get_load_by_id(load_id)
        if load.status == LoadStatus.AVAILABLE and load.driver_id is None:
            return load

        expected_status = None
        expected_driver = None
        is_owner = actor_id == load.owner_id
        if not is_owner and actor_id == load.driver_id:
            # a driver may only release a load still in progress with them
            if load.status == LoadStatus.COMPLETED:
                raise Conflict(f"Load '{load_id}' is already completed")
            expected_status = LoadStatus.IN_PROGRESS.value
            expected_driver = actor_id
        elif not is_owner and not self.profiles.get_profile(actor_id).is_admin:
            raise Forbidden(f"'{actor_id}' may not cancel load '{load_id}'")

        updated = self.repository.transition_load(
            load_id,
            new_status=LoadStatus.AVAILABLE.value,
            new_driver_id=None,
            expected_status=expected_status,
            expected_driver_id=expected_driver,
        )
        if updated == 0:
            current = self.get_load_by_id(load_id)
            if current.status == LoadStatus.AVAILABLE and current.driver_id is None:
                return current
            raise Conflict(f"Load '{load_id}' changed while being released")

        logger.info("Load %s released by %s (was %s)", load_id, actor_id, load.status)
        return self.get_load_by_id(load_id)

    def complete_load(self, load_id: str, driver_id: str) -> LoadWithOwner:
        """
        Mark an in-progress load delivered by its assigned driver.

        Raises:
            NotFound: Unknown load
            Conflict: The load is not in progress with this driver
        """
        updated = self.repository.transition_load(
            load_id,
            new_status=LoadStatus.COMPLETED.value,
            new_driver_id=driver_id,
            expected_status=LoadStatus.IN_PROGRESS.value,
            expected_driver_id=driver_id,
        )
        if updated == 0:
            raise self._missing_or_conflict(
                load_id, f"Load '{load_id}' is not in progress with driver '{driver_id}'"
            )

        logger.info("Driver %s completed load %s", driver_id, load_id)
        return self.get_load_by_id(load_id)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_loads(self, limit: Optional[int] = None) -> list[LoadWithOwner]:
        """Open marketplace: available loads, newest first."""
        return self.repository.list_loads(status=LoadStatus.AVAILABLE.value, limit=limit)

    def get_load_by_id(self, load_id: str) -> LoadWithOwner:
        load = self.repository.get_load(load_id)
        if load is None:
            raise NotFound("Load", load_id)
        return load

    def get_driver_history(self, driver_id: str) -> list[LoadWithOwner]:
        """Loads currently or previously held by a driver, newest first."""
        return self.repository.list_loads(driver_id=driver_id)

    def get_shipper_loads(self, shipper_id: str) -> list[LoadWithOwner]:
        """A shipper's own posts in any status, newest first."""
        return self.repository.list_loads(owner_id=shipper_id)
