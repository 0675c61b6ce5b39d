"""Driver Fleet Registry: vehicle capability, extra trucks and sub-drivers."""

import logging
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..db import Repository
from ..exceptions import Forbidden, NotFound, validation_error_from
from ..models import (
    AvailableDriver,
    DriverDetails,
    DriverSummary,
    Profile,
    SubDriver,
    SubDriverDraft,
    Truck,
    TruckDraft,
    VehicleSpec,
)
from .profiles import ProfileDirectory

logger = logging.getLogger(__name__)


def _parse(model, data, message: str):
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise validation_error_from(e, message) from e


class FleetRegistry:
    """Driver-owned vehicle records."""

    def __init__(self, repository: Repository, profiles: Optional[ProfileDirectory] = None):
        self.repository = repository
        self.profiles = profiles or ProfileDirectory(repository)

    def _require_driver(self, owner_id: str) -> Profile:
        profile = self.profiles.get_profile(owner_id)
        if not profile.is_driver:
            raise Forbidden(f"Profile '{owner_id}' is not a driver")
        return profile

    # =========================================================================
    # Driver details
    # =========================================================================

    def upsert_driver_details(self, owner_id: str, spec: Union[VehicleSpec, dict]) -> DriverDetails:
        """
        Register or replace a driver's vehicle. Always marks the driver available.

        Raises:
            ValidationError: Missing truck type
            NotFound: No profile for owner_id
            Forbidden: The profile is not a driver
        """
        spec = _parse(VehicleSpec, spec, "Invalid vehicle details")
        self._require_driver(owner_id)

        details = DriverDetails(
            owner_id=owner_id,
            truck_type=spec.truck_type,
            body_type=spec.body_type,
            dimensions=spec.dimensions,
            plate_number=spec.plate_number,
            is_available=True,
        )
        self.repository.upsert_driver_details(details)
        logger.info("Saved vehicle details for driver %s (%s)", owner_id, spec.truck_type)
        return details

    def get_driver_details(self, owner_id: str) -> DriverDetails:
        details = self.repository.get_driver_details(owner_id)
        if details is None:
            raise NotFound("Driver details", owner_id)
        return details

    def find_driver_details(self, owner_id: str) -> Optional[DriverDetails]:
        """Details, or None while the driver has not finished vehicle setup."""
        return self.repository.get_driver_details(owner_id)

    def list_available_drivers(self) -> list[AvailableDriver]:
        """Every driver profile with its details, if any."""
        return [
            AvailableDriver(
                driver=DriverSummary(
                    id=profile.id,
                    full_name=profile.full_name,
                    phone=profile.phone,
                    country_code=profile.country_code,
                ),
                details=details,
            )
            for profile, details in self.repository.list_drivers_with_details()
        ]

    # =========================================================================
    # Extra trucks and sub-drivers of a carrier account
    # =========================================================================

    def add_truck(self, owner_id: str, draft: Union[TruckDraft, dict]) -> Truck:
        draft = _parse(TruckDraft, draft, "Invalid truck")
        self._require_driver(owner_id)

        truck = Truck(owner_id=owner_id, **draft.model_dump())
        self.repository.insert_truck(truck)
        logger.info("Driver %s added truck %s", owner_id, truck.plate_number)
        return truck

    def list_trucks(self, owner_id: str) -> list[Truck]:
        return self.repository.list_trucks(owner_id)

    def add_sub_driver(self, carrier_id: str, draft: Union[SubDriverDraft, dict]) -> SubDriver:
        draft = _parse(SubDriverDraft, draft, "Invalid sub-driver")
        self._require_driver(carrier_id)

        sub_driver = SubDriver(carrier_id=carrier_id, **draft.model_dump())
        self.repository.insert_sub_driver(sub_driver)
        logger.info("Carrier %s added sub-driver %s", carrier_id, sub_driver.id)
        return sub_driver

    def list_sub_drivers(self, carrier_id: str) -> list[SubDriver]:
        return self.repository.list_sub_drivers(carrier_id)
