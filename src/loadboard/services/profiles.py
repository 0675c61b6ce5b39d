"""Profile Directory: identity records of drivers, shippers and admins."""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..db import Repository
from ..exceptions import NotFound, validation_error_from
from ..models import Profile, UserRole

logger = logging.getLogger(__name__)


class ProfileDirectory:
    """Create and read user profiles. No update or delete."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def create_profile(
        self,
        profile_id: str,
        full_name: str,
        role: UserRole,
        phone: str,
        country_code: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Profile:
        """
        Create the one profile of an identity.

        Raises:
            ValidationError: Missing name/phone or unknown role
            DuplicateKey: The id already has a profile
        """
        try:
            profile = Profile(
                id=profile_id,
                full_name=full_name,
                role=role,
                phone=phone,
                country_code=country_code or settings.DEFAULT_COUNTRY_CODE,
                email=email,
            )
        except PydanticValidationError as e:
            raise validation_error_from(e, "Invalid profile") from e

        self.repository.insert_profile(profile)
        logger.info("Created %s profile %s", profile.role, profile.id)
        return profile

    def get_profile(self, profile_id: str) -> Profile:
        profile = self.repository.get_profile(profile_id)
        if profile is None:
            raise NotFound("Profile", profile_id)
        return profile

    def find_profile(self, profile_id: str) -> Optional[Profile]:
        return self.repository.get_profile(profile_id)

    def list_profiles(self, role: Optional[UserRole] = None) -> list[Profile]:
        return self.repository.list_profiles(role=role)
