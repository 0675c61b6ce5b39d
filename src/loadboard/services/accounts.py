"""Account Service: signup, login and the current user's profile."""

import logging
from typing import Any, Optional

from ..exceptions import AuthError
from ..identity import IdentityProvider
from ..models import AuthSession, AuthUser, Profile, UserRole
from .profiles import ProfileDirectory

logger = logging.getLogger(__name__)


class AccountService:
    """
    Registration and login on top of an external identity provider.

    The provider's verified user id becomes the Profile primary key.
    """

    def __init__(self, provider: IdentityProvider, profiles: ProfileDirectory):
        self.provider = provider
        self.profiles = profiles

    def request_signup(
        self, email: str, password: str, metadata: Optional[dict[str, Any]] = None
    ) -> AuthUser:
        """Start signup; the provider emails a one-time code."""
        return self.provider.sign_up(email, password, metadata or {})

    def complete_signup(
        self,
        email: str,
        code: str,
        full_name: str,
        role: UserRole,
        phone: str,
    ) -> tuple[AuthUser, Profile]:
        """
        Verify the emailed code, then create the user's profile.

        Raises:
            AuthError: Invalid or expired code
            ValidationError: Bad profile fields
            DuplicateKey: The user already has a profile
        """
        user = self.provider.verify_code(email, code)
        profile = self.profiles.create_profile(
            profile_id=user.id,
            full_name=full_name,
            role=role,
            phone=phone,
            email=email,
        )
        logger.info("Registered %s %s", profile.role, user.id)
        return user, profile

    def login(self, email: str, password: str) -> tuple[AuthSession, Profile]:
        """
        Raises:
            AuthError: Invalid credentials
            NotFound: The user never completed registration
        """
        session = self.provider.sign_in_with_password(email, password)
        return session, self.profiles.get_profile(session.user.id)

    def login_admin(self, email: str, password: str) -> AuthSession:
        """Password login restricted to admin profiles."""
        session = self.provider.sign_in_with_password(email, password)
        profile = self.profiles.find_profile(session.user.id)

        if profile is None or not profile.is_admin:
            self.provider.sign_out()
            logger.warning("Rejected admin login for %s", session.user.id)
            raise AuthError("Admin access is not permitted for this account")
        return session

    def request_phone_code(self, phone: str) -> None:
        self.provider.sign_in_with_code(phone)

    def forgot_password(self, email: str) -> None:
        """Send a password recovery email. Raises AuthError if the provider refuses."""
        self.provider.request_password_reset(email)
        logger.info("Password recovery requested")

    def current_profile(self) -> Optional[Profile]:
        """Profile of the signed-in user; None if signed out or not registered yet."""
        user = self.provider.get_current_user()
        if user is None:
            return None
        return self.profiles.find_profile(user.id)
