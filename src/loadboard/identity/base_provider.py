"""Base identity provider interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..models.auth import AuthSession, AuthUser


class IdentityProvider(ABC):
    """
    Abstract base class for identity providers.

    The provider owns credentials, one-time codes and sessions. Loadboard
    only trusts the user id it returns as the Profile primary key.
    """

    @abstractmethod
    def sign_up(self, email: str, password: str, metadata: Optional[dict[str, Any]] = None) -> AuthUser:
        """
        Start a signup. The provider sends a one-time code to the email.

        Returns:
            The pending (unconfirmed) user
        """

    @abstractmethod
    def verify_code(self, email: str, code: str) -> AuthUser:
        """
        Confirm a signup with the emailed code.

        Raises:
            AuthError: If the code is invalid or expired
        """

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """
        Raises:
            AuthError: On invalid credentials
        """

    @abstractmethod
    def sign_in_with_code(self, phone: str) -> None:
        """Send a login code by SMS."""

    @abstractmethod
    def get_current_user(self) -> Optional[AuthUser]:
        """The signed-in user, or None."""

    @abstractmethod
    def sign_out(self) -> None:
        """End the current session."""

    @abstractmethod
    def request_password_reset(self, email: str) -> None:
        """Email a password recovery link."""
