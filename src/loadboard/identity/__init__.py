"""Identity provider ports and adapters."""

from .base_provider import IdentityProvider
from .gotrue_provider import GoTrueIdentityProvider

__all__ = ["IdentityProvider", "GoTrueIdentityProvider"]
