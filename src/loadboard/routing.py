"""
Routing client for driving distance and duration.

Talks to an OSRM-compatible HTTP service. Any failure is logged and
reported as "no route" so that posting a load never depends on it.
"""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .config import settings
from .models import Coordinates, RouteInfo

logger = logging.getLogger(__name__)


class OsrmRoute(BaseModel):
    """One route of an OSRM answer, meters and seconds."""

    distance: float = Field(..., ge=0)
    duration: float = Field(..., ge=0)


class OsrmResponse(BaseModel):
    code: str
    routes: list[OsrmRoute] = Field(default_factory=list)


class RoutingClient:
    """Distance/duration lookup between two coordinate pairs."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.ROUTING_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.ROUTING_TIMEOUT
        self._transport = transport

    def route(self, origin: Coordinates, destination: Coordinates) -> Optional[RouteInfo]:
        """
        Get driving distance and duration.

        Args:
            origin: Pickup coordinates
            destination: Delivery coordinates

        Returns:
            RouteInfo, or None if the service is unavailable or finds no route
        """
        # OSRM expects lng,lat order
        url = (
            f"{self.base_url}/route/v1/driving/"
            f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        )

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(url, params={"overview": "false"})
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Routing request failed for %s -> %s: %s", origin, destination, e)
            return None

        try:
            answer = OsrmResponse.model_validate(data)
        except PydanticValidationError as e:
            logger.warning("Routing service sent a malformed answer: %s", e.errors()[:1])
            return None

        if answer.code != "Ok" or not answer.routes:
            logger.warning("Routing service returned no route: %s", answer.code)
            return None

        best = answer.routes[0]
        return RouteInfo(
            distance_km=round(best.distance / 1000, 1),
            duration_minutes=round(best.duration / 60, 1),
        )


def get_routing_client() -> Optional[RoutingClient]:
    """Routing client from settings, or None when routing is disabled."""
    if not settings.ROUTING_ENABLED:
        return None
    return RoutingClient()
