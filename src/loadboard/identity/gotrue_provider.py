"""Identity provider backed by a GoTrue-compatible hosted auth API."""

import logging
from typing import Any, Optional

import httpx

from ..config import settings
from ..exceptions import AuthError, PersistenceError
from ..models.auth import AuthSession, AuthUser
from .base_provider import IdentityProvider

logger = logging.getLogger(__name__)


def _to_user(payload: dict) -> AuthUser:
    # signup returns the user bare, verify/token wrap it under "user"
    data = payload.get("user") or payload
    if not data.get("id"):
        raise AuthError("Identity provider response has no user id")
    return AuthUser(
        id=data["id"],
        email=data.get("email"),
        phone=data.get("phone") or None,
        metadata=data.get("user_metadata") or {},
        confirmed=bool(data.get("email_confirmed_at") or data.get("confirmed_at")),
    )


def _to_session(payload: dict) -> AuthSession:
    if not payload.get("access_token"):
        raise AuthError("Identity provider did not return a session")
    return AuthSession(
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token"),
        expires_in=payload.get("expires_in"),
        user=_to_user(payload),
    )


class GoTrueIdentityProvider(IdentityProvider):
    """
    HTTP adapter for the hosted auth service.

    Keeps the session of the last successful sign-in, the way the
    front-end SDK does, so `get_current_user` and `sign_out` work.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        reset_redirect_url: Optional[str] = None,
    ):
        base_url = base_url or settings.AUTH_BASE_URL
        api_key = api_key or settings.AUTH_API_KEY
        if not base_url or not api_key:
            raise AuthError("Identity provider is not configured (AUTH_BASE_URL / AUTH_API_KEY)")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout if timeout is not None else settings.AUTH_TIMEOUT
        self.reset_redirect_url = reset_redirect_url or settings.AUTH_RESET_REDIRECT_URL
        self._transport = transport
        self.session: Optional[AuthSession] = None

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        token: Optional[str] = None,
    ) -> dict:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token or self.api_key}",
            "Accept": "application/json",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(
                    method, f"{self.base_url}{path}", json=json, params=params, headers=headers
                )
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable: %s", e)
            raise PersistenceError(f"Identity provider unreachable: {e}") from e

        if response.status_code >= 500:
            raise PersistenceError(f"Identity provider error ({response.status_code})")

        body: dict = {}
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = {}

        if response.status_code >= 400:
            message = (
                body.get("msg")
                or body.get("error_description")
                or body.get("message")
                or f"Authentication failed ({response.status_code})"
            )
            raise AuthError(message)

        return body

    def sign_up(self, email: str, password: str, metadata: Optional[dict[str, Any]] = None) -> AuthUser:
        body = self._request(
            "POST", "/signup", json={"email": email, "password": password, "data": metadata or {}}
        )
        return _to_user(body)

    def verify_code(self, email: str, code: str) -> AuthUser:
        body = self._request("POST", "/verify", json={"type": "signup", "email": email, "token": code})
        if body.get("access_token"):
            self.session = _to_session(body)
        return _to_user(body)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        body = self._request(
            "POST", "/token", params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = _to_session(body)
        self.session = session
        return session

    def sign_in_with_code(self, phone: str) -> None:
        self._request("POST", "/otp", json={"phone": phone})

    def request_password_reset(self, email: str) -> None:
        params = {"redirect_to": self.reset_redirect_url} if self.reset_redirect_url else None
        self._request("POST", "/recover", json={"email": email}, params=params)

    def get_current_user(self) -> Optional[AuthUser]:
        if self.session is None:
            return None
        try:
            body = self._request("GET", "/user", token=self.session.access_token)
        except AuthError:
            # expired or revoked token
            self.session = None
            return None
        return _to_user(body)

    def sign_out(self) -> None:
        if self.session is None:
            return
        token = self.session.access_token
        self.session = None
        self._request("POST", "/logout", token=token)
