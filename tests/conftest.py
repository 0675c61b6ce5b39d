"""Shared fixtures: a throwaway SQLite store, a few registered users and an in-memory identity provider."""

import pytest

from loadboard.db import Repository
from loadboard.exceptions import AuthError
from loadboard.identity import IdentityProvider
from loadboard.models import AuthSession, AuthUser, LoadStatus, UserRole, VehicleSpec
from loadboard.models.enums import ASSIGNED_STATUSES
from loadboard.services import build_services


@pytest.fixture
def repo(tmp_path):
    repository = Repository(f"sqlite:///{tmp_path / 'loadboard.db'}")
    repository.init_db()
    yield repository
    repository.engine.dispose()


@pytest.fixture
def services(repo):
    return build_services(repo)


@pytest.fixture
def shipper(services):
    return services.profiles.create_profile(
        "shipper-1", "Saud Trading Co", UserRole.SHIPPER, "0501234567"
    )


@pytest.fixture
def driver(services):
    return services.profiles.create_profile(
        "driver-1", "Khalid Al-Harbi", UserRole.DRIVER, "0559876543"
    )


@pytest.fixture
def second_driver(services):
    return services.profiles.create_profile(
        "driver-2", "Faisal Al-Qahtani", UserRole.DRIVER, "0561112233"
    )


@pytest.fixture
def admin(services):
    return services.profiles.create_profile(
        "admin-1", "Ops Admin", UserRole.ADMIN, "0500000000"
    )


@pytest.fixture
def registered_driver(services, driver):
    """A driver who has completed vehicle setup."""
    services.fleet.upsert_driver_details(
        driver.id,
        VehicleSpec(truck_type="trella", body_type="curtain", dimensions="large", plate_number="ABC 1234"),
    )
    return driver


@pytest.fixture
def riyadh_jeddah():
    return {"origin": "Riyadh", "destination": "Jeddah", "weight": 1000, "price": 500}


@pytest.fixture
def check_invariant(repo):
    """Assert driver_id is set exactly for in_progress / completed loads."""

    def _check():
        for load in repo.list_loads():
            status = LoadStatus(load.status).value
            assigned = status in ASSIGNED_STATUSES
            assert (load.driver_id is not None) == assigned, (
                f"Load {load.id} in status {status} has driver_id={load.driver_id!r}"
            )

    return _check


class InMemoryProvider(IdentityProvider):
    """Identity provider keeping users in a dict; every code is 000000."""

    def __init__(self):
        self.users = {}
        self.passwords = {}
        self.session = None
        self.codes_sent = []
        self.resets_requested = []
        self.sign_outs = 0

    def sign_up(self, email, password, metadata=None):
        user = AuthUser(id=f"uid-{len(self.users) + 1}", email=email, metadata=metadata or {})
        self.users[email] = user
        self.passwords[email] = password
        return user

    def verify_code(self, email, code):
        if code != "000000" or email not in self.users:
            raise AuthError("Token has expired or is invalid")
        user = self.users[email].model_copy(update={"confirmed": True})
        self.users[email] = user
        return user

    def sign_in_with_password(self, email, password):
        if email not in self.users or self.passwords.get(email) != password:
            raise AuthError("Invalid login credentials")
        self.session = AuthSession(access_token=f"token-{email}", user=self.users[email])
        return self.session

    def sign_in_with_code(self, phone):
        self.codes_sent.append(phone)

    def request_password_reset(self, email):
        if email not in self.users:
            raise AuthError("User not found")
        self.resets_requested.append(email)

    def get_current_user(self):
        return self.session.user if self.session else None

    def sign_out(self):
        self.sign_outs += 1
        self.session = None


@pytest.fixture
def provider():
    return InMemoryProvider()
