"""Account Service tests with an in-memory identity provider."""

import pytest

from loadboard.exceptions import AuthError, DuplicateKey, NotFound
from loadboard.models import UserRole
from loadboard.services import AccountService, build_services


@pytest.fixture
def accounts(provider, services):
    return AccountService(provider, services.profiles)


def register(accounts, email, role, password="secret"):
    accounts.request_signup(email, password, {"full_name": "Test User"})
    return accounts.complete_signup(email, "000000", "Test User", role, "0550000000")


class TestSignup:

    def test_signup_creates_profile_keyed_by_provider_id(self, accounts, services):
        user, profile = register(accounts, "shipper@example.com", UserRole.SHIPPER)

        assert profile.id == user.id
        assert services.profiles.get_profile(user.id).email == "shipper@example.com"
        assert user.confirmed

    def test_wrong_code_creates_nothing(self, accounts, services):
        accounts.request_signup("x@example.com", "secret")

        with pytest.raises(AuthError):
            accounts.complete_signup("x@example.com", "999999", "X", UserRole.DRIVER, "0550000000")
        assert services.profiles.list_profiles() == []

    def test_second_completion_is_duplicate(self, accounts):
        register(accounts, "d@example.com", UserRole.DRIVER)

        with pytest.raises(DuplicateKey):
            accounts.complete_signup("d@example.com", "000000", "Again", UserRole.DRIVER, "0550000000")


class TestLogin:

    def test_login_returns_profile(self, accounts):
        user, _ = register(accounts, "d@example.com", UserRole.DRIVER)

        session, profile = accounts.login("d@example.com", "secret")

        assert session.user.id == user.id
        assert profile.is_driver
        assert accounts.current_profile().id == user.id

    def test_login_without_profile(self, accounts):
        accounts.request_signup("half@example.com", "secret")

        with pytest.raises(NotFound):
            accounts.login("half@example.com", "secret")

    def test_bad_password(self, accounts):
        register(accounts, "d@example.com", UserRole.DRIVER)

        with pytest.raises(AuthError):
            accounts.login("d@example.com", "nope")

    def test_admin_login(self, accounts):
        user, _ = register(accounts, "ops@example.com", UserRole.ADMIN)
        assert accounts.login_admin("ops@example.com", "secret").user.id == user.id

    def test_admin_login_rejects_non_admin(self, accounts, provider):
        register(accounts, "s@example.com", UserRole.SHIPPER)

        with pytest.raises(AuthError):
            accounts.login_admin("s@example.com", "secret")
        assert provider.sign_outs == 1, "Rejected admin login must end the session"
        assert accounts.current_profile() is None

    def test_phone_code_is_requested(self, accounts, provider):
        accounts.request_phone_code("+966559876543")
        assert provider.codes_sent == ["+966559876543"]

    def test_current_profile_signed_out(self, accounts):
        assert accounts.current_profile() is None


class TestPasswordRecovery:

    def test_forgot_password_asks_provider_for_reset(self, accounts, provider):
        register(accounts, "d@example.com", UserRole.DRIVER)

        accounts.forgot_password("d@example.com")

        assert provider.resets_requested == ["d@example.com"]

    def test_forgot_password_for_unknown_email(self, accounts):
        with pytest.raises(AuthError):
            accounts.forgot_password("nobody@example.com")


def test_build_services_wires_accounts(repo, provider):
    services = build_services(repo, identity=provider)

    assert isinstance(services.accounts, AccountService)
    assert services.accounts.profiles is services.profiles


def test_accounts_absent_without_auth_settings(repo, monkeypatch):
    from loadboard.config import settings

    monkeypatch.setattr(settings, "AUTH_BASE_URL", None)
    monkeypatch.setattr(settings, "AUTH_API_KEY", None)

    assert build_services(repo).accounts is None
