"""Unit tests for registration, login and bearer tokens."""
from unittest.mock import patch

import pytest

from screenscout.db.models import User
from screenscout.services.account_service import AccountService
from screenscout.utils.exceptions import AccountExistsError, AuthError, InputValidationError

pytestmark = pytest.mark.usefixtures("mongo")


@pytest.fixture
def accounts():
    return AccountService("test-secret", token_max_age=3600)


class TestRegister:

    def test_register_hashes_password(self, accounts):
        user = accounts.register("Ada@Example.com", "hunter22")
        stored = User.objects.get(id=user.id)
        assert stored.email == "ada@example.com"
        assert stored.password_hash != "hunter22"

    def test_duplicate_email(self, accounts):
        accounts.register("ada@example.com", "hunter22")
        with pytest.raises(AccountExistsError):
            accounts.register("ADA@example.com", "different1")

    @pytest.mark.parametrize("email,password", [
        ("not-an-email", "hunter22"),
        ("ada@example.com", "short"),
        (None, "hunter22"),
        ("ada@example.com", None),
    ])
    def test_invalid_input(self, accounts, email, password):
        with pytest.raises(InputValidationError):
            accounts.register(email, password)
        assert User.objects.count() == 0


class TestLogin:

    def test_login_returns_verifiable_token(self, accounts):
        user = accounts.register("ada@example.com", "hunter22")
        token = accounts.login("ada@example.com", "hunter22")
        assert accounts.verify_token(token) == str(user.id)

    def test_wrong_password_and_unknown_email_look_the_same(self, accounts):
        accounts.register("ada@example.com", "hunter22")
        with pytest.raises(AuthError) as wrong:
            accounts.login("ada@example.com", "hunter23")
        with pytest.raises(AuthError) as unknown:
            accounts.login("bob@example.com", "hunter22")
        assert wrong.value.message == unknown.value.message == "Invalid credentials"


class TestVerifyToken:

    def test_tampered_token(self, accounts):
        token = accounts.issue_token("65f000000000000000000000")
        with pytest.raises(AuthError, match="Invalid token"):
            accounts.verify_token(token[:-2] + "xx")

    def test_token_from_other_secret(self, accounts):
        token = AccountService("other-secret").issue_token("65f000000000000000000000")
        with pytest.raises(AuthError):
            accounts.verify_token(token)

    def test_expired_token(self, accounts):
        token = accounts.issue_token("65f000000000000000000000")
        with patch("itsdangerous.timed.time.time", return_value=10**10):
            with pytest.raises(AuthError, match="Token expired"):
                accounts.verify_token(token)

    def test_garbage(self, accounts):
        with pytest.raises(AuthError):
            accounts.verify_token("garbage")
