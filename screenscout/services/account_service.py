"""Account service — registration, login and bearer-token verification.

Passwords are hashed with werkzeug's salted hash. Bearer tokens are
itsdangerous timed signatures over the account id, keyed by the app's
SECRET_KEY, so verifying a token needs no database round-trip.

Usage:
    accounts = AccountService(secret_key, token_max_age=7 * 24 * 3600)
    accounts.register("ada@example.com", "hunter22")
    token = accounts.login("ada@example.com", "hunter22")
    user_id = accounts.verify_token(token)
"""
from __future__ import annotations

import structlog
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from mongoengine import NotUniqueError
from werkzeug.security import check_password_hash, generate_password_hash

from screenscout.db.models import User, utcnow
from screenscout.models.requests import Credentials, Registration, validate_input
from screenscout.utils.exceptions import AccountExistsError, AuthError

logger = structlog.get_logger(__name__)

TOKEN_SALT = "screenscout-auth"


class AccountService:
    """Creates accounts and turns credentials into bearer tokens and back.

    Args:
        secret_key: Key used to sign bearer tokens.
        token_max_age: Token lifetime in seconds.
    """

    def __init__(self, secret_key: str, token_max_age: int = 7 * 24 * 3600) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self._token_max_age = token_max_age

    def register(self, email: str, password: str) -> User:
        """Create an account.

        Raises:
            InputValidationError: Malformed e-mail or too-short password.
            AccountExistsError: The e-mail is already registered.
        """
        creds = validate_input(Registration, {"email": email, "password": password})
        user = User(
            email=creds.email,
            password_hash=generate_password_hash(creds.password),
            created_at=utcnow(),
        )
        try:
            user.save(force_insert=True)
        except NotUniqueError as e:
            raise AccountExistsError() from e

        logger.info("account_registered", user_id=str(user.id))
        return user

    def login(self, email: str, password: str) -> str:
        """Check credentials and issue a bearer token.

        Raises:
            AuthError: Unknown e-mail or wrong password (indistinguishable).
        """
        creds = validate_input(Credentials, {"email": email, "password": password})
        user = User.objects(email=creds.email).first()
        if user is None or not check_password_hash(user.password_hash, creds.password):
            logger.info("login_failed")
            raise AuthError("Invalid credentials")

        logger.info("login_succeeded", user_id=str(user.id))
        return self.issue_token(str(user.id))

    def issue_token(self, user_id: str) -> str:
        return self._serializer.dumps({"uid": user_id})

    def verify_token(self, token: str) -> str:
        """Resolve a bearer token to the account id it was issued for.

        Raises:
            AuthError: Expired, tampered or malformed token.
        """
        try:
            data = self._serializer.loads(token, max_age=self._token_max_age)
        except SignatureExpired as e:
            raise AuthError("Token expired") from e
        except BadSignature as e:
            raise AuthError("Invalid token") from e

        user_id = data.get("uid") if isinstance(data, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise AuthError("Invalid token")
        return user_id
