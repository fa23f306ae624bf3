"""Service for registration, login and the persisted session identity."""

from __future__ import annotations

import logging
from uuid import uuid4

from clinker_quiz.constants.quiz_constants import MIN_PASSWORD_LENGTH
from clinker_quiz.constants.storage_constants import (
    PASSWORD_KEY_TEMPLATE,
    SESSION_USER_KEY,
    USERS_KEY,
)
from clinker_quiz.core.errors import (
    DuplicateAccountError,
    InvalidCredentialsError,
    MissingFieldError,
    StorageError,
    WeakPasswordError,
)
from clinker_quiz.core.models import User, utc_now
from clinker_quiz.core.storage import CollectionStore

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().casefold()


class AccountService:
    """Manages the account store and the active identity."""

    def __init__(self, collections: CollectionStore) -> None:
        self._collections = collections

    def list_users(self) -> list[User]:
        return [User.from_dict(item) for item in self._collections.read_collection(USERS_KEY)]

    def find_by_email(self, email: str) -> User | None:
        wanted = _normalize_email(email)
        return next((user for user in self.list_users() if _normalize_email(user.email) == wanted), None)

    def register(self, name: str, email: str, password: str) -> User:
        """Create an account and sign it in."""
        name = (name or "").strip()
        email = (email or "").strip()
        password = password or ""
        if not name or not email or not password:
            raise MissingFieldError("Name, email and password are all required.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise WeakPasswordError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )

        users = self._collections.read_collection(USERS_KEY)
        wanted = _normalize_email(email)
        if any(_normalize_email(item.get("email", "")) == wanted for item in users):
            raise DuplicateAccountError("This email is already registered.")

        user = User(id=uuid4().hex, name=name, email=email, is_admin=False, created_at=utc_now())
        users.append(user.to_dict())
        self._collections.write_collection(USERS_KEY, users)
        self._collections.write_text(PASSWORD_KEY_TEMPLATE.format(user_id=user.id), password)
        logger.info("Registered account %s", user.email)

        self._set_current_user(user)
        return user

    def login(self, email: str, password: str) -> User:
        """Check credentials against the store and sign the account in."""
        email = (email or "").strip()
        if not email or not password:
            raise MissingFieldError("Email and password are required.")

        user = self.find_by_email(email)
        if user is None:
            logger.info("Login rejected: unknown account %s", email)
            raise InvalidCredentialsError("User not found.")

        saved_password = self._collections.read_text(PASSWORD_KEY_TEMPLATE.format(user_id=user.id))
        if saved_password != password:
            logger.info("Login rejected: wrong password for %s", email)
            raise InvalidCredentialsError("Incorrect password.")

        self._set_current_user(user)
        logger.info("Signed in %s", user.email)
        return user

    def logout(self) -> None:
        self._collections.remove(SESSION_USER_KEY)

    def current_user(self) -> User | None:
        try:
            raw = self._collections.read_value(SESSION_USER_KEY)
        except StorageError:
            logger.warning("Discarding unreadable session identity")
            self._collections.remove(SESSION_USER_KEY)
            return None
        if not raw:
            return None
        return User.from_dict(raw)

    def ensure_admin_account(self, name: str, email: str, password: str) -> User:
        """Seed (or promote) the configured administrator account."""
        email = (email or "").strip()
        if not email or not password:
            raise MissingFieldError("Administrator email and password are required.")

        users = self._collections.read_collection(USERS_KEY)
        wanted = _normalize_email(email)
        for index, item in enumerate(users):
            if _normalize_email(item.get("email", "")) == wanted:
                item["isAdmin"] = True
                admin = User.from_dict(item)
                users[index] = admin.to_dict()
                break
        else:
            admin = User(
                id=uuid4().hex,
                name=(name or "").strip() or "Administrator",
                email=email,
                is_admin=True,
                created_at=utc_now(),
            )
            users.append(admin.to_dict())
            logger.info("Seeded administrator account %s", email)

        self._collections.write_collection(USERS_KEY, users)
        self._collections.write_text(PASSWORD_KEY_TEMPLATE.format(user_id=admin.id), password)
        return admin

    def _set_current_user(self, user: User) -> None:
        self._collections.write_value(SESSION_USER_KEY, user.to_dict())
