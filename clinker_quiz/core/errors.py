"""Error taxonomy shared by the services and both user-facing surfaces."""

from __future__ import annotations


class QuizPlatformError(Exception):
    """Base class for every failure reported back to the user."""


class MissingFieldError(QuizPlatformError, ValueError):
    """A required form field was empty or malformed."""


class WeakPasswordError(QuizPlatformError, ValueError):
    """Password shorter than the minimum length."""


class DuplicateAccountError(QuizPlatformError):
    """An account with the same email is already registered."""


class InvalidCredentialsError(QuizPlatformError):
    """Unknown email or wrong password."""


class NotAuthenticatedError(QuizPlatformError):
    """The operation requires a signed-in user."""


class PermissionDeniedError(QuizPlatformError):
    """The signed-in user may not touch this record."""


class NotFoundError(QuizPlatformError, LookupError):
    """Lookup by id (quiz, session) found nothing."""


class InvalidTransitionError(QuizPlatformError, RuntimeError):
    """The quiz-taking flow cannot perform this step in its current state."""


class RetakeNotAllowedError(InvalidTransitionError):
    """The quiz settings forbid another attempt."""


class StorageError(QuizPlatformError):
    """The backing store could not be read or written."""


class QuizImportError(QuizPlatformError, ValueError):
    """Raised when a quiz definition cannot be parsed."""
