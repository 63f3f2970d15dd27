"""
Domain error kinds.

Every failure the domain layer reports on purpose is a
``SubscriptionError`` carrying an ``ErrorKind``.  Callers branch on the
exception class or on ``kind``; message text is for humans only.  Any
other exception (driver errors, programming errors) is an
infrastructure failure and is left to propagate.
"""

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"


class SubscriptionError(Exception):
    """Base class for errors raised by the subscription core."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(SubscriptionError):
    """A precondition on the input was violated."""

    kind = ErrorKind.INVALID_INPUT


class NotFoundError(SubscriptionError):
    """The targeted subscription does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, subscription_id: str) -> None:
        super().__init__(f"subscription {subscription_id} not found")
        self.subscription_id = subscription_id
