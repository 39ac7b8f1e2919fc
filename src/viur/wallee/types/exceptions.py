"""
Specific exceptions used inside viur-wallee

The kinds are distinguished, so callers can apply a different policy:
A :class:`ValidationError` is never sent to the gateway,
a :class:`GatewayError` must never be retried blindly (a duplicate charge is possible),
a :class:`PersistenceError` concerns only the local bookkeeping.
"""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from viur.wallee.services import Hook


class ViURWalleeException(Exception):
    """Base of all viur-wallee exceptions"""
    ...


class ValidationError(ViURWalleeException):
    """
    Exception raised when input data is missing or invalid.

    Raised before any call to the gateway has been made.
    """
    ...


class GatewayError(ViURWalleeException):
    """
    Exception raised when a call to the wallee API failed.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Create a new GatewayError.

        :param message: Error message, usually the message of the API response.
        :param operation: Name of the gateway operation which failed.
        :param status_code: HTTP status code of the API response, if any.
        """
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.status_code = status_code

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation} failed: {self.message}"
        return self.message


class PersistenceError(ViURWalleeException):
    """
    Exception raised when reading from or writing to the local store failed.
    """
    ...


class NotFoundError(PersistenceError):
    """
    Exception raised when a requested record does not exist in the local store.
    """
    ...


class ConfigurationError(ViURWalleeException):
    """
    Exception raised when a configuration is invalid or incomplete,
    e.g. the credentials of the merchant are missing.
    """
    ...


class DispatchError(ViURWalleeException):
    """
    Exception raised when dispatch fails (e.g. a Hook).
    """

    def __init__(self, msg: t.Any, hook: Hook, *args: t.Any) -> None:
        """Create a new DispatchError.

        :param msg: Error message
        :param hook: The hook tried to dispatch
        """
        super().__init__(msg, *args)
        self.hook: Hook = hook
