"""
Credentials of the wallee merchant account

Build one :class:`GatewayCredentials` at the boundary of the process
(or the request) and pass it to every component which talks to the gateway.
"""

import os
import typing as t

from . import constants
from .globals import WALLEE_LOGGER
from .types.exceptions import ConfigurationError

logger = WALLEE_LOGGER.getChild(__name__)

_V = t.TypeVar("_V")

ValueOrFactory = _V | t.Callable[[], _V]


def _masked(value: str) -> str:
    if len(value) <= 8:
        return "***"
    return value[:4] + "..." + value[-2:]


class GatewayCredentials:
    """
    Space, user, secret and terminal of a wallee merchant.

    Each value can also be given as a callable, which is evaluated
    on every access. This allows reading secrets lazily, e.g. from
    ``viur.core.secrets`` or a rotating secret manager.
    """

    __slots__ = ("_user_id", "_space_id", "_secret", "_terminal", "request_timeout")

    def __init__(
        self,
        *,
        user_id: ValueOrFactory[int | str],
        space_id: ValueOrFactory[int | str],
        secret: ValueOrFactory[str],
        terminal: ValueOrFactory[str | None] = None,
        request_timeout: float | None = None,
    ) -> None:
        """
        Create new credentials.

        :param user_id: Id of the application user of the merchant.
        :param space_id: Id of the space the transactions are created in.
        :param secret: Authentication key of the application user.
        :param terminal: Identifier of the payment terminal used for in-person charges.
        :param request_timeout: Timeout in seconds for a single API request,
            ``None`` uses the default of the SDK.
        """
        self._user_id = user_id
        self._space_id = space_id
        self._secret = secret
        self._terminal = terminal
        self.request_timeout = request_timeout

    @classmethod
    def from_env(cls, environ: t.Mapping[str, str] | None = None) -> t.Self:
        """Read the credentials from the environment variables ``WALLEE_*``.

        :raises ConfigurationError: If a required variable is missing or invalid.
        """
        environ = os.environ if environ is None else environ
        missing = [
            name
            for name in (constants.ENV_USER_ID, constants.ENV_SPACE_ID, constants.ENV_SECRET)
            if not environ.get(name)
        ]
        if missing:
            raise ConfigurationError(f"Missing wallee credentials: {', '.join(missing)}")
        timeout = environ.get(constants.ENV_REQUEST_TIMEOUT) or None
        if timeout is not None:
            try:
                timeout = float(timeout)
            except ValueError:
                raise ConfigurationError(
                    f"{constants.ENV_REQUEST_TIMEOUT} must be a number, got {timeout!r}"
                ) from None
        credentials = cls(
            user_id=environ[constants.ENV_USER_ID],
            space_id=environ[constants.ENV_SPACE_ID],
            secret=environ[constants.ENV_SECRET],
            terminal=environ.get(constants.ENV_TERMINAL) or None,
            request_timeout=timeout,
        )
        logger.debug(f"Loaded credentials from environment: {credentials!r}")
        return credentials

    @staticmethod
    def _resolve(value: ValueOrFactory[_V]) -> _V:
        if callable(value):
            return value()
        return value

    def _resolve_int(self, value: ValueOrFactory[int | str], name: str) -> int:
        value = self._resolve(value)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None

    @property
    def user_id(self) -> int:
        return self._resolve_int(self._user_id, "user_id")

    @property
    def space_id(self) -> int:
        return self._resolve_int(self._space_id, "space_id")

    @property
    def secret(self) -> str:
        if not (secret := self._resolve(self._secret)):
            raise ConfigurationError("secret must not be empty")
        return secret

    @property
    def terminal(self) -> str | None:
        return self._resolve(self._terminal)

    def __repr__(self) -> str:
        secret = self._secret if not callable(self._secret) else "<callable>"
        return (
            f"<{type(self).__name__} user_id={self._user_id!r} space_id={self._space_id!r} "
            f"secret={_masked(str(secret))!r} terminal={self._terminal!r}>"
        )
