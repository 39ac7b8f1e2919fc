"""
Adapter to the wallee API

Every call to the payment processor passes through a :class:`GatewayClient`.
:class:`WalleeGatewayClient` implements it with the official wallee SDK
and turns every failure into a :class:`GatewayError`.
"""

import abc
import functools
import json
import typing as t

from wallee import Configuration
from wallee.api import (
    PaymentTerminalTillServiceApi,
    TokenServiceApi,
    TokenVersionServiceApi,
    TransactionPaymentPageServiceApi,
    TransactionServiceApi,
)
from wallee.models import LineItemCreate, LineItemType, TransactionCreate
from wallee.rest import ApiException

from .config import GatewayCredentials
from .globals import WALLEE_LOGGER
from .types import GatewayError, TokenVersionDetails, Transaction, TransactionRequest

logger = WALLEE_LOGGER.getChild(__name__)

P = t.ParamSpec("P")
R = t.TypeVar("R")


class GatewayClient(abc.ABC):
    """
    The operations of the payment processor used by the payment flows.

    The space is a property of the client, so callers pass only the
    ids of the transaction or token. Every method blocks until the
    gateway answered and raises a :class:`GatewayError` on failure.
    """

    @abc.abstractmethod
    def create_transaction(self, request: TransactionRequest) -> Transaction:
        ...

    @abc.abstractmethod
    def get_payment_page_url(self, transaction_id: int) -> str:
        ...

    @abc.abstractmethod
    def trigger_on_terminal(self, transaction_id: int, terminal_id: str) -> Transaction:
        """Perform the transaction on a terminal.

        Blocks until the terminal reported a final state (or the request timed out).
        """
        ...

    @abc.abstractmethod
    def create_token(self, transaction_id: int) -> str:
        """Create a token for the payment instrument used in a transaction.

        :return: The id of the new token.
        """
        ...

    @abc.abstractmethod
    def get_active_token_version(self, token_id: str) -> TokenVersionDetails:
        ...

    @abc.abstractmethod
    def process_with_token(self, transaction_id: int) -> Transaction:
        """Charge a transaction created with a token, without customer interaction."""
        ...

    @abc.abstractmethod
    def delete_token(self, token_id: str) -> None:
        ...


def _error_message(err: ApiException) -> str:
    """Get the most helpful message of an API error"""
    if body := getattr(err, "body", None):
        try:
            data = json.loads(body)
        except (TypeError, ValueError):
            return str(body)
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return str(body)
    return str(getattr(err, "reason", None) or err)


def log_wallee_error(func: t.Callable[P, R]) -> t.Callable[P, R]:
    """
    Decorator to log wallee errors

    Decorator that logs details of any error raised by the SDK,
    then re-raises it as :class:`GatewayError`.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except GatewayError:
            raise
        except ApiException as err:
            logger.error(f"wallee ApiException encountered in {func.__qualname__}")
            logger.error(f"ApiException: status={err.status!r} reason={err.reason!r} body={err.body!r}")
            raise GatewayError(
                _error_message(err),
                operation=func.__name__,
                status_code=err.status,
            ) from err
        except Exception as err:
            logger.exception(f"Calling wallee failed in {func.__qualname__}: {err!r}")
            raise GatewayError(str(err) or type(err).__name__, operation=func.__name__) from err

    return wrapper


def _state_name(state: t.Any) -> str:
    """Get the name of a state, the SDK returns enums"""
    return str(getattr(state, "value", state))


class WalleeGatewayClient(GatewayClient):
    """
    :class:`GatewayClient` for the wallee API.

    Uses the services of the wallee SDK, created once per client.
    """

    def __init__(
        self,
        credentials: GatewayCredentials,
        *,
        configuration: Configuration | None = None,
    ) -> None:
        """
        Create a new client.

        :param credentials: Credentials of the merchant.
        :param configuration: Use this SDK configuration instead of creating one
            from the credentials.
        """
        self.credentials = credentials
        if configuration is None:
            kwargs = {}
            if credentials.request_timeout is not None:
                kwargs["request_timeout"] = credentials.request_timeout
            configuration = Configuration(
                user_id=credentials.user_id,
                api_secret=credentials.secret,
                **kwargs,
            )
        self.configuration = configuration
        self.transaction_service = TransactionServiceApi(configuration=configuration)
        self.payment_page_service = TransactionPaymentPageServiceApi(configuration=configuration)
        self.terminal_till_service = PaymentTerminalTillServiceApi(configuration=configuration)
        self.token_service = TokenServiceApi(configuration=configuration)
        self.token_version_service = TokenVersionServiceApi(configuration=configuration)

    @property
    def space_id(self) -> int:
        return self.credentials.space_id

    @staticmethod
    def to_transaction_create(request: TransactionRequest) -> TransactionCreate:
        """Convert a request into the model of the SDK"""
        kwargs = {}
        if request.success_url:
            kwargs["success_url"] = request.success_url
        if request.failed_url:
            kwargs["failed_url"] = request.failed_url
        if request.token:
            kwargs["token"] = int(request.token) if request.token.isdigit() else request.token
        return TransactionCreate(
            currency=request.currency,
            line_items=[
                LineItemCreate(
                    name=item.name,
                    unique_id=item.unique_id,
                    quantity=item.quantity,
                    amount_including_tax=float(item.amount),
                    type=LineItemType(item.type.value),
                )
                for item in request.line_items
            ],
            auto_confirmation_enabled=request.auto_confirmation_enabled,
            **kwargs,
        )

    @log_wallee_error
    def create_transaction(self, request: TransactionRequest) -> Transaction:
        transaction = self.transaction_service.create(
            space_id=self.space_id,
            transaction=self.to_transaction_create(request),
        )
        logger.debug(f"{transaction=} [create response]")
        return Transaction(
            id=transaction.id,
            state=_state_name(transaction.state),
            request=request,
        )

    @log_wallee_error
    def get_payment_page_url(self, transaction_id: int) -> str:
        return self.payment_page_service.payment_page_url(
            space_id=self.space_id,
            id=transaction_id,
        )

    @log_wallee_error
    def trigger_on_terminal(self, transaction_id: int, terminal_id: str) -> Transaction:
        transaction = self.terminal_till_service.perform_transaction_by_identifier(
            space_id=self.space_id,
            transaction_id=transaction_id,
            terminal_identifier=terminal_id,
        )
        logger.debug(f"{transaction=} [terminal response]")
        return Transaction(id=transaction.id, state=_state_name(transaction.state))

    @log_wallee_error
    def create_token(self, transaction_id: int) -> str:
        token = self.token_service.create_token(
            space_id=self.space_id,
            transaction_id=transaction_id,
        )
        logger.debug(f"{token=} [create_token response]")
        return str(token.id)

    @log_wallee_error
    def get_active_token_version(self, token_id: str) -> TokenVersionDetails:
        version = self.token_version_service.active_version(
            space_id=self.space_id,
            id=int(token_id),
        )
        logger.debug(f"{version=} [active_version response]")
        configuration = getattr(version, "payment_connector_configuration", None)
        return TokenVersionDetails(
            display_label=version.name or "",
            image_path=getattr(configuration, "image_path", None),
        )

    @log_wallee_error
    def process_with_token(self, transaction_id: int) -> Transaction:
        transaction = self.token_service.process_transaction(
            space_id=self.space_id,
            transaction_id=transaction_id,
        )
        logger.debug(f"{transaction=} [process_transaction response]")
        return Transaction(id=transaction.id, state=_state_name(transaction.state))

    @log_wallee_error
    def delete_token(self, token_id: str) -> None:
        self.token_service.delete(
            space_id=self.space_id,
            id=int(token_id),
        )
