import typing as t

from . import constants
from .client import GatewayClient
from .config import GatewayCredentials
from .globals import WALLEE_LOGGER
from .line_items import LineItemBuilder
from .payload import TransactionPayloadBuilder, encode_callback_urls
from .services import EVENT_SERVICE, Event
from .tokens import TokenLifecycleManager
from .types import (
    FlowResult,
    GatewayError,
    OrderContext,
    PersistenceError,
    Transaction,
    TransactionRequest,
    ValidationError,
    flow_result,
)

logger = WALLEE_LOGGER.getChild(__name__)


class TransactionOrchestrator:
    """
    Drives the payment flows against the gateway.

    All flows share the create step and differ in what follows:

    - redirect flow: the customer pays on the hosted payment page,
      the final state arrives later by webhook or redirect.
    - terminal flow: the transaction is performed on a payment terminal,
      successful payments get their instrument tokenized.
    - token flow: the transaction is charged with a stored token.

    Failures of the gateway or invalid input end the flow with a failure
    result. Nothing is retried.
    """

    def __init__(
        self,
        client: GatewayClient,
        credentials: GatewayCredentials,
        *,
        token_manager: TokenLifecycleManager | None = None,
        line_item_builder: LineItemBuilder | None = None,
        payload_builder: TransactionPayloadBuilder | None = None,
    ) -> None:
        """
        Create a new orchestrator.

        :param client: The gateway adapter.
        :param credentials: Credentials of the merchant, used for the terminal identifier.
        :param token_manager: Tokenizes successful terminal payments. Without it,
            no tokens are created.
        """
        self.client = client
        self.credentials = credentials
        self.token_manager = token_manager
        self.line_item_builder = line_item_builder or LineItemBuilder()
        self.payload_builder = payload_builder or TransactionPayloadBuilder()

    # --- redirect flow -------------------------------------------------------

    def create_payment_link(
        self,
        records: t.Iterable[t.Mapping[str, t.Any]],
        *,
        context: OrderContext | str,
        success_url: str,
        failed_url: str,
        currency: str | None = None,
    ) -> FlowResult:
        """Create a transaction and get the URL of its payment page.

        :param records: The order records, mapped according to ``context``.
        :param success_url: Redirect target after a successful payment.
        :param failed_url: Redirect target after a failed or aborted payment.
        """
        try:
            request = self._build_request(
                records, context, currency,
                success_url=success_url, failed_url=failed_url,
            )
            transaction = self._create(request, flow="redirect")
            url = self.client.get_payment_page_url(transaction.id)
        except (ValidationError, GatewayError) as exc:
            return self._failure("redirect", exc)
        logger.info(f"Payment page for transaction {transaction.id}: {url}")
        return flow_result(
            True,
            state=transaction.state,
            transaction_id=transaction.id,
            payment_page_url=url,
        )

    def create_payment_link_with_callback(
        self,
        records: t.Iterable[t.Mapping[str, t.Any]],
        *,
        redirect_url: str,
        order_id: t.Any,
        context: OrderContext | str = OrderContext.BILLING,
        currency: str | None = None,
    ) -> FlowResult:
        """Like :meth:`create_payment_link`, both redirects go to ``redirect_url``.

        The result of the payment is encoded in the query,
        see :func:`viur.wallee.payload.encode_callback_urls`.
        """
        try:
            success_url, failed_url = encode_callback_urls(redirect_url, order_id)
        except ValidationError as exc:
            return self._failure("redirect", exc)
        return self.create_payment_link(
            records,
            context=context,
            success_url=success_url,
            failed_url=failed_url,
            currency=currency,
        )

    # --- terminal flow -------------------------------------------------------

    def charge_on_terminal(
        self,
        amount: t.Any,
        *,
        customer_id: int = 0,
        property_scope: t.Any = None,
        currency: str | None = None,
        terminal_id: str | None = None,
    ) -> FlowResult:
        """Charge an amount on the payment terminal.

        Blocks until the terminal reported the state. If the payment succeeded,
        the payment instrument is tokenized and stored for the customer.
        A failed tokenization is reported in ``token_error`` but does not
        change the result of the payment.

        :param terminal_id: Use this terminal instead of the configured one.
        """
        try:
            terminal_id = terminal_id or self.credentials.terminal
            if not terminal_id:
                raise ValidationError("No payment terminal configured")
            request = self._build_request(
                [self.line_item_builder.charge_record(amount)],
                OrderContext.CASHIER, currency,
            )
            transaction = self._create(request, flow="terminal")
            transaction = self.client.trigger_on_terminal(transaction.id, terminal_id)
        except (ValidationError, GatewayError) as exc:
            return self._failure("terminal", exc)

        logger.info(f"Terminal {terminal_id} reported {transaction.state} for transaction {transaction.id}")
        EVENT_SERVICE.call(Event.TRANSACTION_STATE_CHANGED, transaction=transaction, flow="terminal")

        result = flow_result(
            transaction.state not in constants.FAILURE_STATES,
            state=transaction.state,
            transaction_id=transaction.id,
        )
        if transaction.state in constants.SUCCESS_STATES and self.token_manager is not None:
            try:
                token = self.token_manager.capture_and_store(transaction.id, customer_id, property_scope)
            except (GatewayError, PersistenceError) as exc:
                logger.error(f"Tokenization of transaction {transaction.id} failed: {exc}")
                result["token_error"] = str(exc)
            else:
                result["token_id"] = token.token_id
        return result

    # --- token flow ----------------------------------------------------------

    def charge_with_token(
        self,
        amount: t.Any,
        token_id: str,
        *,
        customer_id: int = 0,
        currency: str | None = None,
    ) -> FlowResult:
        """Charge an amount with a stored token, without customer interaction."""
        try:
            if not token_id:
                raise ValidationError("token_id must not be empty")
            request = self._build_request(
                [self.line_item_builder.charge_record(amount)],
                OrderContext.CASHIER, currency,
                token=token_id,
            )
            transaction = self._create(request, flow="token")
            transaction = self.client.process_with_token(transaction.id)
        except (ValidationError, GatewayError) as exc:
            return self._failure("token", exc)

        logger.info(f"Token {token_id} of customer {customer_id} charged: "
                    f"{transaction.state} for transaction {transaction.id}")
        EVENT_SERVICE.call(Event.TRANSACTION_STATE_CHANGED, transaction=transaction, flow="token")
        return flow_result(
            transaction.state not in constants.FAILURE_STATES,
            state=transaction.state,
            transaction_id=transaction.id,
            token_id=str(token_id),
        )

    # --- utils ---------------------------------------------------------------

    def _build_request(
        self,
        records: t.Iterable[t.Mapping[str, t.Any]],
        context: OrderContext | str,
        currency: str | None,
        **kwargs: t.Any,
    ) -> TransactionRequest:
        line_items = self.line_item_builder.build(records, context)
        return self.payload_builder.build(line_items, currency, **kwargs)

    def _create(self, request: TransactionRequest, flow: str) -> Transaction:
        transaction = self.client.create_transaction(request)
        logger.info(f"Created transaction {transaction.id} ({flow=}, state={transaction.state})")
        EVENT_SERVICE.call(Event.TRANSACTION_CREATED, transaction=transaction, flow=flow)
        return transaction

    def _failure(self, flow: str, exc: Exception) -> FlowResult:
        if isinstance(exc, ValidationError):
            logger.warning(f"Invalid input for {flow} flow: {exc}")
        else:
            logger.error(f"{flow} flow failed: {exc}")
        EVENT_SERVICE.call(Event.FLOW_FAILED, flow=flow, error=exc)
        return flow_result(False, error=str(exc))
