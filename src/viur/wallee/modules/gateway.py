import functools
import json
import typing as t

from viur.core import access, current, errors, exposed, force_post
from viur.core.module import Module
from viur.core.prototypes.instanced_module import InstancedModule
from .datastore import DatastoreTokenRepository, DatastoreTransactionLogRepository
from .error import error_handler
from .response import JsonResponse
from ..client import GatewayClient, WalleeGatewayClient
from ..config import GatewayCredentials
from ..globals import WALLEE_LOGGER
from ..orchestrator import TransactionOrchestrator
from ..payload import decode_callback
from ..repositories import TokenRepository, TransactionLogRepository
from ..services import HOOK_SERVICE, Hook
from ..tokens import TokenLifecycleManager
from ..types import OrderContext, PaymentCallback, ValidationError
from ..webhook import WebhookReconciler

logger = WALLEE_LOGGER.getChild(__name__)


def _json_param(value: t.Any, name: str) -> t.Any:
    """Parameters may arrive JSON encoded (form posts) or already decoded"""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            raise ValidationError(f"Parameter {name} is not valid JSON") from None
    return value


def _records_param(value: t.Any, name: str) -> list[dict[str, t.Any]]:
    value = _json_param(value, name)
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        raise ValidationError(f"Parameter {name} must be a list of records")
    return value


def _default_return_handler(callback: PaymentCallback) -> JsonResponse:
    return JsonResponse(callback, status_code=200 if callback.paid else 402)


class WalleeGateway(InstancedModule, Module):
    """
    ViUR module exposing the wallee payment flows.

    Add an instance to the modules of the project:

    .. code-block:: python

        from viur.wallee.modules import WalleeGateway

        wallee = WalleeGateway(credentials=GatewayCredentials.from_env)

    The credentials can be given as instance or as factory, which is called
    on first use. By default, they are read from the environment.
    """

    def __init__(
        self,
        *,
        credentials: GatewayCredentials | t.Callable[[], GatewayCredentials] = GatewayCredentials.from_env,
        client: GatewayClient | None = None,
        token_repository: TokenRepository | None = None,
        transaction_log: TransactionLogRepository | None = None,
    ) -> None:
        """
        Create a new wallee module.

        :param credentials: Credentials of the merchant or a factory for them.
        :param client: Use this client instead of a :class:`WalleeGatewayClient`.
        :param token_repository: Where the tokens are stored, the datastore by default.
        :param transaction_log: Where the webhooks are stored, the datastore by default.
        """
        super().__init__()
        self._credentials = credentials
        self._client = client
        self._token_repository = token_repository
        self._transaction_log = transaction_log

    @functools.cached_property
    def credentials(self) -> GatewayCredentials:
        if callable(self._credentials):
            return self._credentials()
        return self._credentials

    @functools.cached_property
    def client(self) -> GatewayClient:
        return self._client or WalleeGatewayClient(self.credentials)

    @functools.cached_property
    def token_manager(self) -> TokenLifecycleManager:
        return TokenLifecycleManager(
            self.client,
            self._token_repository or DatastoreTokenRepository(),
        )

    @functools.cached_property
    def orchestrator(self) -> TransactionOrchestrator:
        return TransactionOrchestrator(
            self.client,
            self.credentials,
            token_manager=self.token_manager,
        )

    @functools.cached_property
    def reconciler(self) -> WebhookReconciler:
        return WebhookReconciler(self._transaction_log or DatastoreTransactionLogRepository())

    @property
    def property_scope(self) -> t.Any:
        """The property (tenant) of the current request, see :attr:`Hook.PROPERTY_SCOPE`"""
        return HOOK_SERVICE.dispatch(Hook.PROPERTY_SCOPE, lambda: None)()

    # --- redirect flows ------------------------------------------------------

    @exposed
    @force_post
    @error_handler
    def payment_link(
        self,
        *,
        invoice_data: str | list,
        redirect_url: str,
        order_id: str,
        currency: str | None = None,
    ) -> JsonResponse:
        """Payment link for the billing and the checkout screen.

        The customer is redirected to ``redirect_url`` after the payment,
        with the encoded result as query.
        """
        result = self.orchestrator.create_payment_link_with_callback(
            _records_param(invoice_data, "invoice_data"),
            redirect_url=redirect_url,
            order_id=order_id,
            context=OrderContext.BILLING,
            currency=currency,
        )
        return JsonResponse(result, status_code=200 if result["status"] else 400)

    @exposed
    @force_post
    @error_handler
    def webshop_payment_link(
        self,
        *,
        items: str | list,
        success_url: str,
        cancel_url: str,
        currency: str | None = None,
    ) -> JsonResponse:
        """Payment link for the web shop checkout"""
        result = self.orchestrator.create_payment_link(
            _records_param(items, "items"),
            context=OrderContext.WEBSHOP,
            success_url=success_url,
            failed_url=cancel_url,
            currency=currency,
        )
        return JsonResponse(result, status_code=200 if result["status"] else 400)

    @exposed
    @force_post
    @error_handler
    def guest_app_payment_link(
        self,
        *,
        items: str | list,
        success_url: str,
        cancel_url: str,
        currency: str | None = None,
    ) -> JsonResponse:
        """Payment link for the guest app"""
        result = self.orchestrator.create_payment_link(
            _records_param(items, "items"),
            context=OrderContext.GUEST_APP,
            success_url=success_url,
            failed_url=cancel_url,
            currency=currency,
        )
        return JsonResponse(result, status_code=200 if result["status"] else 400)

    @exposed
    def return_handler(self, *args, **kwargs) -> t.Any:
        """Return Endpoint

        Endpoint to which customers are redirected from the payment page,
        if the redirect URL of the payment link points here.
        """
        query = current.request.get().request.query_string
        try:
            callback = decode_callback(query)
        except ValidationError as exc:
            raise errors.BadRequest(str(exc))
        logger.info(f"Customer returned from payment page: {callback=}")
        if callback.paid:
            return HOOK_SERVICE.dispatch(Hook.PAYMENT_RETURN_HANDLER_SUCCESS, _default_return_handler)(callback)
        return HOOK_SERVICE.dispatch(Hook.PAYMENT_RETURN_HANDLER_ERROR, _default_return_handler)(callback)

    # --- in-person flows -----------------------------------------------------

    @exposed
    @force_post
    @access("admin")
    @error_handler
    def terminal_charge(
        self,
        *,
        amount: str,
        customer_id: int = 0,
    ) -> JsonResponse:
        """Charge an amount on the payment terminal of the cashier"""
        result = self.orchestrator.charge_on_terminal(
            amount,
            customer_id=int(customer_id or 0),
            property_scope=self.property_scope,
        )
        return JsonResponse(result, status_code=200 if result["status"] else 400)

    @exposed
    @force_post
    @access("admin")
    @error_handler
    def token_charge(
        self,
        *,
        amount: str,
        token_id: str,
        customer_id: int = 0,
    ) -> JsonResponse:
        """Charge an amount with a stored token of a customer"""
        result = self.orchestrator.charge_with_token(
            amount,
            token_id,
            customer_id=int(customer_id or 0),
        )
        return JsonResponse(result, status_code=200 if result["status"] else 400)

    # --- tokens --------------------------------------------------------------

    @exposed
    @access("admin")
    @error_handler
    def customer_tokens(
        self,
        *,
        customer_id: int,
    ) -> JsonResponse:
        """List the stored tokens of a customer"""
        return JsonResponse(self.token_manager.list_for_customer(int(customer_id), self.property_scope))

    @exposed
    @force_post
    @access("admin")
    @error_handler
    def delete_token(
        self,
        *,
        token_id: str,
    ) -> JsonResponse:
        """Revoke a stored token at wallee and delete it"""
        self.token_manager.delete(token_id, self.property_scope)
        return JsonResponse({"deleted": True, "token_id": token_id})

    # --- webhook -------------------------------------------------------------

    @exposed
    @force_post
    def webhook(self, *args, **kwargs) -> str:
        """Webhook for wallee.

        Stores every notification in the transaction log and never answers with an error.
        """
        body = current.request.get().request.body
        logger.info(f"Received request via webhook. {args=}, {kwargs=}")
        logger.debug(f"{body=}")
        if not self.reconciler.ingest(body):
            logger.warning("Webhook payload has not been stored")
        current.request.get().response.status = "204 No Content"
        return ""


WalleeGateway.html = True
WalleeGateway.json = True
