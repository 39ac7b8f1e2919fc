"""
ViUR-wallee – wallee payment gateway integration for ViUR projects.

This package creates wallee transactions from the orders of the different
order sources of a booking platform (billing, web shop, cashier, guest app),
charges them on the hosted payment page, on a payment terminal or with a
stored token, manages the stored tokens and keeps a log of the webhooks.

Components included:

-   `line_items` / `payload`: Build the transaction request from order records.
-   `client`: The adapter through which every call to wallee passes.
-   `orchestrator`: The payment flows.
-   `tokens`: Create, list and delete stored payment tokens.
-   `webhook`: Append the webhook notifications to the transaction log.
-   `modules` / `skeletons`: The ViUR module exposing the flows and the
    datastore implementation of the repositories.

.. note::
    The ViUR parts are not imported here; import :mod:`viur.wallee.modules`
    in the project, after the viur-core has been configured.
"""

from .client import GatewayClient, WalleeGatewayClient
from .config import GatewayCredentials
from .globals import WALLEE_LOGGER
from .line_items import LineItemBuilder, format_amount
from .orchestrator import TransactionOrchestrator
from .payload import TransactionPayloadBuilder, decode_callback, encode_callback_urls
from .repositories import TokenRepository, TransactionLogRepository
from .services import *
from .tokens import TokenLifecycleManager
from .types import *
from .webhook import WebhookReconciler
