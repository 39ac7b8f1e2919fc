import typing as t

from .types.enums import TransactionState

DEFAULT_CURRENCY: t.Final[str] = "CHF"
"""Currency used if the caller does not provide one"""

MERCHANT_TYPE: t.Final[str] = "wallee"
"""Discriminator of rows in the transaction log written by this package"""

RESERVATION_ITEM_NAME: t.Final[str] = "Reservation Billing Transaction"
"""Line item name of cashier (terminal) and saved-token charges"""

FALLBACK_ITEM_NAME: t.Final[str] = "Web Shop Order"
"""Line item name if a record has no value in the name field of its context"""

SUCCESS_STATES: t.Final[frozenset[str]] = frozenset({
    TransactionState.COMPLETED.value,
    TransactionState.FULFILL.value,
    TransactionState.AUTHORIZED.value,
})
"""Transaction states after which the payment instrument gets tokenized"""

FAILURE_STATES: t.Final[frozenset[str]] = frozenset({
    TransactionState.FAILED.value,
    TransactionState.DECLINED.value,
    TransactionState.VOIDED.value,
})
"""Transaction states which make a synchronous flow report ``status=False``"""

CALLBACK_TEMPLATE: t.Final[str] = "payment_callback={flag}&paid_id={paid_id}"
"""Plain text of the base64 encoded query appended to redirect URLs"""

ENV_USER_ID: t.Final[str] = "WALLEE_MERCHANT_USER_ID"
ENV_SPACE_ID: t.Final[str] = "WALLEE_MERCHANT_SPACE_ID"
ENV_SECRET: t.Final[str] = "WALLEE_MERCHANT_SECRET"
ENV_TERMINAL: t.Final[str] = "WALLEE_TERMINAL"
ENV_REQUEST_TIMEOUT: t.Final[str] = "WALLEE_REQUEST_TIMEOUT"
