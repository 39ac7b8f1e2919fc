"""
Enums used by the payment flows and in the SelectBones of the skeletons
"""

import enum
import typing as t

from .exceptions import ValidationError


class OrderContext(enum.Enum):
    """Origin of the order records a transaction is built from.

    Each context defines which fields of a raw record hold the name
    and the amount of a line item, see :attr:`name_field` and :attr:`amount_field`.
    """

    BILLING = "billing"
    """Billing / checkout screen"""

    WEBSHOP = "webshop"
    """Web shop checkout"""

    CASHIER = "cashier"
    """Cashier screen, paid in person on a terminal"""

    GUEST_APP = "guest-app"
    """Guest app API"""

    @property
    def name_field(self) -> str:
        return _FIELD_MAPPING[self][0]

    @property
    def amount_field(self) -> str:
        return _FIELD_MAPPING[self][1]

    @classmethod
    def parse(cls, value: t.Union["OrderContext", str]) -> "OrderContext":
        """Get the context for a value, raise a :class:`ValidationError` for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            try:
                return cls[str(value).upper().replace("-", "_")]
            except KeyError:
                raise ValidationError(f"Unsupported order context {value!r}") from None


_FIELD_MAPPING: t.Final[dict[OrderContext, tuple[str, str]]] = {
    OrderContext.BILLING: ("productName", "paidAmount"),
    OrderContext.WEBSHOP: ("treatment", "price"),
    OrderContext.CASHIER: ("name", "price"),
    OrderContext.GUEST_APP: ("name", "price"),
}
"""(name field, amount field) per context"""


class LineItemKind(enum.Enum):
    """Type of line item. wallee knows more, but we only sell products."""
    PRODUCT = "PRODUCT"


class TransactionState(enum.Enum):
    """States of a wallee transaction.

    The gateway may report states not listed here,
    therefore :class:`viur.wallee.types.Transaction` keeps the state as plain string.
    """
    CREATE = "CREATE"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    FAILED = "FAILED"
    AUTHORIZED = "AUTHORIZED"
    VOIDED = "VOIDED"
    COMPLETED = "COMPLETED"
    FULFILL = "FULFILL"
    DECLINED = "DECLINED"


class TokenState(enum.Enum):
    """Local state of a stored payment token"""

    ACTIVE = "active"
    """Token can be used for charges"""

    PENDING_DELETE = "pending_delete"
    """Deletion started, the token might already be revoked at the gateway"""
