import dataclasses
import datetime
import typing as t

from .enums import LineItemKind, TokenState


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclasses.dataclass(frozen=True)
class LineItem:
    """One priced entry of a transaction"""

    unique_id: str
    """Opaque identifier, unique within the transaction"""

    name: str

    amount: str
    """Amount including tax, always formatted with two decimals"""

    quantity: int = 1

    type: LineItemKind = LineItemKind.PRODUCT


@dataclasses.dataclass(frozen=True)
class TransactionRequest:
    """Everything needed to create a transaction at the gateway"""

    currency: str
    line_items: tuple[LineItem, ...]
    auto_confirmation_enabled: bool = True
    success_url: str | None = None
    failed_url: str | None = None
    token: str | None = None
    """Id of a stored token; the transaction is charged without customer interaction"""


@dataclasses.dataclass(frozen=True)
class Transaction:
    """A transaction as reported by the gateway"""

    id: int
    state: str
    request: TransactionRequest | None = None

    @property
    def is_successful(self) -> bool:
        from ..constants import SUCCESS_STATES
        return self.state in SUCCESS_STATES


@dataclasses.dataclass(frozen=True)
class TokenVersionDetails:
    """Presentable details of the active version of a token"""

    display_label: str
    """Name of the token version, e.g. the masked card number"""

    image_path: str | None = None
    """Path of the image of the payment method (card brand)"""


@dataclasses.dataclass
class PaymentToken:
    """A stored, reusable payment instrument of a customer"""

    token_id: str
    customer_id: int
    """Owner, ``0`` means anonymous / unassigned"""
    display_label: str
    image_path: str | None = None
    property_scope: t.Any = None
    state: TokenState = TokenState.ACTIVE
    created_at: datetime.datetime = dataclasses.field(default_factory=_utc_now)
    updated_at: datetime.datetime = dataclasses.field(default_factory=_utc_now)

    def as_dict(self) -> dict[str, t.Any]:
        return {
            "token_id": self.token_id,
            "customer_id": self.customer_id,
            "display_label": self.display_label,
            "image_path": self.image_path,
            "property_scope": self.property_scope,
            "state": self.state.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclasses.dataclass(frozen=True)
class WebhookEvent:
    """A webhook notification as stored in the transaction log. Never updated."""

    merchant_type: str
    payload: str
    received_at: datetime.datetime = dataclasses.field(default_factory=_utc_now)


@dataclasses.dataclass(frozen=True)
class PaymentCallback:
    """Decoded query of a redirect from the payment page"""

    paid: bool
    paid_id: str
