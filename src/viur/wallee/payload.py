import base64
import binascii
import typing as t
import urllib.parse

from . import constants
from .globals import WALLEE_LOGGER
from .types import LineItem, PaymentCallback, TransactionRequest, ValidationError

logger = WALLEE_LOGGER.getChild(__name__)


class TransactionPayloadBuilder:
    """Assembles the request to create a transaction. No I/O."""

    def __init__(self, *, default_currency: str = constants.DEFAULT_CURRENCY) -> None:
        self.default_currency = default_currency

    def build(
        self,
        line_items: t.Sequence[LineItem],
        currency: str | None = None,
        success_url: str | None = None,
        failed_url: str | None = None,
        token: str | None = None,
    ) -> TransactionRequest:
        """
        Build a transaction request with auto confirmation enabled.

        :param line_items: The line items, at least one.
        :param currency: ISO 4217 code, the default currency if ``None``.
        :param success_url: Redirect target after a successful payment on the payment page.
        :param failed_url: Redirect target after a failed payment on the payment page.
        :param token: Id of a stored token. Such a transaction is processed
            without payment page, so no redirect URLs are needed.
        """
        if not line_items:
            raise ValidationError("A transaction needs at least one line item")
        currency = (currency or self.default_currency).strip().upper()
        if not currency:
            raise ValidationError("Currency must not be empty")
        if bool(success_url) != bool(failed_url):
            raise ValidationError("success_url and failed_url must be given together")
        request = TransactionRequest(
            currency=currency,
            line_items=tuple(line_items),
            auto_confirmation_enabled=True,
            success_url=success_url or None,
            failed_url=failed_url or None,
            token=str(token) if token else None,
        )
        logger.debug(f"{request=}")
        return request


def _encode_query(paid: bool, paid_id: t.Any) -> str:
    plain = constants.CALLBACK_TEMPLATE.format(flag=int(paid), paid_id=paid_id)
    return base64.b64encode(plain.encode("utf-8")).decode("ascii")


def encode_callback_urls(redirect_url: str, paid_id: t.Any) -> tuple[str, str]:
    """Create the success and the failed URL for the payment page.

    The query of each URL is the base64 encoded string
    ``payment_callback=<1|0>&paid_id=<paid_id>``.
    Consumers of the redirect rely on this exact format.

    :return: Tuple of (success_url, failed_url)
    """
    if not redirect_url:
        raise ValidationError("redirect_url must not be empty")
    if paid_id is None or paid_id == "":
        raise ValidationError("paid_id must not be empty")
    return (
        f"{redirect_url}?{_encode_query(True, paid_id)}",
        f"{redirect_url}?{_encode_query(False, paid_id)}",
    )


def decode_callback(query: str) -> PaymentCallback:
    """Decode the query of a redirect created by :func:`encode_callback_urls`.

    Accepts the bare query or a full URL.

    :raises ValidationError: If the query is not a valid callback.
    """
    if "?" in query:
        query = query.split("?", 1)[1]
    query = urllib.parse.unquote(query.strip())
    try:
        plain = base64.b64decode(query, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise ValidationError(f"Invalid callback query {query!r}") from None
    params = urllib.parse.parse_qs(plain, keep_blank_values=True)
    flag = params.get("payment_callback", [None])[0]
    paid_id = params.get("paid_id", [""])[0]
    if flag not in ("0", "1") or not paid_id:
        raise ValidationError(f"Invalid callback {plain!r}")
    return PaymentCallback(paid=flag == "1", paid_id=paid_id)
