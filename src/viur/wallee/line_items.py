import decimal
import typing as t
import uuid

from . import constants
from .globals import WALLEE_LOGGER
from .types import LineItem, LineItemKind, OrderContext, ValidationError

logger = WALLEE_LOGGER.getChild(__name__)

TWO_PLACES: t.Final[decimal.Decimal] = decimal.Decimal("0.01")


def format_amount(value: t.Any) -> str:
    """Format an amount with exactly two decimals.

    Rounds half up, so ``19.905`` becomes ``"19.91"``.

    :raises ValidationError: If the value is missing or not numeric.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Amount must be numeric, got {value!r}")
    try:
        amount = decimal.Decimal(str(value).strip())
    except decimal.InvalidOperation:
        raise ValidationError(f"Amount must be numeric, got {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(f"Amount must be finite, got {value!r}")
    try:
        return str(amount.quantize(TWO_PLACES, rounding=decimal.ROUND_HALF_UP))
    except decimal.InvalidOperation:
        raise ValidationError(f"Amount out of range, got {value!r}") from None


def _quantity(record: t.Mapping[str, t.Any]) -> int:
    if (quantity := record.get("quantity")) is None:
        return 1
    try:
        quantity_int = int(quantity)
    except (TypeError, ValueError):
        raise ValidationError(f"Quantity must be an integer, got {quantity!r}") from None
    if quantity_int != quantity and str(quantity_int) != str(quantity).strip():
        raise ValidationError(f"Quantity must be an integer, got {quantity!r}")
    if quantity_int < 1:
        raise ValidationError(f"Quantity must be positive, got {quantity!r}")
    return quantity_int


class LineItemBuilder:
    """
    Turns order records of the different order sources into line items.

    The fields holding name and amount of a record depend on the
    :class:`OrderContext`. A batch is built completely or not at all.
    """

    def __init__(
        self,
        *,
        fallback_name: str = constants.FALLBACK_ITEM_NAME,
        unique_id_factory: t.Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self.fallback_name = fallback_name
        self.unique_id_factory = unique_id_factory

    def build(
        self,
        records: t.Iterable[t.Mapping[str, t.Any]],
        context: OrderContext | str,
    ) -> list[LineItem]:
        """Build one line item per record, in the order of the records.

        :param records: Raw order records (e.g. products of an invoice).
        :param context: The source of the records, defines the field mapping.
        :raises ValidationError: If any record has no valid amount
            (or an invalid quantity) or no records are given.
        """
        context = OrderContext.parse(context)
        records = list(records)
        if not records:
            raise ValidationError("At least one order record is required")

        line_items = []
        for idx, record in enumerate(records, start=1):
            if not isinstance(record, t.Mapping):
                raise ValidationError(f"Record #{idx} is not a mapping: {record!r}")
            if context.amount_field not in record:
                raise ValidationError(f"Record #{idx} has no field {context.amount_field!r} ({context=})")
            try:
                amount = format_amount(record[context.amount_field])
                quantity = _quantity(record)
            except ValidationError as exc:
                raise ValidationError(f"Record #{idx}: {exc}") from exc
            line_items.append(LineItem(
                unique_id=self.unique_id_factory(),
                name=str(record.get(context.name_field) or self.fallback_name),
                amount=amount,
                quantity=quantity,
                type=LineItemKind.PRODUCT,
            ))
        logger.debug(f"Built {len(line_items)} line items for {context=}")
        return line_items

    def charge_record(
        self,
        amount: t.Any,
        name: str = constants.RESERVATION_ITEM_NAME,
    ) -> dict[str, t.Any]:
        """Record for a single charge, as used by the cashier and the saved-token flow.

        Use it with :attr:`OrderContext.CASHIER`.
        """
        return {
            OrderContext.CASHIER.name_field: name,
            OrderContext.CASHIER.amount_field: format_amount(amount),
        }
