import pytest

from viur.wallee import LineItemBuilder, format_amount
from viur.wallee.types import LineItemKind, OrderContext, ValidationError


@pytest.fixture
def builder() -> LineItemBuilder:
    counter = iter(range(1, 100))
    return LineItemBuilder(unique_id_factory=lambda: f"id-{next(counter)}")


@pytest.mark.parametrize(
    "context, record",
    [
        (OrderContext.BILLING, {"productName": "Room 12", "paidAmount": 120}),
        (OrderContext.WEBSHOP, {"treatment": "Room 12", "price": "120"}),
        (OrderContext.CASHIER, {"name": "Room 12", "price": 120.0}),
        (OrderContext.GUEST_APP, {"name": "Room 12", "price": "120.00"}),
    ],
)
def test_context_field_mapping(builder, context, record):
    line_item, = builder.build([record], context)
    assert line_item.name == "Room 12"
    assert line_item.amount == "120.00"
    assert line_item.quantity == 1
    assert line_item.type is LineItemKind.PRODUCT


def test_order_is_preserved_and_ids_are_unique(builder):
    records = [{"name": f"Item {i}", "price": i} for i in range(1, 6)]
    line_items = builder.build(records, OrderContext.CASHIER)
    assert [item.name for item in line_items] == [f"Item {i}" for i in range(1, 6)]
    assert len({item.unique_id for item in line_items}) == 5


def test_missing_name_uses_fallback(builder):
    line_item, = builder.build([{"price": 5}], OrderContext.WEBSHOP)
    assert line_item.name == "Web Shop Order"


def test_context_from_string(builder):
    line_item, = builder.build([{"productName": "Spa", "paidAmount": "9.5"}], "billing")
    assert line_item.amount == "9.50"
    line_item, = builder.build([{"name": "Spa", "price": 1}], "guest-app")
    assert line_item.name == "Spa"


def test_unknown_context_is_rejected(builder):
    with pytest.raises(ValidationError, match="Unsupported order context"):
        builder.build([{"name": "x", "price": 1}], "pos")


def test_missing_amount_rejects_whole_batch(builder):
    records = [
        {"name": "valid", "price": 10},
        {"name": "no amount"},
    ]
    with pytest.raises(ValidationError, match="Record #2"):
        builder.build(records, OrderContext.CASHIER)


def test_amount_of_other_context_does_not_count(builder):
    # price is the amount field of the cashier, not of the billing screen
    with pytest.raises(ValidationError, match="paidAmount"):
        builder.build([{"productName": "Room", "price": 10}], OrderContext.BILLING)


@pytest.mark.parametrize("amount", ["abc", None, "", "NaN", True])
def test_non_numeric_amount_is_rejected(builder, amount):
    with pytest.raises(ValidationError):
        builder.build([{"name": "x", "price": amount}], OrderContext.CASHIER)


def test_empty_batch_is_rejected(builder):
    with pytest.raises(ValidationError):
        builder.build([], OrderContext.CASHIER)


def test_explicit_quantity(builder):
    line_item, = builder.build([{"name": "Towel", "price": 3, "quantity": "4"}], OrderContext.CASHIER)
    assert line_item.quantity == 4


@pytest.mark.parametrize("quantity", [0, -1, 1.5, "two"])
def test_invalid_quantity_is_rejected(builder, quantity):
    with pytest.raises(ValidationError):
        builder.build([{"name": "Towel", "price": 3, "quantity": quantity}], OrderContext.CASHIER)


@pytest.mark.parametrize(
    "value, expected",
    [
        (19.9, "19.90"),
        ("19.90", "19.90"),
        (7, "7.00"),
        ("0.005", "0.01"),
        ("19.904", "19.90"),
        (" 12.5 ", "12.50"),
    ],
)
def test_format_amount(value, expected):
    assert format_amount(value) == expected


def test_charge_record(builder):
    record = builder.charge_record(19.9)
    assert record == {"name": "Reservation Billing Transaction", "price": "19.90"}


@pytest.mark.parametrize("amount", ["1e30", "123456789012345678901234567"])
def test_amount_out_of_range_is_rejected(builder, amount):
    with pytest.raises(ValidationError, match="out of range"):
        builder.build([{"name": "x", "price": amount}], OrderContext.CASHIER)
