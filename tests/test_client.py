import json
from unittest import mock

import pytest
from wallee.models import LineItemType
from wallee.rest import ApiException

from viur.wallee import LineItemBuilder, TransactionPayloadBuilder, WalleeGatewayClient
from viur.wallee.client import log_wallee_error
from viur.wallee.types import GatewayError, TokenVersionDetails, Transaction


@pytest.fixture
def sdk():
    """Replace the SDK services, the tests never reach the network"""
    names = (
        "Configuration",
        "TransactionServiceApi",
        "TransactionPaymentPageServiceApi",
        "PaymentTerminalTillServiceApi",
        "TokenServiceApi",
        "TokenVersionServiceApi",
    )
    with mock.patch.multiple("viur.wallee.client", **{name: mock.DEFAULT for name in names}) as mocks:
        yield mocks


@pytest.fixture
def client(sdk, credentials):
    return WalleeGatewayClient(credentials)


@pytest.fixture
def request_():
    line_items = LineItemBuilder().build([{"name": "Room", "price": "19.9"}], "cashier")
    return TransactionPayloadBuilder().build(line_items, success_url="https://x/ok", failed_url="https://x/nok")


def _api_exception(status: int, body: str | None = None) -> ApiException:
    err = ApiException(status=status, reason="Error")
    err.body = body
    return err


def test_configuration_from_credentials(sdk, credentials):
    credentials.request_timeout = 30.0
    WalleeGatewayClient(credentials)
    sdk["Configuration"].assert_called_once_with(
        user_id=512,
        api_secret="c2VjcmV0LWtleQ==",
        request_timeout=30.0,
    )


def test_create_transaction(client, request_):
    client.transaction_service.create.return_value = mock.Mock(id=1001, state=mock.Mock(value="PENDING"))

    transaction = client.create_transaction(request_)

    assert transaction == Transaction(id=1001, state="PENDING", request=request_)
    kwargs = client.transaction_service.create.call_args.kwargs
    assert kwargs["space_id"] == 4711
    model = kwargs["transaction"]
    assert model.currency == "CHF"
    assert model.success_url == "https://x/ok"
    assert model.auto_confirmation_enabled is True
    line_item, = model.line_items
    assert line_item.name == "Room"
    assert line_item.amount_including_tax == 19.9
    assert line_item.type == LineItemType.PRODUCT


def test_to_transaction_create_with_token():
    line_items = LineItemBuilder().build([{"name": "Room", "price": 1}], "cashier")
    model = WalleeGatewayClient.to_transaction_create(
        TransactionPayloadBuilder().build(line_items, token="5001")
    )
    assert model.token == 5001


def test_payment_page_url(client):
    client.payment_page_service.payment_page_url.return_value = "https://pay/1001"
    assert client.get_payment_page_url(1001) == "https://pay/1001"
    client.payment_page_service.payment_page_url.assert_called_once_with(space_id=4711, id=1001)


def test_trigger_on_terminal(client):
    client.terminal_till_service.perform_transaction_by_identifier.return_value = mock.Mock(
        id=1001, state="AUTHORIZED",
    )
    assert client.trigger_on_terminal(1001, "T-123") == Transaction(id=1001, state="AUTHORIZED")
    client.terminal_till_service.perform_transaction_by_identifier.assert_called_once_with(
        space_id=4711, transaction_id=1001, terminal_identifier="T-123",
    )


def test_create_token_returns_string(client):
    client.token_service.create_token.return_value = mock.Mock(id=5001)
    assert client.create_token(1001) == "5001"


def test_active_token_version(client):
    client.token_version_service.active_version.return_value = mock.Mock(
        payment_connector_configuration=mock.Mock(image_path="resource/visa.svg"),
    )
    client.token_version_service.active_version.return_value.name = "VISA •••• 4242"
    assert client.get_active_token_version("5001") == TokenVersionDetails("VISA •••• 4242", "resource/visa.svg")
    client.token_version_service.active_version.assert_called_once_with(space_id=4711, id=5001)


def test_process_with_token(client):
    client.token_service.process_transaction.return_value = mock.Mock(id=1001, state="COMPLETED")
    assert client.process_with_token(1001).state == "COMPLETED"


def test_delete_token(client):
    client.token_service.delete.return_value = None
    assert client.delete_token("5001") is None
    client.token_service.delete.assert_called_once_with(space_id=4711, id=5001)


def test_api_exception_becomes_gateway_error(client):
    client.token_service.delete.side_effect = _api_exception(
        404, json.dumps({"id": "abc", "message": "Entity not found"}),
    )
    with pytest.raises(GatewayError) as exc_info:
        client.delete_token("5001")
    assert exc_info.value.status_code == 404
    assert exc_info.value.operation == "delete_token"
    assert exc_info.value.message == "Entity not found"
    assert isinstance(exc_info.value.__cause__, ApiException)


def test_api_exception_with_plain_body(client, request_):
    client.transaction_service.create.side_effect = _api_exception(500, "Internal Server Error")
    with pytest.raises(GatewayError, match="create_transaction failed: Internal Server Error"):
        client.create_transaction(request_)


def test_network_error_becomes_gateway_error(client):
    client.token_service.create_token.side_effect = ConnectionError("connection reset")
    with pytest.raises(GatewayError) as exc_info:
        client.create_token(1001)
    assert exc_info.value.status_code is None
    assert exc_info.value.message == "connection reset"


def test_log_wallee_error_keeps_gateway_errors():
    error = GatewayError("already mapped", operation="x")

    @log_wallee_error
    def failing():
        raise error

    with pytest.raises(GatewayError) as exc_info:
        failing()
    assert exc_info.value is error
