"""Shared fakes for the gateway and the local store.

The tests never talk to wallee or to a datastore; the fakes record
every call so the tests can assert the order of the gateway calls.
"""

import dataclasses
import typing as t

import pytest

from viur.wallee import (
    GatewayClient,
    GatewayCredentials,
    TokenRepository,
    TransactionLogRepository,
)
from viur.wallee.services import EVENT_SERVICE, HOOK_SERVICE
from viur.wallee.types import (
    GatewayError,
    NotFoundError,
    PaymentToken,
    PersistenceError,
    TokenState,
    TokenVersionDetails,
    Transaction,
    TransactionRequest,
    WebhookEvent,
)


class FakeGatewayClient(GatewayClient):
    """Records calls; ``fail`` maps an operation name to the error it raises."""

    def __init__(self, *, terminal_state: str = "AUTHORIZED", process_state: str = "COMPLETED") -> None:
        self.terminal_state = terminal_state
        self.process_state = process_state
        self.calls: list[tuple[str, tuple]] = []
        self.requests: list[TransactionRequest] = []
        self.fail: dict[str, Exception] = {}
        self.next_transaction_id = 1000
        self.next_token_id = 5000

    def _call(self, name: str, *args: t.Any) -> None:
        self.calls.append((name, args))
        if name in self.fail:
            raise self.fail[name]

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def create_transaction(self, request: TransactionRequest) -> Transaction:
        self._call("create_transaction", request)
        self.requests.append(request)
        self.next_transaction_id += 1
        return Transaction(id=self.next_transaction_id, state="PENDING", request=request)

    def get_payment_page_url(self, transaction_id: int) -> str:
        self._call("get_payment_page_url", transaction_id)
        return f"https://app-wallee.com/s/1/payment/transaction/pay/{transaction_id}"

    def trigger_on_terminal(self, transaction_id: int, terminal_id: str) -> Transaction:
        self._call("trigger_on_terminal", transaction_id, terminal_id)
        return Transaction(id=transaction_id, state=self.terminal_state)

    def create_token(self, transaction_id: int) -> str:
        self._call("create_token", transaction_id)
        self.next_token_id += 1
        return str(self.next_token_id)

    def get_active_token_version(self, token_id: str) -> TokenVersionDetails:
        self._call("get_active_token_version", token_id)
        return TokenVersionDetails(display_label="VISA •••• 4242", image_path="resource/visa.svg")

    def process_with_token(self, transaction_id: int) -> Transaction:
        self._call("process_with_token", transaction_id)
        return Transaction(id=transaction_id, state=self.process_state)

    def delete_token(self, token_id: str) -> None:
        self._call("delete_token", token_id)


class MemoryTokenRepository(TokenRepository):
    def __init__(self) -> None:
        self.tokens: dict[tuple[str, t.Any], PaymentToken] = {}
        self.fail_delete = False
        self.fail_save = False

    def save(self, token: PaymentToken) -> PaymentToken:
        if self.fail_save:
            raise PersistenceError("disk full")
        self.tokens[(token.token_id, token.property_scope)] = token
        return token

    def get(self, token_id: str, property_scope: t.Any) -> PaymentToken | None:
        return self.tokens.get((token_id, property_scope))

    def find(
        self,
        *,
        property_scope: t.Any,
        customer_id: int | None = None,
        state: TokenState | None = None,
    ) -> list[PaymentToken]:
        return [
            token for (_, scope), token in self.tokens.items()
            if scope == property_scope
            and (customer_id is None or token.customer_id == customer_id)
            and (state is None or token.state is state)
        ]

    def set_state(self, token_id: str, property_scope: t.Any, state: TokenState) -> PaymentToken:
        if (token := self.get(token_id, property_scope)) is None:
            raise NotFoundError(token_id)
        token = dataclasses.replace(token, state=state)
        self.tokens[(token_id, property_scope)] = token
        return token

    def delete(self, token_id: str, property_scope: t.Any) -> bool:
        if self.fail_delete:
            raise PersistenceError("connection lost")
        return self.tokens.pop((token_id, property_scope), None) is not None


class MemoryTransactionLog(TransactionLogRepository):
    def __init__(self) -> None:
        self.events: list[WebhookEvent] = []
        self.fail = False

    def append(self, event: WebhookEvent) -> None:
        if self.fail:
            raise PersistenceError("log unavailable")
        self.events.append(event)


@pytest.fixture(autouse=True)
def clean_services() -> t.Iterator[None]:
    """Observers and customizations are class level, don't leak them between tests"""
    yield
    EVENT_SERVICE.observer.clear()
    HOOK_SERVICE.customizations.clear()


@pytest.fixture
def credentials() -> GatewayCredentials:
    return GatewayCredentials(user_id=512, space_id=4711, secret="c2VjcmV0LWtleQ==", terminal="T-123")


@pytest.fixture
def gateway() -> FakeGatewayClient:
    return FakeGatewayClient()


@pytest.fixture
def token_repository() -> MemoryTokenRepository:
    return MemoryTokenRepository()


@pytest.fixture
def transaction_log() -> MemoryTransactionLog:
    return MemoryTransactionLog()


@pytest.fixture
def gateway_error() -> GatewayError:
    return GatewayError("Service unavailable", operation="create_transaction", status_code=503)
