import json

import pytest

from viur.wallee import WebhookReconciler
from viur.wallee.services import EVENT_SERVICE, Event
from viur.wallee.webhook import extract_entity_id, serialize_payload

PAYLOAD = {
    "eventId": 889175,
    "entityId": 1001,
    "listenerEntityId": 1472041829003,
    "listenerEntityTechnicalName": "Transaction",
    "spaceId": 4711,
    "webhookListenerId": 12,
    "timestamp": "2024-05-13T09:31:27+0000",
}


@pytest.fixture
def reconciler(transaction_log):
    return WebhookReconciler(transaction_log)


def test_ingest(reconciler, transaction_log):
    assert reconciler.ingest(PAYLOAD) is True
    event, = transaction_log.events
    assert event.merchant_type == "wallee"
    assert json.loads(event.payload) == PAYLOAD
    assert event.received_at.tzinfo is not None


def test_identical_payloads_are_appended_twice(reconciler, transaction_log):
    reconciler.ingest(PAYLOAD)
    reconciler.ingest(PAYLOAD)
    assert len(transaction_log.events) == 2
    assert transaction_log.events[0].payload == transaction_log.events[1].payload


def test_raw_body_is_stored_verbatim(reconciler, transaction_log):
    body = '{"entityId":1001,  "state" : "FULFILL"}'
    reconciler.ingest(body)
    reconciler.ingest(body.encode())
    assert [event.payload for event in transaction_log.events] == [body, body]


def test_store_failure_returns_false(reconciler, transaction_log):
    transaction_log.fail = True
    assert reconciler.ingest(PAYLOAD) is False
    assert transaction_log.events == []


def test_event_only_after_success(reconciler, transaction_log):
    received = []
    EVENT_SERVICE.register(Event.WEBHOOK_RECEIVED, lambda event: received.append(event))
    transaction_log.fail = True
    reconciler.ingest(PAYLOAD)
    transaction_log.fail = False
    reconciler.ingest(PAYLOAD)
    assert received == transaction_log.events


def test_custom_merchant_type(transaction_log):
    WebhookReconciler(transaction_log, merchant_type="wallee-test").ingest("{}")
    assert transaction_log.events[0].merchant_type == "wallee-test"


def test_serialize_payload():
    assert serialize_payload("a b") == "a b"
    assert serialize_payload(b"\xc3\xa4") == "ä"
    assert json.loads(serialize_payload({"a": [1, 2]})) == {"a": [1, 2]}


@pytest.mark.parametrize(
    "payload, expected",
    [
        (PAYLOAD, 1001),
        (json.dumps(PAYLOAD), 1001),
        (json.dumps(PAYLOAD).encode(), 1001),
        ("no json", None),
        ([1, 2], None),
        ({}, None),
    ],
)
def test_extract_entity_id(payload, expected):
    assert extract_entity_id(payload) == expected


def test_json_body_is_not_reformatted(reconciler, transaction_log):
    body = b'{"spaceId": 4711,\n "entityId": 1001, "amount": 1.50}'
    assert reconciler.ingest(body) is True
    assert transaction_log.events[0].payload == body.decode()
