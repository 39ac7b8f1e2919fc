import json
import typing as t

from . import constants
from .globals import WALLEE_LOGGER
from .repositories import TransactionLogRepository
from .services import EVENT_SERVICE, Event
from .types import WebhookEvent

logger = WALLEE_LOGGER.getChild(__name__)


def serialize_payload(payload: t.Any) -> str:
    """Serialize a webhook body; strings and bytes are stored verbatim."""
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, default=str)


def extract_entity_id(payload: t.Any) -> t.Any:
    """Get the ``entityId`` of a wallee webhook body, if there is one."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            return None
    if isinstance(payload, t.Mapping):
        return payload.get("entityId")
    return None


class WebhookReconciler:
    """
    Durable inbox for the webhook notifications of the gateway.

    Every payload is appended to the transaction log, nothing is
    interpreted or deduplicated here.
    """

    def __init__(
        self,
        repository: TransactionLogRepository,
        *,
        merchant_type: str = constants.MERCHANT_TYPE,
    ) -> None:
        self.repository = repository
        self.merchant_type = merchant_type

    def ingest(self, raw_payload: t.Any) -> bool:
        """Append a payload to the transaction log.

        Never raises: the gateway would retry the notification
        over and over if the endpoint answered with an error.

        :return: ``True`` if the payload has been stored.
        """
        try:
            event = WebhookEvent(
                merchant_type=self.merchant_type,
                payload=serialize_payload(raw_payload),
            )
            self.repository.append(event)
        except Exception as exc:
            logger.exception(f"Cannot store webhook payload {raw_payload!r}: {exc}")
            return False
        logger.info(f"Stored webhook for entity {extract_entity_id(raw_payload)!r}")
        EVENT_SERVICE.call(Event.WEBHOOK_RECEIVED, event=event)
        return True
