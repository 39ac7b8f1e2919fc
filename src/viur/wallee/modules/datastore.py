"""
Repositories backed by the datastore of the viur-core
"""

import typing as t

from viur import toolkit
from viur.core import db
from viur.core.skeleton import SkeletonInstance
from ..globals import WALLEE_LOGGER
from ..repositories import TokenRepository, TransactionLogRepository, fetch_all
from ..skeletons import CustomerTokenSkel, MerchantTransactionSkel
from ..types import NotFoundError, PaymentToken, PersistenceError, TokenState, WebhookEvent

logger = WALLEE_LOGGER.getChild(__name__)

FETCH_PAGE_SIZE: t.Final[int] = 100


def _scope(property_scope: t.Any) -> str:
    """Store the opaque scope as string, so it can be filtered"""
    return "" if property_scope is None else str(property_scope)


class DatastoreTokenRepository(TokenRepository):
    """Stores the tokens as :class:`CustomerTokenSkel`"""

    def __init__(self, skel_cls: t.Type[CustomerTokenSkel] = CustomerTokenSkel) -> None:
        self.skel_cls = skel_cls

    @staticmethod
    def to_token(skel: SkeletonInstance) -> PaymentToken:
        return PaymentToken(
            token_id=skel["token_id"],
            customer_id=int(skel["customer_id"] or 0),
            display_label=skel["display_label"] or "",
            image_path=skel["image_path"] or None,
            property_scope=skel["property_scope"] or None,
            state=TokenState(skel["state"]) if skel["state"] else TokenState.ACTIVE,
            created_at=skel["creationdate"],
            updated_at=skel["changedate"],
        )

    def _query(self, property_scope: t.Any) -> db.Query:
        return self.skel_cls().all().filter("property_scope =", _scope(property_scope))

    def _get_skel(self, token_id: str, property_scope: t.Any) -> SkeletonInstance | None:
        return self._query(property_scope).filter("token_id =", str(token_id)).getSkel()

    def save(self, token: PaymentToken) -> PaymentToken:
        skel = self.skel_cls()
        skel["token_id"] = token.token_id
        skel["customer_id"] = token.customer_id
        skel["display_label"] = token.display_label
        skel["image_path"] = token.image_path
        skel["property_scope"] = _scope(token.property_scope)
        skel["state"] = token.state
        try:
            skel.write()
        except Exception as exc:
            logger.exception(f"Cannot write {skel=}")
            raise PersistenceError(f"Cannot store token {token.token_id}: {exc}") from exc
        return self.to_token(skel)

    def get(self, token_id: str, property_scope: t.Any) -> PaymentToken | None:
        if not (skel := self._get_skel(token_id, property_scope)):
            return None
        return self.to_token(skel)

    def find(
        self,
        *,
        property_scope: t.Any,
        customer_id: int | None = None,
        state: TokenState | None = None,
    ) -> list[PaymentToken]:
        query = self._query(property_scope)
        if customer_id is not None:
            query = query.filter("customer_id =", customer_id)
        if state is not None:
            query = query.filter("state =", state.value)
        return [self.to_token(skel) for skel in fetch_all(query, FETCH_PAGE_SIZE)]

    def set_state(self, token_id: str, property_scope: t.Any, state: TokenState) -> PaymentToken:
        if not (skel := self._get_skel(token_id, property_scope)):
            raise NotFoundError(f"Token {token_id} not found")
        try:
            skel = toolkit.set_status(
                key=skel["key"],
                skel=skel,
                values={"state": state},
            )
        except Exception as exc:
            raise PersistenceError(f"Cannot update token {token_id}: {exc}") from exc
        return self.to_token(skel)

    def delete(self, token_id: str, property_scope: t.Any) -> bool:
        if not (skel := self._get_skel(token_id, property_scope)):
            return False
        try:
            skel.delete()
        except Exception as exc:
            raise PersistenceError(f"Cannot delete token {token_id}: {exc}") from exc
        return True


class DatastoreTransactionLogRepository(TransactionLogRepository):
    """Appends the webhooks as :class:`MerchantTransactionSkel`"""

    def __init__(self, skel_cls: t.Type[MerchantTransactionSkel] = MerchantTransactionSkel) -> None:
        self.skel_cls = skel_cls

    def append(self, event: WebhookEvent) -> None:
        skel = self.skel_cls()
        skel["merchant_type"] = event.merchant_type
        skel["payload"] = event.payload
        skel["received_at"] = event.received_at
        try:
            skel.write()
        except Exception as exc:
            raise PersistenceError(f"Cannot append webhook: {exc}") from exc
