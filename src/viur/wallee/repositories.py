"""
Interfaces of the local store

The payment flows only need a few per-row operations. Implementations
raise :class:`viur.wallee.types.PersistenceError` on storage failures.
The ViUR datastore implementations live in :mod:`viur.wallee.modules.datastore`.
"""

import abc
import typing as t

from .types import PaymentToken, TokenState, WebhookEvent


class TokenRepository(abc.ABC):
    """Stored payment tokens of the customers"""

    @abc.abstractmethod
    def save(self, token: PaymentToken) -> PaymentToken:
        ...

    @abc.abstractmethod
    def get(self, token_id: str, property_scope: t.Any) -> PaymentToken | None:
        ...

    @abc.abstractmethod
    def find(
        self,
        *,
        property_scope: t.Any,
        customer_id: int | None = None,
        state: TokenState | None = None,
    ) -> list[PaymentToken]:
        """Get all tokens of a property, optionally filtered by owner and state"""
        ...

    @abc.abstractmethod
    def set_state(self, token_id: str, property_scope: t.Any, state: TokenState) -> PaymentToken:
        """Change the state of a token

        :raises NotFoundError: If there is no such token.
        """
        ...

    @abc.abstractmethod
    def delete(self, token_id: str, property_scope: t.Any) -> bool:
        """Delete a token

        :return: ``True`` if a record has been deleted.
        """
        ...


class TransactionLogRepository(abc.ABC):
    """Append-only log of the gateway notifications"""

    @abc.abstractmethod
    def append(self, event: WebhookEvent) -> None:
        ...


def fetch_all(query: t.Any, page_size: int = 100) -> t.Iterator[t.Any]:
    """Yield every result of a datastore query, page by page.

    ``query`` needs ``fetch(limit)``, ``getCursor()`` and ``setCursor(cursor)``
    like :class:`viur.core.db.Query`.
    """
    while True:
        page = query.fetch(page_size)
        yield from page
        if len(page) < page_size or not (cursor := query.getCursor()):
            return
        query.setCursor(cursor)
