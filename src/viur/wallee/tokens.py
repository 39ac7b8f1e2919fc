import typing as t

from .client import GatewayClient
from .globals import WALLEE_LOGGER
from .repositories import TokenRepository
from .services import EVENT_SERVICE, Event
from .types import (
    GatewayError,
    NotFoundError,
    PaymentToken,
    PersistenceError,
    TokenState,
)

logger = WALLEE_LOGGER.getChild(__name__)


class TokenLifecycleManager:
    """
    Creates, lists and deletes reusable payment tokens.

    The local records are kept consistent with the gateway:
    a token is stored only after the gateway created it, and removed
    locally only after the gateway revoked it.
    """

    def __init__(
        self,
        client: GatewayClient,
        repository: TokenRepository,
    ) -> None:
        self.client = client
        self.repository = repository

    def capture_and_store(
        self,
        transaction_id: int,
        customer_id: int = 0,
        property_scope: t.Any = None,
    ) -> PaymentToken:
        """Tokenize the payment instrument of a completed transaction and store the token.

        The gateway separates the token from its presentable details
        (card label and brand image), which are versioned independently,
        so this requires two calls.

        :raises GatewayError: If the token could not be created or read.
        :raises PersistenceError: If the token could not be stored.
        """
        token_id = self.client.create_token(transaction_id)
        logger.info(f"Created token {token_id} for transaction {transaction_id}")
        details = self.client.get_active_token_version(token_id)
        logger.debug(f"{details=}")
        token = PaymentToken(
            token_id=token_id,
            customer_id=int(customer_id or 0),
            display_label=details.display_label,
            image_path=details.image_path,
            property_scope=property_scope,
        )
        try:
            token = self.repository.save(token)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Cannot store token {token_id}: {exc}") from exc
        logger.info(f"Stored token {token_id} for customer {token.customer_id}")
        EVENT_SERVICE.call(Event.TOKEN_STORED, token=token, transaction_id=transaction_id)
        return token

    def list_for_customer(
        self,
        customer_id: int,
        property_scope: t.Any,
    ) -> list[PaymentToken]:
        """Get all stored tokens of a customer. Local read only."""
        return self.repository.find(customer_id=int(customer_id), property_scope=property_scope)

    def delete(
        self,
        token_id: str,
        property_scope: t.Any,
    ) -> None:
        """Revoke a token at the gateway, then delete it locally.

        Before the gateway is called, the local record is marked as
        :attr:`TokenState.PENDING_DELETE`. If the gateway fails, the mark is
        reverted and the record stays. If the local delete fails after the
        revocation, the record stays marked and can be finished with
        :meth:`resume_pending_deletes`.

        :raises NotFoundError: If there is no such token stored for this property.
        :raises GatewayError: If the gateway could not revoke the token.
        :raises PersistenceError: If the local record could not be updated or deleted.
        """
        token_id = str(token_id)
        if self.repository.get(token_id, property_scope) is None:
            raise NotFoundError(f"Token {token_id} not found")
        self.repository.set_state(token_id, property_scope, TokenState.PENDING_DELETE)

        try:
            self.client.delete_token(token_id)
        except GatewayError as exc:
            logger.error(f"Revoking token {token_id} failed, keeping the local record: {exc}")
            try:
                self.repository.set_state(token_id, property_scope, TokenState.ACTIVE)
            except Exception as revert_exc:
                logger.exception(f"Cannot reset token {token_id}, it stays pending: {revert_exc}")
            raise exc

        self._delete_local(token_id, property_scope)

    def resume_pending_deletes(self, property_scope: t.Any) -> list[str]:
        """Finish deletions which have been interrupted.

        Revoking a token twice is harmless, an already deleted token
        counts as revoked.

        :return: The ids of the deleted tokens.
        """
        deleted = []
        for token in self.repository.find(property_scope=property_scope, state=TokenState.PENDING_DELETE):
            try:
                self.client.delete_token(token.token_id)
            except GatewayError as exc:
                if exc.status_code != 404:
                    logger.error(f"Resuming delete of token {token.token_id} failed: {exc}")
                    continue
            try:
                self._delete_local(token.token_id, property_scope)
            except PersistenceError as exc:
                logger.error(f"Resuming delete of token {token.token_id} failed: {exc}")
                continue
            deleted.append(token.token_id)
        return deleted

    def _delete_local(self, token_id: str, property_scope: t.Any) -> None:
        try:
            self.repository.delete(token_id, property_scope)
        except PersistenceError:
            logger.error(f"Token {token_id} is revoked, but the local record is left pending")
            raise
        except Exception as exc:
            logger.error(f"Token {token_id} is revoked, but the local record is left pending")
            raise PersistenceError(f"Cannot delete token {token_id}: {exc}") from exc
        logger.info(f"Deleted token {token_id}")
        EVENT_SERVICE.call(Event.TOKEN_DELETED, token_id=token_id, property_scope=property_scope)
