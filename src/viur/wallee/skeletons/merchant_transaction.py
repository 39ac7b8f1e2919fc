import typing as t  # noqa

from viur.core.bones import *
from viur.core.skeleton import Skeleton
from ..globals import WALLEE_LOGGER

logger = WALLEE_LOGGER.getChild(__name__)


class MerchantTransactionSkel(Skeleton):
    """A webhook notification of a payment gateway. Written once, never updated."""

    kindName = "wallee_merchant_transaction"

    merchant_type = StringBone(
        required=True,
        searchable=True,
    )

    payload = RawBone(
        indexed=False,
    )
    """The body of the notification, serialized"""

    received_at = DateBone()
