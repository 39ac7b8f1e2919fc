import typing as t  # noqa

from viur.core.bones import *
from viur.core.skeleton import Skeleton
from ..globals import WALLEE_LOGGER
from ..types import TokenState

logger = WALLEE_LOGGER.getChild(__name__)


class CustomerTokenSkel(Skeleton):
    """A stored wallee token of a customer"""

    kindName = "wallee_customer_token"

    token_id = StringBone(
        required=True,
        unique=UniqueValue(UniqueLockMethod.SameValue, False, "Token already stored"),
        escape_html=False,
        searchable=True,
    )
    """Id of the token at wallee"""

    customer_id = NumericBone(
        min=0,
        defaultValue=0,
    )
    """Owner of the token, 0 for anonymous"""

    display_label = StringBone(
        escape_html=False,
    )
    """Name of the active token version, e.g. the masked card number"""

    image_path = StringBone(
        escape_html=False,
    )
    """Image of the payment method"""

    property_scope = StringBone(
        escape_html=False,
    )
    """Property (tenant) the token belongs to"""

    state = SelectBone(
        values=TokenState,
        translation_key_prefix=None,
        defaultValue=TokenState.ACTIVE,
        required=True,
    )
