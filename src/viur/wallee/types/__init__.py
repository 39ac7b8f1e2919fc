from .data import (  # noqa
    LineItem,
    PaymentCallback,
    PaymentToken,
    TokenVersionDetails,
    Transaction,
    TransactionRequest,
    WebhookEvent,
)
from .enums import (  # noqa
    LineItemKind,
    OrderContext,
    TokenState,
    TransactionState,
)
from .exceptions import (  # noqa
    ConfigurationError,
    DispatchError,
    GatewayError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    ViURWalleeException,
)
from .results import FlowResult, flow_result  # noqa
