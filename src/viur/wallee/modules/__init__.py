"""
The ViUR binding of viur-wallee

Importing this package requires a configured viur-core.
"""

from .datastore import DatastoreTokenRepository, DatastoreTransactionLogRepository
from .error import ErrorResponse, error_handler
from .gateway import WalleeGateway
from .response import ExtendedCustomJsonEncoder, JsonResponse

__all__ = [
    "DatastoreTokenRepository",
    "DatastoreTransactionLogRepository",
    "ErrorResponse",
    "error_handler",
    "ExtendedCustomJsonEncoder",
    "JsonResponse",
    "WalleeGateway",
]
