"""api_call_limit package: app/core/infra/shared.

Expose the rate-limited dispatcher and library-friendly client at the package level.
"""

from .app.api import AppConfig, DocumentApiClient
from .app.dispatcher import Dispatcher
from .core.domain.errors import ApiCallError, ConfigurationError
from .core.domain.models import DocDescription, Document, Product

import logging

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "DocumentApiClient",
    "AppConfig",
    "Dispatcher",
    "ApiCallError",
    "ConfigurationError",
    "Document",
    "DocDescription",
    "Product",
]
