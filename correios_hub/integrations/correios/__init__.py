"""
Public surface of the Correios integration:
- import from here; module layout behind it may change freely.
"""

from .client import CorreiosClient
from .http_client import CorreiosHttpClient
from .chunking import chunked, merge_in_order, fetch_in_chunks

from .errors import (
    CorreiosError, CorreiosTransportError, CorreiosStatusError, CorreiosAuthError,
    CorreiosPayloadError, CorreiosPreconditionError, CorreiosNotFoundError,
)


__all__ = [
    "CorreiosClient", "CorreiosHttpClient",
    "chunked", "merge_in_order", "fetch_in_chunks",
    "CorreiosError", "CorreiosTransportError", "CorreiosStatusError", "CorreiosAuthError",
    "CorreiosPayloadError", "CorreiosPreconditionError", "CorreiosNotFoundError",
]
