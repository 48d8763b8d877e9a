"""
pogo-rpc: RPC client for the Pokémon Go envelope protocol.

Builds signed request envelopes, follows endpoint redirects, waits out
server throttling and retries transient failures with backoff.
"""

from pogo_rpc.client import AsyncPogoClient, PogoClient
from pogo_rpc.batch import Batch
from pogo_rpc.catalog import LogicalRequest, MessageCatalog
from pogo_rpc.config import ClientOptions, RetryPolicy
from pogo_rpc.dispatcher import NO_CONTENT, Dispatcher, RpcEvent
from pogo_rpc.auth import AuthProvider, Authenticator
from pogo_rpc.signature import SignatureProvider
from pogo_rpc.errors import (
    PogoError,
    AuthError,
    CatalogError,
    ErrorKind,
    RequestError,
    AuthMissingError,
    MalformedEnvelopeError,
    CountMismatchError,
    ResponseDecodeError,
    RetryLimitError,
    SignatureRateLimitedError,
)
from pogo_rpc.models.request_types import RequestType, StatusCode
from pogo_rpc.models.session import Location, Session

__version__ = "0.1.0"
__all__ = [
    "AsyncPogoClient",
    "PogoClient",
    "Batch",
    "LogicalRequest",
    "MessageCatalog",
    "ClientOptions",
    "RetryPolicy",
    "NO_CONTENT",
    "Dispatcher",
    "RpcEvent",
    "AuthProvider",
    "Authenticator",
    "SignatureProvider",
    "PogoError",
    "AuthError",
    "CatalogError",
    "ErrorKind",
    "RequestError",
    "AuthMissingError",
    "MalformedEnvelopeError",
    "CountMismatchError",
    "ResponseDecodeError",
    "RetryLimitError",
    "SignatureRateLimitedError",
    "RequestType",
    "StatusCode",
    "Location",
    "Session",
]
