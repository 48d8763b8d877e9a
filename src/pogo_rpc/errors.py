"""
pogo-rpc error types.

Every failure surfaced to a caller is a PogoError. Errors raised while
talking to the RPC endpoint are RequestErrors tagged with an ErrorKind, which
is what the dispatcher's retry loop inspects.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    FATAL = "fatal"
    TRANSIENT = "transient"
    RECOVERED = "recovered"


class PogoError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class AuthError(PogoError):
    def __init__(self, message: str, code: str = "auth_error"):
        super().__init__(code, message)


class CatalogError(PogoError):
    def __init__(self, message: str, code: str = "catalog_error"):
        super().__init__(code, message)


class RequestError(PogoError):
    """An RPC attempt failed. `kind` decides whether it may be retried."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.TRANSIENT,
        status_code: Optional[int] = None,
        code: str = "request_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(code, message, details)
        self.kind = kind
        self.status_code = status_code

    @property
    def fatal(self) -> bool:
        return self.kind is ErrorKind.FATAL


class AuthMissingError(RequestError):
    def __init__(self, message: str = "No auth info provided"):
        super().__init__(message, ErrorKind.FATAL, code="auth_missing")


class MalformedEnvelopeError(RequestError):
    def __init__(self, message: str):
        super().__init__(message, ErrorKind.FATAL, code="malformed_envelope")


class CountMismatchError(RequestError):
    def __init__(self, expected: int, received: int):
        super().__init__(
            f"Request count does not match response count ({expected} expected, {received} received)",
            ErrorKind.FATAL,
            code="count_mismatch",
            details={"expected": expected, "received": received},
        )


class ResponseDecodeError(RequestError):
    def __init__(self, message: str, request_type: Optional[int] = None):
        super().__init__(
            message,
            ErrorKind.FATAL,
            code="response_decode_error",
            details={"request_type": request_type},
        )


class RetryLimitError(RequestError):
    """The retry budget ran out. Carries the last transient cause."""

    def __init__(self, tries: int, cause: RequestError):
        super().__init__(
            f"RPC call passed retry limit after {tries} tries: {cause}",
            ErrorKind.FATAL,
            status_code=cause.status_code,
            code="retry_limit",
            details={"tries": tries, "cause": cause.code},
        )
        self.cause = cause


class SignatureRateLimitedError(PogoError):
    """Raised by a signature provider when its backing service throttles us."""

    def __init__(self, message: str = "Signature service rate limit reached", retry_after: Optional[float] = None):
        super().__init__("signature_rate_limited", message, {"retry_after": retry_after})
        self.retry_after = retry_after
