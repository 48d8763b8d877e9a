"""
Envelope construction and parsing.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import betterproto

from pogo_rpc.catalog import LogicalRequest
from pogo_rpc.errors import (
    AuthMissingError,
    CountMismatchError,
    ErrorKind,
    MalformedEnvelopeError,
    RequestError,
    ResponseDecodeError,
)
from pogo_rpc.models.envelope import (
    AuthInfo,
    AuthInfoJwt,
    AuthTicket,
    PlatformRequest,
    Request,
    RequestEnvelope,
    ResponseEnvelope,
    SendEncryptedSignatureRequest,
)
from pogo_rpc.models.request_types import SUCCESS_STATUS_CODES, PlatformRequestType, StatusCode
from pogo_rpc.models.session import Session

logger = logging.getLogger(__name__)

# Constants the game app sends in every envelope.
REQUEST_STATUS_CODE = StatusCode.OK_RPC_URL_IN_RESPONSE
LOCATION_FIX_AGE_MS = 989
AUTH_TOKEN_UNKNOWN2 = 59


@dataclass
class DecodedResponse:
    status_code: int
    responses: list[Any] = field(default_factory=list)
    endpoint: Optional[str] = None
    auth_ticket: Optional[AuthTicket] = None
    request_id: int = 0
    returns: list[bytes] = field(default_factory=list)
    error: str = ""


def build_envelope(
    session: Session,
    requests: Sequence[LogicalRequest],
    request_id: Optional[int] = None,
) -> RequestEnvelope:
    """Build an unsigned request envelope from the session state."""
    envelope = RequestEnvelope(
        status_code=REQUEST_STATUS_CODE,
        request_id=request_id if request_id is not None else session.request_ids.next_id(),
        ms_since_last_locationfix=LOCATION_FIX_AGE_MS,
    )
    refresh_location(envelope, session)

    if session.auth_ticket is not None:
        envelope.auth_ticket = session.auth_ticket
    elif session.auth_provider and session.auth_token:
        envelope.auth_info = AuthInfo(
            provider=session.auth_provider,
            token=AuthInfoJwt(contents=session.auth_token, unknown2=AUTH_TOKEN_UNKNOWN2),
        )
    else:
        raise AuthMissingError()

    envelope.requests = [
        Request(request_type=r.request_type, request_message=r.payload or b"") for r in requests
    ]
    return envelope


def refresh_location(envelope: RequestEnvelope, session: Session) -> None:
    location = session.location
    if location is None:
        envelope.latitude = envelope.longitude = envelope.accuracy = None
        return
    envelope.latitude = location.latitude
    envelope.longitude = location.longitude
    envelope.accuracy = location.accuracy


def sub_request_payloads(envelope: RequestEnvelope) -> list[bytes]:
    """The plaintext sub-requests a signature is computed over."""
    return [bytes(r) for r in envelope.requests]


def clear_platform_requests(envelope: RequestEnvelope) -> None:
    envelope.platform_requests = []


def attach_signature(envelope: RequestEnvelope, encrypted_signature: bytes) -> None:
    envelope.platform_requests.append(PlatformRequest(
        type=PlatformRequestType.SEND_ENCRYPTED_SIGNATURE,
        request_message=bytes(SendEncryptedSignatureRequest(encrypted_signature=encrypted_signature)),
    ))


def endpoint_from_api_url(api_url: str) -> Optional[str]:
    if not api_url:
        return None
    return f"https://{api_url}/rpc"


def parse_response(body: bytes) -> ResponseEnvelope:
    """Parse a response envelope, settling for a partial result when the parser offers one."""
    try:
        return ResponseEnvelope().parse(body)
    except Exception as e:
        partial = getattr(e, "decoded", None)
        if isinstance(partial, ResponseEnvelope):
            logger.warning(f"Response envelope only partially decoded: {e}")
            return partial
        raise MalformedEnvelopeError(f"Failed to parse response envelope: {e}") from e


def pair_responses(requests: Sequence[LogicalRequest], returns: Sequence[bytes]) -> list[Any]:
    """Decode returned payloads in order against the requests that declared a decoder.

    One payload that fails to decode fails the whole call.
    """
    expecting = [r for r in requests if r.decoder is not None]
    if len(expecting) != len(returns):
        raise CountMismatchError(len(expecting), len(returns))

    responses = []
    for request, payload in zip(expecting, returns):
        try:
            responses.append(request.decoder(payload))  # type: ignore[misc]
        except Exception as e:
            raise ResponseDecodeError(
                f"Failed to decode {request.name} response: {e}", request.request_type,
            ) from e
    return responses


def read_response(body: bytes) -> DecodedResponse:
    """Parse a response body into its status, metadata and raw payloads."""
    envelope = parse_response(body)
    ticket = envelope.auth_ticket if betterproto.serialized_on_wire(envelope.auth_ticket) else None
    return DecodedResponse(
        status_code=envelope.status_code,
        endpoint=endpoint_from_api_url(envelope.api_url),
        auth_ticket=ticket,
        request_id=envelope.request_id,
        returns=list(envelope.returns),
        error=envelope.error,
    )


def raise_for_error(decoded: DecodedResponse) -> None:
    if decoded.error:
        raise RequestError(decoded.error, ErrorKind.FATAL, status_code=decoded.status_code, code="server_error")


def decode_response(body: bytes, requests: Sequence[LogicalRequest]) -> DecodedResponse:
    """Decode a response body. Payloads are paired only for success status codes."""
    decoded = read_response(body)
    raise_for_error(decoded)
    if decoded.status_code in SUCCESS_STATUS_CODES:
        decoded.responses = pair_responses(requests, decoded.returns)
    return decoded
