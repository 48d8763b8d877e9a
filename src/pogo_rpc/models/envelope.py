"""
Envelope wire messages.

Protobuf messages declared as betterproto dataclasses. Only the envelope
layer lives here; per-operation payloads are opaque bytes to this module.
"""

from dataclasses import dataclass
from typing import List, Optional

import betterproto


@dataclass(eq=False, repr=False)
class AuthTicket(betterproto.Message):
    start: bytes = betterproto.bytes_field(1)
    expire_timestamp_ms: int = betterproto.uint64_field(2)
    end: bytes = betterproto.bytes_field(3)


@dataclass(eq=False, repr=False)
class AuthInfoJwt(betterproto.Message):
    contents: str = betterproto.string_field(1)
    unknown2: int = betterproto.int32_field(2)


@dataclass(eq=False, repr=False)
class AuthInfo(betterproto.Message):
    provider: str = betterproto.string_field(1)
    token: AuthInfoJwt = betterproto.message_field(2)


@dataclass(eq=False, repr=False)
class Request(betterproto.Message):
    """One multiplexed sub-request: opcode plus its encoded payload."""

    request_type: int = betterproto.int32_field(1)
    request_message: bytes = betterproto.bytes_field(2)


@dataclass(eq=False, repr=False)
class PlatformRequest(betterproto.Message):
    type: int = betterproto.int32_field(1)
    request_message: bytes = betterproto.bytes_field(2)


@dataclass(eq=False, repr=False)
class SendEncryptedSignatureRequest(betterproto.Message):
    encrypted_signature: bytes = betterproto.bytes_field(1)


@dataclass(eq=False, repr=False)
class RequestEnvelope(betterproto.Message):
    status_code: int = betterproto.int32_field(1)
    request_id: int = betterproto.uint64_field(3)
    requests: List[Request] = betterproto.message_field(4)
    platform_requests: List[PlatformRequest] = betterproto.message_field(6)
    # Explicit presence: (0, 0) is a real place and must not read as "unset".
    latitude: Optional[float] = betterproto.double_field(7, optional=True)
    longitude: Optional[float] = betterproto.double_field(8, optional=True)
    accuracy: Optional[float] = betterproto.double_field(9, optional=True)
    auth_info: AuthInfo = betterproto.message_field(10)
    auth_ticket: AuthTicket = betterproto.message_field(11)
    ms_since_last_locationfix: int = betterproto.int64_field(12)


@dataclass(eq=False, repr=False)
class PlatformResponse(betterproto.Message):
    type: int = betterproto.int32_field(1)
    response: bytes = betterproto.bytes_field(2)


@dataclass(eq=False, repr=False)
class ResponseEnvelope(betterproto.Message):
    status_code: int = betterproto.int32_field(1)
    request_id: int = betterproto.uint64_field(2)
    api_url: str = betterproto.string_field(3)
    platform_returns: List[PlatformResponse] = betterproto.message_field(6)
    auth_ticket: AuthTicket = betterproto.message_field(7)
    returns: List[bytes] = betterproto.bytes_field(100)
    error: str = betterproto.string_field(101)
