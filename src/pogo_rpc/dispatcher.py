"""
RPC dispatcher: builds, signs, sends and decodes envelopes for one session.

Per call:
1. Rate-limit gate for throttled opcodes (waits, never fails).
2. Build the envelope once; sign it on every send once an auth ticket exists.
3. POST it to the session endpoint.
4. Decode, capture endpoint/auth ticket, classify the status code:
   1/2 success, 53 redirect, 52 server throttling, 3 bad request,
   102 invalid auth, anything else transient.
5. Pair returned payloads with the requests that declared a decoder.

Transient failures go through an outer retry loop with exponential backoff.
Redirects, throttling and re-login resubmit without touching the retry budget.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Optional, Sequence

from pogo_rpc.auth import Authenticator
from pogo_rpc.catalog import LogicalRequest
from pogo_rpc.config import ClientOptions
from pogo_rpc.errors import (
    CountMismatchError,
    ErrorKind,
    MalformedEnvelopeError,
    RequestError,
    ResponseDecodeError,
    RetryLimitError,
)
from pogo_rpc.models.envelope import RequestEnvelope
from pogo_rpc.models.request_types import SUCCESS_STATUS_CODES, StatusCode, display_name
from pogo_rpc.models.session import Session
from pogo_rpc.signature import SignatureProvider, request_signature
from pogo_rpc.transport.envelope import (
    DecodedResponse,
    attach_signature,
    build_envelope,
    clear_platform_requests,
    pair_responses,
    raise_for_error,
    read_response,
    refresh_location,
    sub_request_payloads,
)
from pogo_rpc.transport.http import HttpClient

logger = logging.getLogger(__name__)

# Resolved value of a call in which no request declared a decoder.
NO_CONTENT = True

EventHandler = Callable[[str, Any], None]


class RpcEvent:
    REQUEST = "request"
    REQUEST_ENVELOPE = "request-envelope"
    RESPONSE = "response"
    RESPONSE_ENVELOPE = "response-envelope"
    PARSE_ENVELOPE_ERROR = "parse-envelope-error"
    PARSE_RESPONSE_ERROR = "parse-response-error"
    ENDPOINT_CHANGED = "endpoint-changed"
    RECOVERED = "recovered"


class PendingCall:
    """Bookkeeping for one logical call across its attempts.

    `recoveries` holds a RECOVERED RequestError for every redirect, throttle
    or re-login the dispatcher handled without surfacing it to the caller.
    """

    __slots__ = ("requests", "envelope", "tries", "redirects", "throttled", "relogged", "recoveries")

    def __init__(self, requests: Sequence[LogicalRequest]):
        self.requests = list(requests)
        self.envelope: Optional[RequestEnvelope] = None
        self.tries = 0
        self.redirects = 0
        self.throttled = 0
        self.relogged = False
        self.recoveries: list[RequestError] = []

    def __repr__(self) -> str:
        return f"PendingCall(requests={len(self.requests)}, tries={self.tries}, redirects={self.redirects})"


class Dispatcher:
    def __init__(
        self,
        session: Session,
        http: HttpClient,
        options: Optional[ClientOptions] = None,
        signer: Optional[SignatureProvider] = None,
        authenticator: Optional[Authenticator] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.signer = signer
        self.authenticator = authenticator
        self.last_call: Optional[PendingCall] = None
        self._http = http
        self._options = options or ClientOptions()
        self._clock = clock
        self._lock = asyncio.Lock()
        self._event_handlers: list[EventHandler] = []

    def add_event_handler(self, handler: EventHandler) -> Callable[[], None]:
        """Add an event handler. Returns a cleanup function."""
        self._event_handlers.append(handler)
        def remove() -> None:
            try:
                self._event_handlers.remove(handler)
            except ValueError:
                pass
        return remove

    def _emit(self, event: str, data: Any) -> None:
        for handler in list(self._event_handlers):
            handler(event, data)

    async def call(self, requests: Sequence[LogicalRequest], *, timeout: Optional[float] = None) -> Any:
        """Send the requests as one envelope.

        Resolves to the single decoded response when exactly one request
        declared a decoder, the ordered list when several did, or NO_CONTENT.
        `timeout` bounds the whole call, retries and resubmissions included.
        Calls on one dispatcher are serialized.
        """
        async with self._lock:
            if timeout is None:
                return await self._call(requests)
            try:
                return await asyncio.wait_for(self._call(requests), timeout)
            except asyncio.TimeoutError:
                raise RequestError(
                    f"RPC call did not complete within {timeout}s", ErrorKind.FATAL, code="deadline_exceeded",
                ) from None

    async def _call(self, requests: Sequence[LogicalRequest]) -> Any:
        pending = PendingCall(requests)
        self.last_call = pending
        await self._wait_for_rate_limit(pending.requests)
        self._mark_rate_limited(pending.requests)

        retry = self.session.retry
        while True:
            try:
                responses = await self._attempt(pending)
            except RequestError as e:
                if e.kind is not ErrorKind.TRANSIENT:
                    raise
                pending.tries += 1
                if pending.tries >= retry.max_tries:
                    raise RetryLimitError(pending.tries, e) from e
                delay = retry.delay(pending.tries)
                logger.warning(f"RPC attempt {pending.tries} failed ({e}), retrying in {delay:.2f}s")
                await asyncio.sleep(delay)
                continue

            if not responses:
                return NO_CONTENT
            if len(responses) == 1:
                return responses[0]
            return responses

    async def _attempt(self, pending: PendingCall) -> list[Any]:
        while True:
            if pending.envelope is None:
                pending.envelope = build_envelope(self.session, pending.requests)
                self._emit(RpcEvent.REQUEST, {
                    "request_id": pending.envelope.request_id,
                    "requests": [
                        {"name": r.name, "type": r.request_type, "payload": r.payload} for r in pending.requests
                    ],
                })
            body = await self._sign(pending.envelope)
            self._emit(RpcEvent.REQUEST_ENVELOPE, pending.envelope)

            decoded = await self._send(body, pending)
            status = decoded.status_code

            if status in SUCCESS_STATUS_CODES:
                decoded.responses = self._pair(pending.requests, decoded)
                self._emit(RpcEvent.RESPONSE, {
                    "status_code": status,
                    "request_id": decoded.request_id,
                    "responses": [
                        {"name": r.name, "type": r.request_type, "data": data}
                        for r, data in zip([r for r in pending.requests if r.expects_response], decoded.responses)
                    ],
                })
                return decoded.responses

            if status == StatusCode.REDIRECT:
                pending.redirects += 1
                if decoded.endpoint is None:
                    raise RequestError("Redirect received without a new endpoint", status_code=status)
                if pending.redirects > self._options.max_redirects:
                    raise RequestError(
                        f"Gave up after {pending.redirects - 1} redirects", ErrorKind.FATAL, status_code=status,
                    )
                logger.debug(f"Redirected to {self.session.endpoint}, resubmitting")
                self._recovered(pending, f"Redirected to {self.session.endpoint}", status)
                continue

            if status == StatusCode.BAD_REQUEST:
                raise RequestError(f"Status code {status} received from RPC", ErrorKind.FATAL, status_code=status)

            if status == StatusCode.INVALID_AUTH_TOKEN:
                authenticator = self.authenticator
                if authenticator is None or pending.relogged:
                    raise RequestError(
                        f"Status code {status} received from RPC (auth ticket invalid)",
                        ErrorKind.FATAL,
                        status_code=status,
                    )
                await self._relogin(authenticator)
                pending.relogged = True
                pending.envelope = None
                self._recovered(pending, f"Logged in again with {authenticator.provider_name}", status)
                continue

            raise RequestError(f"Status code {status} received from RPC", ErrorKind.TRANSIENT, status_code=status)

    async def _send(self, body: bytes, pending: PendingCall) -> DecodedResponse:
        """POST the body, resending it unchanged while the server throttles."""
        while True:
            raw = await self._http.post(self.session.endpoint, body)
            decoded = self._read(raw)
            # Ticket and endpoint are kept whatever the status or payloads turn out to be.
            self._capture(decoded)
            raise_for_error(decoded)
            if decoded.status_code != StatusCode.THROTTLED:
                return decoded
            pending.throttled += 1
            cooldown = self._options.throttle_cooldown
            logger.warning(f"Server throttled request, resending in {cooldown:.2f}s")
            self._recovered(pending, "Server throttled request", decoded.status_code)
            await asyncio.sleep(cooldown)

    def _read(self, raw: bytes) -> DecodedResponse:
        try:
            decoded = read_response(raw)
        except MalformedEnvelopeError as e:
            self._emit(RpcEvent.PARSE_ENVELOPE_ERROR, {"body": raw, "error": e})
            raise
        self._emit(RpcEvent.RESPONSE_ENVELOPE, decoded)
        return decoded

    def _pair(self, requests: Sequence[LogicalRequest], decoded: DecodedResponse) -> list[Any]:
        try:
            return pair_responses(requests, decoded.returns)
        except (CountMismatchError, ResponseDecodeError) as e:
            self._emit(RpcEvent.PARSE_RESPONSE_ERROR, {"returns": decoded.returns, "error": e})
            raise

    def _recovered(self, pending: PendingCall, message: str, status: int) -> None:
        recovery = RequestError(message, ErrorKind.RECOVERED, status_code=status, code="recovered")
        pending.recoveries.append(recovery)
        self._emit(RpcEvent.RECOVERED, recovery)

    def _capture(self, decoded: DecodedResponse) -> None:
        """Store a refreshed auth ticket and adopt an advertised endpoint."""
        if decoded.auth_ticket is not None:
            self.session.auth_ticket = decoded.auth_ticket
        if decoded.endpoint and decoded.endpoint != self.session.endpoint:
            if not self.session.on_bootstrap_endpoint:
                logger.warning(f"Endpoint change requested outside bootstrap: {decoded.endpoint}")
            logger.info(f"Switching RPC endpoint to {decoded.endpoint}")
            self.session.endpoint = decoded.endpoint
            self._emit(RpcEvent.ENDPOINT_CHANGED, decoded.endpoint)

    async def _sign(self, envelope: RequestEnvelope) -> bytes:
        """Serialize the envelope, signed when the session holds an auth ticket."""
        clear_platform_requests(envelope)
        refresh_location(envelope, self.session)
        ticket = self.session.auth_ticket
        if ticket is None or self.signer is None:
            return bytes(envelope)
        signature = await request_signature(
            self.signer,
            sub_request_payloads(envelope),
            self.session.location,
            bytes(ticket),
            max_tries=self._options.signature_max_tries,
            retry_interval=self._options.signature_retry_interval,
        )
        attach_signature(envelope, signature)
        return bytes(envelope)

    async def _relogin(self, authenticator: Authenticator) -> None:
        logger.info(f"Auth ticket rejected, logging in again with {authenticator.provider_name}")
        token = await authenticator.login()
        self.session.set_auth_info(authenticator.provider_name, token)
        self.session.clear_auth_ticket()

    async def _wait_for_rate_limit(self, requests: Sequence[LogicalRequest]) -> None:
        if not self._options.map_objects_throttling:
            return
        limited = {r.request_type for r in requests} & self._options.rate_limited_types
        for request_type in sorted(limited):
            last = self.session.last_call_times.get(request_type)
            if last is None:
                continue
            min_delay = self.session.min_delays.get(request_type, self._options.map_objects_min_delay)
            delay = last + min_delay - self._clock()
            if delay > 0:
                logger.info(f"Delaying {display_name(request_type)} request by {delay:.2f}s")
                await asyncio.sleep(delay)

    def _mark_rate_limited(self, requests: Sequence[LogicalRequest]) -> None:
        limited = {r.request_type for r in requests} & self._options.rate_limited_types
        now = self._clock()
        for request_type in limited:
            self.session.last_call_times[request_type] = now
