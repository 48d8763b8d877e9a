"""Shared fixtures: a scripted RPC server behind httpx.MockTransport."""

from typing import Any, Callable, Optional, Union

import httpx
import pytest

from pogo_rpc import AsyncPogoClient, ClientOptions, RetryPolicy
from pogo_rpc.models.envelope import AuthTicket, RequestEnvelope, ResponseEnvelope

BOOTSTRAP = "https://bootstrap.test/plfe/rpc"

Reply = Union[ResponseEnvelope, int, bytes, Callable[[RequestEnvelope], Any]]


def ok(*returns: bytes, status: int = 1, **fields: Any) -> ResponseEnvelope:
    return ResponseEnvelope(status_code=status, returns=list(returns), **fields)


def ticket(tag: bytes = b"t1") -> AuthTicket:
    return AuthTicket(start=tag, expire_timestamp_ms=1_700_000_000_000, end=tag[::-1])


class FakeServer:
    """Answers posted envelopes from a script, then with `default`.

    A script entry is a ResponseEnvelope, an HTTP status code, a raw body,
    or a callable taking the parsed RequestEnvelope and returning one of those.
    """

    def __init__(self):
        self.script: list[Reply] = []
        self.received: list[tuple[str, RequestEnvelope, bytes]] = []
        self.default: Callable[[RequestEnvelope], Any] = self.echo

    @staticmethod
    def echo(envelope: RequestEnvelope) -> ResponseEnvelope:
        return ok(*[f"r{r.request_type}".encode() for r in envelope.requests])

    def reply(self, *replies: Reply) -> "FakeServer":
        self.script.extend(replies)
        return self

    @property
    def envelopes(self) -> list[RequestEnvelope]:
        return [env for _, env, _ in self.received]

    @property
    def urls(self) -> list[str]:
        return [url for url, _, _ in self.received]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = request.content
        envelope = RequestEnvelope().parse(body)
        self.received.append((str(request.url), envelope, body))

        reply: Any = self.script.pop(0) if self.script else self.default
        if callable(reply):
            reply = reply(envelope)
        if isinstance(reply, int):
            return httpx.Response(reply, content=b"")
        if isinstance(reply, ResponseEnvelope):
            if not reply.request_id:
                reply.request_id = envelope.request_id
            reply = bytes(reply)
        return httpx.Response(200, content=reply)


def fast_options(**overrides: Any) -> ClientOptions:
    values: dict[str, Any] = {
        "endpoint": BOOTSTRAP,
        "retry": RetryPolicy(max_tries=3, interval=0.001, backoff=1.0),
        "throttle_cooldown": 0.001,
        "map_objects_min_delay": 0.0,
        "signature_retry_interval": 0.001,
        "request_id_seed": 42,
    }
    values.update(overrides)
    return ClientOptions(**values)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def make_client(server: FakeServer):
    """Build clients wired to the fake server. Closing is left to the test."""

    def _make(options: Optional[ClientOptions] = None, **kwargs: Any) -> AsyncPogoClient:
        client = AsyncPogoClient(
            options or fast_options(), transport=httpx.MockTransport(server.handler), **kwargs,
        )
        client.set_auth_info("ptc", "token-abc")
        return client

    return _make
