"""
Session state owned by one dispatcher.
"""

import secrets
from typing import Optional

from pydantic import BaseModel

from pogo_rpc.config import DEFAULT_ENDPOINT, RetryPolicy
from pogo_rpc.models.envelope import AuthTicket


class RequestIdGenerator:
    """Request ids from a Lehmer (Park-Miller) sequence, as the game app does.

    High 32 bits come from the sequence, low 32 bits from a per-session
    counter, so ids never repeat within a session.
    """

    MULTIPLIER = 16807
    MODULUS = 0x7FFFFFFF

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = secrets.randbelow(self.MODULUS - 1) + 1
        self._state = seed % self.MODULUS or 1
        self._counter = 0

    def next_int(self) -> int:
        self._state = self._state * self.MULTIPLIER % self.MODULUS
        return self._state

    def next_id(self) -> int:
        self._counter = (self._counter + 1) & 0xFFFFFFFF
        return (self.next_int() << 32) | self._counter


class Location(BaseModel):
    latitude: float
    longitude: float
    accuracy: float = 0.0
    altitude: float = 0.0

    model_config = {"frozen": True}


class Session:
    """Mutable per-connection state, owned by one dispatcher.

    `location` is None until the caller sets one; a set location of (0, 0)
    is still a location. `auth_ticket`, once issued by the server, replaces
    the provider/token pair in every envelope.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        retry: Optional[RetryPolicy] = None,
        min_delays: Optional[dict[int, float]] = None,
        request_id_seed: Optional[int] = None,
    ):
        self.endpoint = endpoint
        self.bootstrap_endpoint = endpoint
        self.auth_provider: Optional[str] = None
        self.auth_token: Optional[str] = None
        self.auth_ticket: Optional[AuthTicket] = None
        self.location: Optional[Location] = None
        self.retry = retry or RetryPolicy()
        self.min_delays: dict[int, float] = dict(min_delays or {})
        self.last_call_times: dict[int, float] = {}
        self.request_ids = RequestIdGenerator(request_id_seed)

    def __repr__(self) -> str:
        return f"Session(endpoint={self.endpoint!r}, authenticated={self.auth_ticket is not None})"

    @property
    def has_credentials(self) -> bool:
        return self.auth_ticket is not None or bool(self.auth_provider and self.auth_token)

    @property
    def on_bootstrap_endpoint(self) -> bool:
        return self.endpoint == self.bootstrap_endpoint

    def set_auth_info(self, provider: str, token: str) -> None:
        self.auth_provider = provider
        self.auth_token = token

    def clear_auth_ticket(self) -> None:
        self.auth_ticket = None
