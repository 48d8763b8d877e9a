"""
Client configuration.
"""

from typing import Optional

from pydantic import BaseModel, Field

from pogo_rpc.models.request_types import RequestType

DEFAULT_ENDPOINT = "https://pgorelease.nianticlabs.com/plfe/rpc"
DEFAULT_USER_AGENT = "Niantic App"
DEFAULT_SETTINGS_HASH = "05daf51635c82611d1aac95c0b051d3ec088a930"


class RetryPolicy(BaseModel):
    """Outer retry loop: sleep `interval * backoff ** attempt` between tries."""

    max_tries: int = Field(default=5, ge=1)
    interval: float = Field(default=0.5, ge=0)
    backoff: float = Field(default=2.0, ge=1)

    model_config = {"frozen": True}

    def delay(self, attempt: int) -> float:
        return self.interval * self.backoff ** attempt


class ClientOptions(BaseModel):
    endpoint: str = DEFAULT_ENDPOINT
    proxy: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = Field(default=20.0, gt=0)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)

    # Status 52: pause, then resend the identical envelope.
    throttle_cooldown: float = Field(default=2.0, ge=0)
    max_redirects: int = Field(default=5, ge=0)

    map_objects_throttling: bool = True
    map_objects_min_delay: float = Field(default=5.0, ge=0)
    rate_limited_types: frozenset[int] = frozenset({RequestType.GET_MAP_OBJECTS})

    signature_max_tries: int = Field(default=3, ge=1)
    signature_retry_interval: float = Field(default=1.0, ge=0)

    settings_hash: str = DEFAULT_SETTINGS_HASH
    app_version: Optional[str] = None
    request_id_seed: Optional[int] = None

    model_config = {"frozen": True}
