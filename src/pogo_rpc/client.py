"""
AsyncPogoClient / PogoClient: main SDK clients.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Sequence, Union

import httpx

from pogo_rpc.auth import AuthProvider, Authenticator
from pogo_rpc.batch import Batch
from pogo_rpc.catalog import LogicalRequest, MessageCatalog
from pogo_rpc.config import ClientOptions
from pogo_rpc.dispatcher import Dispatcher, EventHandler
from pogo_rpc.methods import RequestMethods
from pogo_rpc.models.request_types import RequestType
from pogo_rpc.models.session import Location, Session
from pogo_rpc.signature import SignatureProvider
from pogo_rpc.transport.http import HttpClient

logger = logging.getLogger(__name__)


class AsyncPogoClient(RequestMethods):
    """Async RPC client (primary).

    Every operation method sends its request immediately and must be
    awaited. Use batch() to send several operations in one envelope.
    """

    def __init__(
        self,
        options: Optional[ClientOptions] = None,
        *,
        signer: Optional[SignatureProvider] = None,
        catalog: Optional[MessageCatalog] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.options = options or ClientOptions()
        self.catalog = catalog or MessageCatalog()
        self.session = Session(
            endpoint=self.options.endpoint,
            retry=self.options.retry,
            min_delays={t: self.options.map_objects_min_delay for t in self.options.rate_limited_types},
            request_id_seed=self.options.request_id_seed,
        )
        self.http = HttpClient(
            user_agent=self.options.user_agent,
            timeout=self.options.timeout,
            proxy=self.options.proxy,
            transport=transport,
        )
        self.dispatcher = Dispatcher(self.session, self.http, self.options, signer=signer)

    async def __aenter__(self) -> "AsyncPogoClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def endpoint(self) -> str:
        return self.session.endpoint

    def set_auth_info(self, provider: str, token: str) -> None:
        """Set the identity provider name and bearer token used until an auth ticket is issued."""
        self.session.set_auth_info(provider, token)

    def set_position(
        self,
        latitude: Union[float, Location],
        longitude: Optional[float] = None,
        accuracy: float = 0.0,
        altitude: float = 0.0,
    ) -> None:
        """Set the location sent with following calls.

        This does not move the player on the server; call player_update() for that.
        """
        if isinstance(latitude, Location):
            self.session.location = latitude
            return
        if longitude is None:
            raise ValueError("longitude is required")
        self.session.location = Location(
            latitude=latitude, longitude=longitude, accuracy=accuracy, altitude=altitude,
        )

    def set_signer(self, signer: Optional[SignatureProvider]) -> None:
        self.dispatcher.signer = signer

    def set_authentication(self, provider_name: str, provider: AuthProvider, username: str, password: str) -> None:
        """Enable automatic re-login when the server rejects the auth ticket."""
        self.dispatcher.authenticator = Authenticator(provider_name, provider, username, password)

    async def login(self, provider_name: str, provider: AuthProvider, username: str, password: str) -> str:
        """Log in through an auth provider and keep the credentials for re-login."""
        authenticator = Authenticator(provider_name, provider, username, password)
        token = await authenticator.login()
        self.set_auth_info(provider_name, token)
        self.dispatcher.authenticator = authenticator
        return token

    def add_event_handler(self, handler: EventHandler) -> Callable[[], None]:
        """Observe envelopes and responses (handler(event, data)). Returns a cleanup function."""
        return self.dispatcher.add_event_handler(handler)

    def batch(self) -> Batch:
        """Start a new batch. Each call returns a fresh, independent batch."""
        return Batch(self.dispatcher, self.catalog)

    async def call(self, requests: Sequence[LogicalRequest], *, timeout: Optional[float] = None) -> Any:
        return await self.dispatcher.call(requests, timeout=timeout)

    def _dispatch(self, request: LogicalRequest) -> Any:
        return self.dispatcher.call([request])

    async def init(self) -> list[Any]:
        """Perform the bootstrap call the game app makes on startup.

        The bootstrap endpoint answers with a redirect; the dispatcher resends
        the batch to the real endpoint. Also adopts the server's minimum delay
        between map object fetches.
        """
        responses = await (
            self.batch()
            .get_player(self.options.app_version)
            .get_hatched_eggs()
            .get_inventory()
            .check_awarded_badges()
            .download_settings(self.options.settings_hash)
            .submit()
        )
        self._apply_settings(responses[-1])
        return responses

    def _apply_settings(self, settings_response: Any) -> None:
        map_settings = getattr(getattr(settings_response, "settings", None), "map_settings", None)
        min_refresh = getattr(map_settings, "get_map_objects_min_refresh_seconds", 0)
        if min_refresh:
            logger.info(f"Server set minimum map objects delay to {min_refresh:.2f}s")
            self.session.min_delays[RequestType.GET_MAP_OBJECTS] = float(min_refresh)

    async def close(self) -> None:
        await self.http.close()


class PogoClient(RequestMethods):
    """Sync wrapper around AsyncPogoClient. Runs the event loop internally.

    Operation methods block and return the decoded response.
    """

    def __init__(self, options: Optional[ClientOptions] = None, **kwargs: Any):
        self._async = AsyncPogoClient(options, **kwargs)
        self._loop = asyncio.new_event_loop()

    def __enter__(self) -> "PogoClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    def _dispatch(self, request: LogicalRequest) -> Any:
        return self._run(self._async._dispatch(request))

    @property
    def session(self) -> Session:  # type: ignore[override]
        return self._async.session

    @property
    def catalog(self) -> MessageCatalog:  # type: ignore[override]
        return self._async.catalog

    @property
    def dispatcher(self) -> Dispatcher:
        return self._async.dispatcher

    @property
    def endpoint(self) -> str:
        return self._async.endpoint

    def set_auth_info(self, provider: str, token: str) -> None:
        self._async.set_auth_info(provider, token)

    def set_position(self, *args: Any, **kwargs: Any) -> None:
        self._async.set_position(*args, **kwargs)

    def set_signer(self, signer: Optional[SignatureProvider]) -> None:
        self._async.set_signer(signer)

    def set_authentication(self, provider_name: str, provider: AuthProvider, username: str, password: str) -> None:
        self._async.set_authentication(provider_name, provider, username, password)

    def add_event_handler(self, handler: EventHandler) -> Callable[[], None]:
        return self._async.add_event_handler(handler)

    def login(self, provider_name: str, provider: AuthProvider, username: str, password: str) -> str:
        return self._run(self._async.login(provider_name, provider, username, password))

    def init(self) -> list[Any]:
        return self._run(self._async.init())

    def batch(self) -> Batch:
        return self._async.batch()

    def submit(self, batch: Batch, *, timeout: Optional[float] = None) -> Any:
        """Submit a batch built with batch() and block for the result."""
        return self._run(batch.submit(timeout=timeout))

    def call(self, requests: Sequence[LogicalRequest], *, timeout: Optional[float] = None) -> Any:
        return self._run(self._async.call(requests, timeout=timeout))

    def close(self) -> None:
        if self._loop.is_closed():
            return
        self._run(self._async.close())
        self._loop.close()
