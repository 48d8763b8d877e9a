"""
Batch builder: accumulate operations, submit them as one envelope.

    responses = await client.batch().get_player().get_hatched_eggs().get_inventory().submit()
"""

from typing import Any, Optional

from pogo_rpc.catalog import LogicalRequest, MessageCatalog
from pogo_rpc.dispatcher import NO_CONTENT, Dispatcher
from pogo_rpc.methods import RequestMethods
from pogo_rpc.models.session import Session


class Batch(RequestMethods):
    """An ordered list of requests under construction. Not shared between tasks."""

    def __init__(self, dispatcher: Dispatcher, catalog: MessageCatalog):
        self._dispatcher = dispatcher
        self.catalog = catalog
        self._requests: list[LogicalRequest] = []

    @property
    def session(self) -> Session:  # type: ignore[override]
        return self._dispatcher.session

    @property
    def requests(self) -> tuple[LogicalRequest, ...]:
        return tuple(self._requests)

    def __len__(self) -> int:
        return len(self._requests)

    def __repr__(self) -> str:
        return f"Batch({', '.join(r.name for r in self._requests)})"

    def _dispatch(self, request: LogicalRequest) -> "Batch":
        self._requests.append(request)
        return self

    def add(self, request: LogicalRequest) -> "Batch":
        """Append a prebuilt request."""
        return self._dispatch(request)

    def clear(self) -> None:
        self._requests = []

    async def submit(self, *, timeout: Optional[float] = None) -> Any:
        """Send everything accumulated so far and empty the batch.

        An empty batch resolves to NO_CONTENT without touching the network.
        """
        requests, self._requests = self._requests, []
        if not requests:
            return NO_CONTENT
        return await self._dispatcher.call(requests, timeout=timeout)
