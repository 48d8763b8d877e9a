"""
HTTP transport for RPC envelopes: one binary POST per attempt.
"""

import logging
from typing import Optional

import httpx

from pogo_rpc.config import DEFAULT_USER_AGENT
from pogo_rpc.errors import ErrorKind, RequestError

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 20.0,
        proxy: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": user_agent,
                "Accept": "*/*",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            timeout=timeout,
            proxy=proxy,
            transport=transport,
        )

    async def post(self, url: str, body: bytes) -> bytes:
        """POST an envelope and return the raw response body.

        4xx responses are fatal. Everything else that is not a 200, as well
        as connection failures and timeouts, is transient.
        """
        try:
            resp = await self._client.post(url, content=body)
        except httpx.TimeoutException as e:
            raise RequestError(f"Timed out posting to {url}: {e}", ErrorKind.TRANSIENT, code="timeout") from e
        except httpx.TransportError as e:
            raise RequestError(f"Network error posting to {url}: {e}", ErrorKind.TRANSIENT, code="network_error") from e

        if 400 <= resp.status_code < 500:
            raise RequestError(
                f"Status code {resp.status_code} received from HTTPS request",
                ErrorKind.FATAL,
                code="http_error",
                details={"http_status": resp.status_code},
            )
        if resp.status_code != 200:
            raise RequestError(
                f"Status code {resp.status_code} received from HTTPS request",
                ErrorKind.TRANSIENT,
                code="http_error",
                details={"http_status": resp.status_code},
            )
        logger.debug(f"Received {len(resp.content)} bytes from {url}")
        return resp.content

    async def close(self) -> None:
        await self._client.aclose()
