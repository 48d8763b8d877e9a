"""
Signature provider interface.

The signing algorithm itself lives outside this package. A provider gets the
plaintext sub-requests, the player location and the serialized auth ticket,
and returns the encrypted signature blob to attach to the envelope. Providers
backed by a remote hashing service raise SignatureRateLimitedError when that
service throttles; request_signature() retries those with its own backoff.
"""

import asyncio
import logging
from typing import Optional, Protocol, Sequence, runtime_checkable

from pogo_rpc.errors import ErrorKind, PogoError, RequestError, SignatureRateLimitedError
from pogo_rpc.models.session import Location

logger = logging.getLogger(__name__)


@runtime_checkable
class SignatureProvider(Protocol):
    async def sign(
        self,
        payloads: Sequence[bytes],
        location: Optional[Location],
        auth_ticket: bytes,
    ) -> bytes:
        ...


async def request_signature(
    provider: SignatureProvider,
    payloads: Sequence[bytes],
    location: Optional[Location],
    auth_ticket: bytes,
    max_tries: int = 3,
    retry_interval: float = 1.0,
) -> bytes:
    """Ask the provider for a signature.

    Rate limiting is retried here, up to `max_tries`, and surfaces as a
    transient RequestError once exhausted. Any other provider failure is
    transient too: the next outer attempt asks again.
    """
    tries = 0
    while True:
        tries += 1
        try:
            return await provider.sign(payloads, location, auth_ticket)
        except SignatureRateLimitedError as e:
            if tries >= max_tries:
                raise RequestError(
                    f"Signature provider still rate limited after {tries} tries",
                    ErrorKind.TRANSIENT,
                    code="signature_rate_limited",
                ) from e
            delay = e.retry_after if e.retry_after is not None else retry_interval * tries
            logger.warning(f"Signature provider rate limited, retrying in {delay:.2f}s")
            await asyncio.sleep(delay)
        except PogoError:
            raise
        except Exception as e:
            raise RequestError(f"Failed to sign envelope: {e}", ErrorKind.TRANSIENT, code="signature_error") from e
