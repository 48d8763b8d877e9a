"""
Auth provider interface and re-login support.

Login flows are external: any object with an async authenticate(username,
password) returning a bearer token string can be plugged in, whichever
identity provider it talks to.
"""

import logging
from typing import Protocol, runtime_checkable

from pogo_rpc.errors import AuthError

logger = logging.getLogger(__name__)

PROVIDER_PTC = "ptc"
PROVIDER_GOOGLE = "google"


@runtime_checkable
class AuthProvider(Protocol):
    async def authenticate(self, username: str, password: str) -> str:
        ...


class Authenticator:
    """Binds an AuthProvider to stored credentials so the dispatcher can re-login."""

    def __init__(self, provider_name: str, provider: AuthProvider, username: str, password: str):
        self.provider_name = provider_name
        self._provider = provider
        self._username = username
        self._password = password

    async def login(self) -> str:
        """Obtain a fresh token from the provider."""
        try:
            token = await self._provider.authenticate(self._username, self._password)
        except Exception as e:
            raise AuthError(f"Failed to authenticate with {self.provider_name}: {e}")
        if not token:
            raise AuthError(f"{self.provider_name} returned an empty token")
        logger.info(f"Authenticated {self._username} with {self.provider_name}")
        return token


class StaticTokenProvider:
    """Hands back a token obtained out of band."""

    def __init__(self, token: str):
        self._token = token

    async def authenticate(self, username: str, password: str) -> str:
        return self._token
