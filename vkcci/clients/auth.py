import logging
import ssl
from types import TracebackType
from typing import Optional, Type

import aiohttp

from vkcci.structs import credentials

logger = logging.getLogger(__name__)


class APIContext:
    """
    A container for an aiohttp session and the credentials to sign with.

    The container is constructed only once per provider, and is shared by all
    its requests, including the concurrent ones: the session's connection pool
    is safe for that, and the credential is immutable.

    We assume that the whole provider runs in the same event loop, so there is
    no need to split the sessions for multiple loops.
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building and signing.
    server: str
    credential: credentials.Credential

    def __init__(
            self,
            server: str,
            credential: credentials.Credential,
            *,
            insecure: bool = False,
            ca_path: Optional[str] = None,
    ) -> None:
        super().__init__()

        # The SSL part: verify by default, skip the verification only on explicit request.
        context = ssl.create_default_context(cafile=ca_path)
        if insecure:
            logger.warning(f"TLS certificate verification is disabled for {server}. "
                           f"The remote API's identity is not verified!")
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        # Generic aiohttp session; the authentication is per-request (see `signing`).
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=0,
                ssl=context,
            ),
            headers={'User-Agent': 'vkcci/unknown'},
        )

        # Add the extra payload information. We avoid overriding the constructor.
        self.server = server
        self.credential = credential
        self.insecure = insecure

    async def close(self) -> None:
        await self.session.close()

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()
