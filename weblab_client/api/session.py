"""
Ownership-aware handle around an aiohttp session.
"""

import logging

import aiohttp

log = logging.getLogger(__name__)

USER_AGENT = "weblab-client"


class SessionHandle:
    """
    Provides an ``aiohttp.ClientSession`` to the clients.

    A session passed in by the caller is borrowed and never closed here. Without
    one, a session is created on first use and owned by this handle. Closing is
    idempotent.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None):
        self._session = session
        self._owned = session is None
        self._closed = False

    @property
    def owned(self) -> bool:
        return self._owned

    @property
    def closed(self) -> bool:
        return self._closed

    async def get(self) -> aiohttp.ClientSession:
        """Returns the active session, creating an owned one if needed."""
        if self._closed:
            raise RuntimeError("The HTTP session has already been closed.")
        if self._session is None or (self._owned and self._session.closed):
            self._session = aiohttp.ClientSession(
                # Cookies are sent explicitly per request.
                cookie_jar=aiohttp.DummyCookieJar(),
                headers={"User-Agent": USER_AGENT},
            )
            log.debug("Created owned HTTP session")
        return self._session

    async def close(self) -> None:
        """Closes the session if this handle owns it. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        if self._owned and self._session is not None and not self._session.closed:
            await self._session.close()
            log.debug("Closed owned HTTP session")
