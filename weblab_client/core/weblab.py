"""
The ``WebLab`` facade: one HTTP session shared by the scraping and REST paths.
"""

import logging

import aiohttp

from weblab_client.api.client import WebLabAPIClient
from weblab_client.api.requests import DEFAULT_BASE_URL
from weblab_client.api.session import SessionHandle
from weblab_client.exceptions import AuthenticationError
from weblab_client.models.config import WebLabConfig
from weblab_client.web.scraper import WebLabScraper

log = logging.getLogger(__name__)


class WebLab:
    """
    Entry point for interacting with WebLab.

    Usage:
        async with WebLab(cookie=cookie, api_key=key) as weblab:
            rows = await weblab.web.get_submissions(1234)
            result = await weblab.api.get_submission(1234, 42)
    """

    def __init__(
        self,
        cookie: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initializes the facade.

        Args:
            cookie: Session cookie for the scraping path.
            api_key: API key for the REST path.
            api_secret: Optional API secret; enables request signing.
            base_url: Root URL of the WebLab instance.
            session: A caller-owned aiohttp session. It is never closed here.
        """
        self.base_url = base_url.rstrip("/")
        self._handle = SessionHandle(session)
        self._web = (
            WebLabScraper(cookie, self.base_url, self._handle) if cookie else None
        )
        self._api = (
            WebLabAPIClient(api_key, api_secret, self.base_url, self._handle)
            if api_key
            else None
        )

    @classmethod
    def from_config(
        cls, config: WebLabConfig, session: aiohttp.ClientSession | None = None
    ) -> "WebLab":
        return cls(
            cookie=config.cookie or None,
            api_key=config.api_key or None,
            api_secret=config.api_secret or None,
            base_url=config.base_url,
            session=session,
        )

    @property
    def web(self) -> WebLabScraper:
        """The cookie-authenticated scraping path."""
        if self._web is None:
            raise AuthenticationError("No session cookie configured for scraping.")
        return self._web

    @property
    def api(self) -> WebLabAPIClient:
        """The key-authenticated REST path."""
        if self._api is None:
            raise AuthenticationError("No API key configured for the REST API.")
        return self._api

    async def close(self) -> None:
        """Closes the HTTP session if it is owned. Safe to call repeatedly."""
        await self._handle.close()

    async def __aenter__(self) -> "WebLab":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
