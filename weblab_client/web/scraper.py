"""
Fetches WebLab submission pages with a session cookie and parses them
through the page layout contract.
"""

import asyncio
import logging

import aiohttp

from weblab_client.api.requests import DEFAULT_BASE_URL
from weblab_client.api.session import SessionHandle
from weblab_client.exceptions import ScrapeError
from weblab_client.models.records import Submission, SubmissionInfo

from .layout import parse_submission, parse_submissions

log = logging.getLogger(__name__)


class WebLabScraper:
    """
    Reads submissions from the WebLab web interface as a logged-in user.

    The session cookie is copied from a browser session and sent verbatim in
    the ``Cookie`` header of every request.
    """

    def __init__(
        self,
        cookie: str,
        base_url: str = DEFAULT_BASE_URL,
        session: aiohttp.ClientSession | SessionHandle | None = None,
    ):
        if not cookie:
            raise ValueError("A session cookie is required for scraping.")
        self.cookie = cookie
        self.base_url = base_url.rstrip("/")
        self._handle = (
            session if isinstance(session, SessionHandle) else SessionHandle(session)
        )

    async def __aenter__(self) -> "WebLabScraper":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Releases the HTTP session if this scraper owns it."""
        await self._handle.close()

    def submission_url(self, assignment_id: int | str, platform_id: int | str) -> str:
        """The URL of a student's submission page for an assignment."""
        return f"{self.base_url}/x/y/assignment/{assignment_id}/submission/{platform_id}"

    async def _fetch_page(self, url: str) -> str:
        session = await self._handle.get()
        log.debug(f"Fetching page {url}")
        try:
            async with session.get(url, headers={"Cookie": self.cookie}) as response:
                if not 200 <= response.status < 300:
                    raise ScrapeError(
                        f"Fetching {url} failed with HTTP {response.status}."
                    )
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ScrapeError(f"Fetching {url} failed: {e}") from e

    async def get_submissions(self, assignment_id: int | str) -> list[SubmissionInfo]:
        """
        Lists all submissions of an assignment.

        Raises:
            ScrapeError: If the page could not be fetched.
            PageLayoutError: If the page does not match the expected layout.
        """
        url = f"{self.base_url}/assignment/{assignment_id}/submissions"
        page = await self._fetch_page(url)
        submissions = parse_submissions(page, assignment_id)
        log.info(f"Found {len(submissions)} submissions for assignment {assignment_id}")
        return submissions

    async def get_submission(self, target: SubmissionInfo | str) -> Submission:
        """
        Fetches the submitted code of one student.

        Args:
            target: A submission page URL or a row from ``get_submissions``.

        Raises:
            ScrapeError: If the page could not be fetched.
            PageLayoutError: If the page does not match the expected layout.
        """
        if target is None:
            raise ValueError("A submission or submission URL is required.")
        url = target.url if isinstance(target, SubmissionInfo) else str(target)
        if url.startswith("/"):
            url = self.base_url + url
        page = await self._fetch_page(url)
        return parse_submission(page)
