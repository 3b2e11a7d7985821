"""
Async client for the WebLab REST API (v0): submission data and grade pushing.
"""

import asyncio
import json
import logging
import time
from datetime import datetime
from typing import Any, TypeVar

import aiohttp
from pydantic import ValidationError

from weblab_client.models.responses import (
    PushGradeResponseData,
    ResponseData,
    ResponseInfo,
    SubmissionResponseData,
    SubmissionsResponseData,
    SubmissionSummary,
)
from weblab_client.utils.dates import is_unknown

from .requests import (
    DEFAULT_BASE_URL,
    RequestInfo,
    push_grade_request,
    submission_request,
    submissions_request,
)
from .session import SessionHandle

log = logging.getLogger(__name__)

T = TypeVar("T", bound=ResponseData)


class WebLabAPIClient:
    """
    Client for the key-authenticated WebLab REST API.

    Requests are signed with HMAC-SHA256 when an API secret is configured.
    Sending never raises for transport or decode failures; those come back as a
    ``ResponseInfo`` with ``success=False``.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        session: aiohttp.ClientSession | SessionHandle | None = None,
    ):
        """
        Initializes the API client.

        Args:
            api_key: The assignment's API key.
            api_secret: Optional API secret. Enables request signing.
            base_url: Root URL of the WebLab instance.
            session: An aiohttp session (borrowed, never closed by this client)
                or a shared ``SessionHandle``.
        """
        if not api_key:
            raise ValueError("An API key is required.")
        self.api_key = api_key
        self.api_secret = api_secret or None
        self.base_url = base_url.rstrip("/")
        self._handle = (
            session if isinstance(session, SessionHandle) else SessionHandle(session)
        )

    async def __aenter__(self) -> "WebLabAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Releases the HTTP session if this client owns it."""
        await self._handle.close()

    async def send(self, request: RequestInfo, model: type[T]) -> ResponseInfo[T]:
        """
        Sends a request and decodes the JSON response into ``model``.

        Args:
            request: The request description.
            model: The response model to decode into.

        Returns:
            The request paired with the decoded response. On a non-2xx status, an
            empty or invalid body, or a transport error, ``success`` is False and
            ``data`` is None.
        """
        session = await self._handle.get()
        params = request.signed_query()
        kwargs: dict[str, Any] = {"params": params}
        if request.use_body:
            kwargs["data"] = request.json_body()
            kwargs["headers"] = {"Content-Type": "application/json; charset=utf-8"}

        log.debug(f"Sending {request.method.value} {request.kind.value} request")
        start_time = time.monotonic()

        try:
            async with session.request(
                request.method.value, request.url, **kwargs
            ) as r:
                text = await r.text(encoding="utf-8")
                duration_ms = (time.monotonic() - start_time) * 1000
                log.debug(
                    f"{request.kind.value} answered {r.status} in {duration_ms:.0f}ms"
                )
                data = self._decode(r.status, text, model, request)
                return ResponseInfo(
                    request=request, success=data is not None, http_response=r, data=data
                )
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            log.warning(f"Request {request.kind.value} failed: {e}")
            return ResponseInfo(request=request, success=False)

    @staticmethod
    def _decode(
        status: int, text: str, model: type[T], request: RequestInfo
    ) -> T | None:
        if not 200 <= status < 300:
            log.warning(f"Request {request.kind.value} returned HTTP {status}")
            return None
        if not text or not text.strip():
            log.warning(f"Request {request.kind.value} returned an empty body")
            return None
        try:
            return model.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            log.warning(f"Could not decode {request.kind.value} response: {e}")
            return None

    # Public API Methods
    async def get_submissions(
        self, assignment: int
    ) -> ResponseInfo[SubmissionsResponseData]:
        request = submissions_request(
            self.api_key, assignment, self.api_secret, base_url=self.base_url
        )
        return await self.send(request, SubmissionsResponseData)

    async def get_submission(
        self, assignment: int, student: int
    ) -> ResponseInfo[SubmissionResponseData]:
        request = submission_request(
            self.api_key, assignment, student, self.api_secret, base_url=self.base_url
        )
        return await self.send(request, SubmissionResponseData)

    async def push_grade(
        self,
        grade: float,
        comment: str,
        save_date: datetime,
        *,
        netid: str | None = None,
        student: int | None = None,
        keep_last_n_comments: int = -1,
    ) -> ResponseInfo[PushGradeResponseData]:
        """
        Pushes a grade for a student identified by net-id or WebLab id.

        Raises:
            ValueError: If not exactly one of ``netid`` and ``student`` is given.
        """
        request = push_grade_request(
            self.api_key,
            grade,
            comment,
            save_date,
            netid=netid,
            student=student,
            keep_last_n_comments=keep_last_n_comments,
            api_secret=self.api_secret,
            base_url=self.base_url,
        )
        return await self.send(request, PushGradeResponseData)

    async def expand_submission(
        self,
        result: ResponseInfo[SubmissionsResponseData],
        summary: SubmissionSummary,
    ) -> ResponseInfo[SubmissionResponseData]:
        """
        Fetches the full submission behind one entry of a submissions listing,
        reusing the assignment and credentials of the listing request.
        """
        if result is None or summary is None:
            raise ValueError("Both the listing result and the summary are required.")
        origin = result.request
        request = submission_request(
            origin.api_key,
            origin.assignment,
            summary.student,
            origin.api_secret,
            base_url=origin.base_url,
        )
        return await self.send(request, SubmissionResponseData)

    async def push_grade_for(
        self,
        result: ResponseInfo[SubmissionResponseData],
        grade: float,
        comment: str,
        *,
        save_date: datetime | None = None,
        keep_last_n_comments: int = -1,
    ) -> ResponseInfo[PushGradeResponseData]:
        """
        Pushes a grade for a fetched submission.

        The save date defaults to the submission's own ``lastSavedAt``.
        """
        if result is None or result.data is None:
            raise ValueError("A successful submission result is required.")
        if save_date is None and is_unknown(result.data.last_saved_at_date):
            raise ValueError(
                "The submission has no known save date; pass save_date explicitly."
            )
        origin = result.request
        request = push_grade_request(
            origin.api_key,
            grade,
            comment,
            save_date if save_date is not None else result.data.last_saved_at_date,
            student=result.data.student,
            keep_last_n_comments=keep_last_n_comments,
            api_secret=origin.api_secret,
            base_url=origin.base_url,
        )
        return await self.send(request, PushGradeResponseData)
