"""
Pydantic models for the JSON documents returned by the WebLab REST API,
and the ``ResponseInfo`` pairing of a request with its decoded response.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from weblab_client.utils.dates import parse_timestamp

if TYPE_CHECKING:
    from weblab_client.api.requests import RequestInfo


class _WebLabModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ResponseData(_WebLabModel):
    """Fields present on every API response."""

    api_version: str
    data_timestamp: str

    @property
    def data_timestamp_date(self) -> datetime:
        return parse_timestamp(self.data_timestamp)


class PushGradeResponseData(ResponseData):
    """Response to a grade push."""


class TaskForGrade(_WebLabModel):
    """Result of the latest spec test run for a submission."""

    ran_at: str = ""
    build_status: str = ""
    num_passed_tests: int = 0
    num_failed_tests: int = 0
    num_total_tests: int = 0

    @property
    def ran_at_date(self) -> datetime:
        return parse_timestamp(self.ran_at)


class SubmissionResponseData(ResponseData):
    """Response to a SUBMISSION request."""

    student: int
    student_for_grade: bool
    grade: float
    last_saved_at: str = ""
    assignment_type: str = ""
    deadline: str = ""
    solution_code: str = ""
    user_test_code: str = ""
    task_for_grade: TaskForGrade | None = None

    @property
    def last_saved_at_date(self) -> datetime:
        return parse_timestamp(self.last_saved_at)

    @property
    def deadline_date(self) -> datetime:
        return parse_timestamp(self.deadline)


class SubmissionSummary(_WebLabModel):
    """One entry of a SUBMISSIONS response."""

    student: int
    student_for_grade: bool
    grade: float
    last_saved_at: str = ""

    @property
    def last_saved_at_date(self) -> datetime:
        return parse_timestamp(self.last_saved_at)


class SubmissionsResponseData(ResponseData):
    """Response to a SUBMISSIONS request."""

    submissions: list[SubmissionSummary] = Field(default_factory=list)


T = TypeVar("T", bound=ResponseData)


@dataclass(frozen=True)
class ResponseInfo(Generic[T]):
    """
    The outcome of sending a request.

    ``data`` is only set when ``success`` is True. ``http_response`` is the raw
    aiohttp response (already read) or None if the transport failed.
    """

    request: "RequestInfo"
    success: bool
    http_response: Any = None
    data: T | None = None

    @property
    def status(self) -> int | None:
        return getattr(self.http_response, "status", None)

    def __repr__(self) -> str:
        return (
            f"ResponseInfo(kind={self.request.kind.value}, success={self.success}, "
            f"status={self.status})"
        )
