"""
Data Models Layer.

Value records parsed from WebLab pages, Pydantic models for REST responses,
and the validated client configuration.
"""

from .config import WebLabConfig
from .records import Student, StudentVerbose, Submission, SubmissionInfo
from .responses import (
    PushGradeResponseData,
    ResponseData,
    ResponseInfo,
    SubmissionResponseData,
    SubmissionsResponseData,
    SubmissionSummary,
    TaskForGrade,
)

__all__ = [
    "PushGradeResponseData",
    "ResponseData",
    "ResponseInfo",
    "Student",
    "StudentVerbose",
    "Submission",
    "SubmissionInfo",
    "SubmissionResponseData",
    "SubmissionSummary",
    "SubmissionsResponseData",
    "TaskForGrade",
    "WebLabConfig",
]
