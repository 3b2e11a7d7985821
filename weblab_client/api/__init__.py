"""
WebLab REST API Layer.

Request descriptions, HMAC signing and the async dispatcher.
"""

from .client import WebLabAPIClient
from .requests import (
    HttpMethod,
    RequestInfo,
    RequestKind,
    push_grade_request,
    submission_request,
    submissions_request,
)
from .session import SessionHandle

__all__ = [
    "HttpMethod",
    "RequestInfo",
    "RequestKind",
    "SessionHandle",
    "WebLabAPIClient",
    "push_grade_request",
    "submission_request",
    "submissions_request",
]
