"""
Declarative descriptions of WebLab REST requests.

Each endpoint is a small builder function producing an immutable
``RequestInfo``; the dispatcher in ``client.py`` turns it into an HTTP call.
"""

import json
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from weblab_client.utils.dates import to_epoch_milliseconds

from .signing import canonical_query, sign_query

DEFAULT_BASE_URL = "https://weblab.tudelft.nl"
DATA_PATH = "/api/V0/GET"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class RequestKind(str, Enum):
    """The endpoint a request targets."""

    SUBMISSIONS = "SUBMISSIONS"
    SUBMISSION = "SUBMISSION"
    PUSH_GRADE_NETID = "PUSH_GRADE_NETID"
    PUSH_GRADE_STUDENT = "PUSH_GRADE_STUDENT"


def _frozen(mapping: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class RequestInfo:
    """A single REST request: target, verb, parameters and credentials."""

    kind: RequestKind
    method: HttpMethod
    path: str
    api_key: str
    api_secret: str | None = field(default=None, repr=False)
    query: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, str] | None = None
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self):
        object.__setattr__(self, "query", _frozen(self.query))
        if self.body is not None:
            object.__setattr__(self, "body", _frozen(self.body))

    @property
    def use_body(self) -> bool:
        return self.method is HttpMethod.POST

    @property
    def use_hmac(self) -> bool:
        return bool(self.api_secret and self.api_secret.strip())

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    @property
    def assignment(self) -> int | None:
        """The assignment id of a data request, if it names one."""
        value = self.query.get("assignment")
        return int(value) if value is not None else None

    def signed_query(self) -> dict[str, str]:
        """The query parameters to send, with a signature if a secret is set."""
        if self.use_hmac:
            return sign_query(self.query, self.api_secret)
        return dict(self.query)

    def query_string(self) -> str:
        return canonical_query(self.signed_query())

    def json_body(self) -> bytes | None:
        """The UTF-8 encoded JSON body of a POST request, None for GET."""
        if not self.use_body:
            return None
        return json.dumps(dict(self.body or {})).encode("utf-8")


def _data_request(
    kind: RequestKind,
    api_key: str,
    params: dict[str, str],
    api_secret: str | None,
    timestamp: int | None,
    base_url: str,
) -> RequestInfo:
    if not api_key:
        raise ValueError("An API key is required for data requests.")
    query = dict(params)
    query["apikey"] = api_key
    query["timestamp"] = str(int(time.time()) if timestamp is None else timestamp)
    return RequestInfo(
        kind=kind,
        method=HttpMethod.GET,
        path=f"{DATA_PATH}/{kind.value}",
        api_key=api_key,
        api_secret=api_secret,
        query=query,
        base_url=base_url,
    )


def submissions_request(
    api_key: str,
    assignment: int,
    api_secret: str | None = None,
    timestamp: int | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> RequestInfo:
    """Lists all submissions of an assignment."""
    return _data_request(
        RequestKind.SUBMISSIONS,
        api_key,
        {"assignment": str(int(assignment))},
        api_secret,
        timestamp,
        base_url,
    )


def submission_request(
    api_key: str,
    assignment: int,
    student: int,
    api_secret: str | None = None,
    timestamp: int | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> RequestInfo:
    """Fetches a single student's submission for an assignment."""
    return _data_request(
        RequestKind.SUBMISSION,
        api_key,
        {"student": str(int(student)), "assignment": str(int(assignment))},
        api_secret,
        timestamp,
        base_url,
    )


def _format_grade(grade: float) -> str:
    # Shortest round-trip form, integral grades without a trailing ".0".
    text = repr(float(grade))
    return text[:-2] if text.endswith(".0") else text


def push_grade_request(
    api_key: str,
    grade: float,
    comment: str,
    save_date: datetime,
    *,
    netid: str | None = None,
    student: int | None = None,
    keep_last_n_comments: int = -1,
    api_secret: str | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> RequestInfo:
    """
    Pushes a grade for one student.

    Args:
        api_key: The assignment's API key.
        grade: The grade to push.
        comment: Feedback shown to the student.
        save_date: The save time of the graded submission.
        netid: Identify the student by net-id (or username/student number).
        student: Identify the student by WebLab platform id.
        keep_last_n_comments: Number of earlier feedback entries to keep, -1 for all.
        api_secret: Optional secret; when set the request is signed.

    Raises:
        ValueError: If not exactly one of ``netid`` and ``student`` is given.
    """
    if not api_key:
        raise ValueError("An API key is required to push grades.")
    if (netid is None) == (student is None):
        raise ValueError("Exactly one of 'netid' or 'student' must be given.")
    if save_date is None:
        raise ValueError("A save date is required to push grades.")

    if netid is not None:
        kind, identify = RequestKind.PUSH_GRADE_NETID, ("netid", str(netid))
    else:
        kind, identify = RequestKind.PUSH_GRADE_STUDENT, ("student", str(int(student)))

    body = {
        identify[0]: identify[1],
        "grade": _format_grade(grade),
        "comment": comment or "",
        "saveDate": f"{to_epoch_milliseconds(save_date)}l",
        "keepLastNComments": str(int(keep_last_n_comments)),
    }
    return RequestInfo(
        kind=kind,
        method=HttpMethod.POST,
        path=f"/pushGrade/{api_key}",
        api_key=api_key,
        api_secret=api_secret,
        body=body,
        base_url=base_url,
    )
