"""Tests for the REST dispatcher."""

import asyncio
import json
from datetime import datetime, timezone

import aiohttp
import pytest

from weblab_client.api.client import WebLabAPIClient
from weblab_client.api.requests import RequestKind, submissions_request
from weblab_client.models.responses import (
    SubmissionResponseData,
    SubmissionsResponseData,
)

from .conftest import FakeResponse, FakeSession

SUBMISSION_JSON = {
    "apiVersion": "0.1",
    "dataTimestamp": "20230401T120000+0200",
    "student": 42,
    "studentForGrade": True,
    "grade": 7.5,
    "lastSavedAt": "2023-04-01T10:00:00+00:00",
    "assignmentType": "Lab",
    "deadline": "2023-04-02T23:59:00+00:00",
    "solutionCode": "print('hi')",
    "userTestCode": "assert True",
    "taskForGrade": {
        "ranAt": "20230401T110000",
        "buildStatus": "SUCCESS",
        "numPassedTests": 9,
        "numFailedTests": 1,
        "numTotalTests": 10,
    },
}

SUBMISSIONS_JSON = {
    "apiVersion": "0.1",
    "dataTimestamp": "2023-04-01T12:00:00",
    "submissions": [
        {
            "student": 42,
            "studentForGrade": True,
            "grade": 7.5,
            "lastSavedAt": "2023-04-01T10:00:00",
        },
        {"student": 43, "studentForGrade": False, "grade": 0.0, "lastSavedAt": ""},
    ],
}

PUSH_JSON = {"apiVersion": "0.1", "dataTimestamp": "2023-04-01T12:00:00"}


def ok(payload):
    return FakeResponse(200, json.dumps(payload))


def run(coro):
    return asyncio.run(coro)


class TestSend:
    def test_decodes_submission(self):
        session = FakeSession(ok(SUBMISSION_JSON))
        client = WebLabAPIClient("key", session=session)

        result = run(client.get_submission(7, 42))

        assert result.success
        assert result.status == 200
        assert result.request.kind is RequestKind.SUBMISSION
        data = result.data
        assert isinstance(data, SubmissionResponseData)
        assert data.student == 42
        assert data.grade == 7.5
        assert data.task_for_grade.num_passed_tests == 9
        assert data.last_saved_at_date == datetime(2023, 4, 1, 10, tzinfo=timezone.utc)

    def test_decodes_submissions(self):
        session = FakeSession(ok(SUBMISSIONS_JSON))
        client = WebLabAPIClient("key", session=session)

        result = run(client.get_submissions(7))

        assert result.success
        assert isinstance(result.data, SubmissionsResponseData)
        assert [s.student for s in result.data.submissions] == [42, 43]

    def test_get_request_shape(self):
        session = FakeSession(ok(SUBMISSIONS_JSON))
        client = WebLabAPIClient("key", api_secret="s3cret", session=session)

        run(client.get_submissions(7))

        call = session.calls[0]
        assert call["method"] == "GET"
        assert call["url"].endswith("/api/V0/GET/SUBMISSIONS")
        assert "data" not in call
        assert list(call["params"]) == ["assignment", "apikey", "timestamp", "signature"]

    def test_post_request_shape(self):
        session = FakeSession(ok(PUSH_JSON))
        client = WebLabAPIClient("key", session=session)
        saved = datetime(2023, 4, 1, 12, tzinfo=timezone.utc)

        result = run(client.push_grade(8.0, "Good", saved, netid="abc123"))

        assert result.success
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["url"].endswith("/pushGrade/key")
        assert call["params"] == {}
        body = json.loads(call["data"].decode("utf-8"))
        assert body["netid"] == "abc123"
        assert body["saveDate"] == "1680350400000l"

    @pytest.mark.parametrize(
        "response",
        [
            FakeResponse(200, ""),
            FakeResponse(200, "   "),
            FakeResponse(200, "<html>not json</html>"),
            FakeResponse(200, json.dumps({"apiVersion": "0.1"})),
            FakeResponse(200, json.dumps([1, 2, 3])),
            FakeResponse(500, json.dumps(SUBMISSION_JSON)),
            FakeResponse(404, ""),
        ],
    )
    def test_failed_decode_is_not_raised(self, response):
        session = FakeSession(response)
        client = WebLabAPIClient("key", session=session)

        result = run(client.get_submission(7, 42))

        assert not result.success
        assert result.data is None
        assert result.http_response is response

    def test_transport_error_is_not_raised(self):
        session = FakeSession(aiohttp.ClientConnectionError("boom"))
        client = WebLabAPIClient("key", session=session)

        result = run(client.get_submissions(7))

        assert not result.success
        assert result.data is None
        assert result.http_response is None

    def test_timeout_is_not_raised(self):
        session = FakeSession(asyncio.TimeoutError())
        client = WebLabAPIClient("key", session=session)

        assert not run(client.get_submissions(7)).success

    def test_send_pairs_the_given_request(self):
        session = FakeSession(ok(SUBMISSIONS_JSON))
        client = WebLabAPIClient("key", session=session)
        request = submissions_request("other", 3, timestamp=1)

        result = run(client.send(request, SubmissionsResponseData))

        assert result.request is request
        assert session.calls[0]["params"]["apikey"] == "other"


class TestFollowUps:
    def test_expand_submission_reuses_listing_request(self):
        session = FakeSession(ok(SUBMISSIONS_JSON), ok(SUBMISSION_JSON))
        client = WebLabAPIClient("key", api_secret="s3cret", session=session)

        async def flow():
            listing = await client.get_submissions(7)
            return await client.expand_submission(listing, listing.data.submissions[0])

        result = run(flow())

        assert result.success
        params = session.calls[1]["params"]
        assert params["student"] == "42"
        assert params["assignment"] == "7"
        assert "signature" in params

    def test_push_grade_for_defaults_to_last_saved(self):
        session = FakeSession(ok(SUBMISSION_JSON), ok(PUSH_JSON))
        client = WebLabAPIClient("key", session=session)

        async def flow():
            submission = await client.get_submission(7, 42)
            return await client.push_grade_for(submission, 9.0, "Great")

        result = run(flow())

        assert result.success
        assert result.request.kind is RequestKind.PUSH_GRADE_STUDENT
        body = json.loads(session.calls[1]["data"].decode("utf-8"))
        assert body["student"] == "42"
        # 2023-04-01T10:00:00Z
        assert body["saveDate"] == "1680343200000l"

    def test_push_grade_for_rejects_failed_result(self):
        session = FakeSession(FakeResponse(500, ""))
        client = WebLabAPIClient("key", session=session)

        async def flow():
            failed = await client.get_submission(7, 42)
            await client.push_grade_for(failed, 9.0, "Great")

        with pytest.raises(ValueError):
            run(flow())
        assert len(session.calls) == 1

    def test_push_grade_for_requires_known_save_date(self):
        never_saved = {**SUBMISSION_JSON, "lastSavedAt": ""}
        session = FakeSession(ok(never_saved), ok(PUSH_JSON))
        client = WebLabAPIClient("key", session=session)

        async def flow():
            submission = await client.get_submission(7, 42)
            await client.push_grade_for(submission, 9.0, "Great")

        with pytest.raises(ValueError, match="save date"):
            run(flow())
        assert len(session.calls) == 1

    def test_push_grade_for_accepts_explicit_save_date(self):
        never_saved = {**SUBMISSION_JSON, "lastSavedAt": ""}
        session = FakeSession(ok(never_saved), ok(PUSH_JSON))
        client = WebLabAPIClient("key", session=session)
        save_date = datetime(2023, 4, 1, 10, 0, 0, tzinfo=timezone.utc)

        async def flow():
            submission = await client.get_submission(7, 42)
            return await client.push_grade_for(
                submission, 9.0, "Great", save_date=save_date
            )

        result = run(flow())

        assert result.success
        body = json.loads(session.calls[1]["data"].decode("utf-8"))
        assert body["saveDate"] == "1680343200000l"


class TestLifecycle:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            WebLabAPIClient("")

    def test_borrowed_session_is_not_closed(self):
        session = FakeSession()
        client = WebLabAPIClient("key", session=session)

        async def close_twice():
            await client.close()
            await client.close()

        run(close_twice())
        assert session.close_calls == 0
        assert not session.closed

    def test_context_manager_closes_owned_session(self):
        async def flow():
            async with WebLabAPIClient("key") as client:
                session = await client._handle.get()
            await client.close()
            return session

        session = run(flow())
        assert session.closed
