"""Client-side retry wrapper and upload helpers."""
import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from careerlift.client import CareerLiftClient, CareerLiftClientError
from careerlift.client.api_client import MAX_ATTEMPTS, backoff_delay
from careerlift.errors import AnalysisExhausted

ANALYSIS = {
    "resumeScore": 72,
    "missingSkills": ["SQL"],
    "recommendations": {"certifications": ["X"], "opportunities": ["Y"]},
    "summary": "Solid.",
    "timestamp": "2026-10-19T12:00:00+00:00",
    "careerGoal": "Data Scientist",
}


class RecordingSleep:

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def make_client(responses, sleep=None):
    requests = []

    def handler(request):
        requests.append(request)
        item = responses.pop(0) if responses else httpx.Response(500)
        if isinstance(item, Exception):
            raise item
        return item

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://careerlift.test")
    return CareerLiftClient(http_client=http, sleep=sleep or RecordingSleep()), requests


def test_backoff_schedule():
    assert [backoff_delay(n) for n in range(MAX_ATTEMPTS)] == [1, 2, 4, 8, 16]


class TestAnalyzeResume:

    @pytest.mark.asyncio
    async def test_exhausts_after_five_attempts(self):
        sleep = RecordingSleep()
        client, requests = make_client([httpx.Response(500) for _ in range(MAX_ATTEMPTS)], sleep)

        with pytest.raises(AnalysisExhausted) as exc_info:
            await client.analyze_resume("resume", "Data Scientist")

        assert len(requests) == 5
        assert sleep.delays == [1, 2, 4, 8, 16]
        assert exc_info.value.attempts == 5
        assert "500" in exc_info.value.last_error
        assert str(exc_info.value).startswith("Failed to analyze resume after 5 attempts")

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        sleep = RecordingSleep()
        client, requests = make_client(
            [httpx.ConnectError("refused"), httpx.Response(503), httpx.Response(200, json=ANALYSIS)],
            sleep,
        )

        analysis = await client.analyze_resume("resume", "Data Scientist")

        assert analysis["resumeScore"] == 72
        assert len(requests) == 3
        assert sleep.delays == [1, 2]
        assert json.loads(requests[0].content) == {"resumeText": "resume", "careerGoal": "Data Scientist"}

    @pytest.mark.asyncio
    async def test_non_json_body_is_retried(self):
        client, requests = make_client(
            [httpx.Response(200, text="<html>"), httpx.Response(200, json=ANALYSIS)]
        )

        analysis = await client.analyze_resume("resume", "Data Scientist")

        assert analysis["summary"] == "Solid."
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_sink_receives_analysis(self):
        client, requests = make_client([httpx.Response(200, json=ANALYSIS)])
        sink = AsyncMock()

        await client.analyze_resume("resume", "Data Scientist", sink=sink, user_id="user_1")

        sink.save.assert_awaited_once_with("user_1", ANALYSIS)
        assert requests[0].headers["X-User-ID"] == "user_1"

    @pytest.mark.asyncio
    async def test_sink_failure_does_not_fail_analysis(self):
        client, _ = make_client([httpx.Response(200, json=ANALYSIS)])
        sink = AsyncMock()
        sink.save.side_effect = RuntimeError("disk full")

        analysis = await client.analyze_resume("resume", "Data Scientist", sink=sink, user_id="user_1")

        assert analysis == ANALYSIS

    @pytest.mark.asyncio
    async def test_sink_skipped_without_user(self):
        client, _ = make_client([httpx.Response(200, json=ANALYSIS)])
        sink = AsyncMock()

        await client.analyze_resume("resume", "Data Scientist", sink=sink)

        sink.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_during_backoff(self):
        cancel = asyncio.Event()

        async def sleep_until_cancelled(delay):
            cancel.set()
            await asyncio.sleep(10)

        client, requests = make_client([httpx.Response(500), httpx.Response(200, json=ANALYSIS)], sleep_until_cancelled)

        with pytest.raises(asyncio.CancelledError):
            await client.analyze_resume("resume", "Data Scientist", cancel_event=cancel)
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_already_cancelled_sends_nothing(self):
        cancel = asyncio.Event()
        cancel.set()
        client, requests = make_client([httpx.Response(200, json=ANALYSIS)])

        with pytest.raises(asyncio.CancelledError):
            await client.analyze_resume("resume", "Data Scientist", cancel_event=cancel)
        assert requests == []


class TestUploadAndCourses:

    @pytest.mark.asyncio
    async def test_upload_returns_payload(self):
        client, requests = make_client(
            [httpx.Response(200, json={"extractedText": "Jane Doe", "characterCount": 8})]
        )

        result = await client.upload_resume_file("resume.pdf", b"%PDF", career_goal="Data Scientist")

        assert result["characterCount"] == 8
        assert b'name="careerGoal"' in requests[0].content

    @pytest.mark.asyncio
    async def test_upload_empty_text_is_error(self):
        client, _ = make_client([httpx.Response(200, json={"extractedText": "", "characterCount": 0})])

        with pytest.raises(CareerLiftClientError):
            await client.upload_resume_file("resume.pdf", b"%PDF")

    @pytest.mark.asyncio
    async def test_upload_http_error(self):
        client, _ = make_client([httpx.Response(400, json={"error": "No file uploaded."})])

        with pytest.raises(CareerLiftClientError) as exc_info:
            await client.upload_resume_file("resume.pdf", b"%PDF")
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_fetch_learning_resources(self):
        client, requests = make_client([httpx.Response(200, json={"courses": [], "fallback": True})])

        result = await client.fetch_learning_resources("Data Scientist", ["SQL"])

        assert result["fallback"] is True
        assert json.loads(requests[0].content) == {"role": "Data Scientist", "skills": ["SQL"]}
