import pytest
import requests
from structlog.testing import capture_logs
from tenacity import wait_none

from attendance.advisor import (
    FALLBACK_ADVICE,
    GeminiAdvisor,
    RuleBasedAdvisor,
    build_advisor,
    build_prompt,
    get_attendance_advice,
    periods_missable,
    periods_needed,
)
from attendance.config import AttendanceConfig
from attendance.errors import PermanentError, RateLimitError, TransientError
from attendance.models import AttendanceRequest


def _request(attended, total, required=75):
    return AttendanceRequest(attended=attended, total=total, required_percentage=required)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append({"url": url, "params": params, "json": json, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _ok(text):
    return FakeResponse(payload={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def _advisor(session, **kwargs):
    return GeminiAdvisor(api_key="test-key", session=session, wait=wait_none(), **kwargs)


@pytest.mark.parametrize(
    "attended, total, required, needed",
    [(0, 10, 75, 30), (80, 100, 75, 0), (0, 0, 75, 1), (99, 100, 100, None), (36, 56, 75, 24)],
)
def test_periods_needed(attended, total, required, needed):
    assert periods_needed(_request(attended, total, required)) == needed


@pytest.mark.parametrize(
    "attended, total, required, missable",
    [(80, 100, 75, 6), (75, 100, 75, 0), (10, 100, 75, 0), (5, 10, 0, None)],
)
def test_periods_missable(attended, total, required, missable):
    assert periods_missable(_request(attended, total, required)) == missable


def test_rule_based_advice_below_threshold():
    advice = RuleBasedAdvisor().advise(_request(0, 10))
    assert "**0.00%**" in advice
    assert "next **30** periods" in advice


def test_rule_based_advice_with_small_buffer():
    advice = RuleBasedAdvisor().advise(_request(80, 100))
    assert "**6** period(s)" in advice


def test_rule_based_advice_with_large_buffer():
    advice = RuleBasedAdvisor().advise(_request(200, 200))
    assert "miss up to **66** periods" in advice


def test_rule_based_advice_at_the_line():
    assert "right at the line" in RuleBasedAdvisor().advise(_request(75, 100))


def test_rule_based_advice_without_periods():
    assert "No periods" in RuleBasedAdvisor().advise(_request(0, 0))


def test_rule_based_advice_unreachable():
    assert "can no longer be reached" in RuleBasedAdvisor().advise(_request(99, 100, 100))


def test_prompt_contains_numbers():
    prompt = build_prompt(_request(80, 100))
    assert "Periods attended: 80" in prompt
    assert "Total periods: 100" in prompt
    assert "75%" in prompt


def test_gemini_success_sends_prompt():
    session = FakeSession(_ok("Keep going!"))
    advisor = _advisor(session, model="gemini-test", temperature=0.2)

    assert advisor.advise(_request(80, 100)) == "Keep going!"

    call = session.calls[0]
    assert call["url"].endswith("/models/gemini-test:generateContent")
    assert call["params"] == {"key": "test-key"}
    assert call["json"]["generationConfig"]["temperature"] == 0.2
    assert "Periods attended: 80" in call["json"]["contents"][0]["parts"][0]["text"]


def test_gemini_retries_transient_errors():
    session = FakeSession(
        FakeResponse(status_code=503),
        requests.Timeout("read timed out"),
        _ok("Recovered"),
    )
    assert _advisor(session).advise(_request(0, 10)) == "Recovered"
    assert len(session.calls) == 3


def test_gemini_gives_up_after_max_attempts():
    session = FakeSession(*[FakeResponse(status_code=429) for _ in range(2)])
    with pytest.raises(RateLimitError):
        _advisor(session, max_attempts=2).advise(_request(0, 10))
    assert len(session.calls) == 2


def test_gemini_connection_error_is_transient():
    session = FakeSession(requests.ConnectionError("refused"))
    with pytest.raises(TransientError):
        _advisor(session, max_attempts=1).advise(_request(0, 10))


def test_gemini_client_error_is_not_retried():
    session = FakeSession(FakeResponse(status_code=400, text="bad key"))
    with pytest.raises(PermanentError):
        _advisor(session).advise(_request(0, 10))
    assert len(session.calls) == 1


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(payload={"candidates": []}),
        FakeResponse(payload=None),
        _ok("   "),
    ],
)
def test_gemini_malformed_response(response):
    with pytest.raises(PermanentError):
        _advisor(FakeSession(response)).advise(_request(0, 10))


def test_fallback_message_on_failure():
    session = FakeSession(FakeResponse(status_code=403))
    with capture_logs() as logs:
        advice = get_attendance_advice(_request(0, 10), _advisor(session))
    assert advice == FALLBACK_ADVICE
    assert any(entry["event"] == "advice_failed" for entry in logs)


def test_stub_advisor_through_boundary():
    advice = get_attendance_advice(_request(80, 100), RuleBasedAdvisor())
    assert advice != FALLBACK_ADVICE


def test_build_advisor_without_key_is_rule_based():
    assert isinstance(build_advisor(AttendanceConfig()), RuleBasedAdvisor)


def test_build_advisor_with_key():
    advisor = build_advisor(AttendanceConfig(gemini_api_key="secret", gemini_model="m"))
    assert isinstance(advisor, GeminiAdvisor)
    assert advisor.model == "m"


def test_unsendable_request_is_permanent():
    session = FakeSession(requests.exceptions.InvalidURL("bad url"))
    with pytest.raises(PermanentError):
        _advisor(session).advise(_request(0, 10))
    assert len(session.calls) == 1


def test_unsendable_request_falls_back():
    session = FakeSession(requests.exceptions.MissingSchema("no scheme"))
    assert get_attendance_advice(_request(0, 10), _advisor(session)) == FALLBACK_ADVICE
