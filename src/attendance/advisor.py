"""Attendance advice: an offline rule-based advisor and a hosted-model client.

Both implement the Advisor protocol (``advise(request) -> str``). Callers use
get_attendance_advice(), which turns any AdviceError into a fallback message.
"""

import math
from fractions import Fraction
from typing import Protocol

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from attendance.config import AttendanceConfig
from attendance.errors import (
    AdviceError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from attendance.logging import get_logger
from attendance.models import AttendanceRequest

log = get_logger(__name__)

FALLBACK_ADVICE = (
    "Sorry, I couldn't generate advice at this moment. Please try again later."
)

PROMPT_TEMPLATE = """You are a friendly assistant for an attendance calculator. \
Give the user personalized, actionable advice about their attendance.

Current situation:
- Periods attended: {attended}
- Total periods: {total}
- Required attendance percentage: {required}%

If attendance is below the required percentage, state the current percentage, \
how many periods they are short, and how many upcoming periods they must attend \
without fail to reach {required}%.
If attendance is comfortably above it, tell them exactly how many periods they \
can miss (their buffer); with a buffer above 10 periods, suggest a well-being \
activity for a day off.
If attendance is at or just above it, congratulate them and advise caution.

Keep the tone friendly, supportive, and slightly informal. Use bold markdown \
for key numbers and percentages.
"""


class Advisor(Protocol):
    def advise(self, request: AttendanceRequest) -> str: ...


def build_prompt(request: AttendanceRequest) -> str:
    return PROMPT_TEMPLATE.format(
        attended=request.attended,
        total=request.total,
        required=f"{request.required_percentage:g}",
    )


def periods_needed(request: AttendanceRequest) -> int | None:
    """Consecutive attended periods needed to reach the requirement.

    Returns 0 when already met and None when it can never be reached
    (a 100% requirement after any absence).
    """
    ratio = Fraction(request.required_percentage).limit_denominator() / 100
    attended, total = request.attended, request.total
    if total == 0:
        return 1 if ratio > 0 else 0
    if Fraction(attended, total) >= ratio:
        return 0
    if ratio >= 1:
        return None if attended < total else 0
    return max(0, math.ceil((ratio * total - attended) / (1 - ratio)))


def periods_missable(request: AttendanceRequest) -> int | None:
    """Periods that can be missed while staying at the requirement.

    Returns None when any number can be missed (a 0% requirement).
    """
    ratio = Fraction(request.required_percentage).limit_denominator() / 100
    if ratio == 0:
        return None
    return max(0, math.floor(request.attended / ratio - request.total))


class RuleBasedAdvisor:
    """Deterministic advice computed locally; needs no network access."""

    def advise(self, request: AttendanceRequest) -> str:
        required = f"{request.required_percentage:g}%"
        if request.total == 0:
            return (
                "No periods have been recorded yet. Attend every class from the "
                f"start to stay above **{required}**."
            )

        current = request.attended / request.total * 100
        needed = periods_needed(request)
        if needed is None:
            return (
                f"You are at **{current:.2f}%**. A **{required}** requirement "
                "can no longer be reached after a missed period."
            )
        if needed > 0:
            return (
                f"You are currently at **{current:.2f}%**. To reach the required "
                f"**{required}**, you need to attend the next **{needed}** "
                "periods without fail."
            )

        missable = periods_missable(request)
        if missable is None:
            return f"You are at **{current:.2f}%** and there is no minimum to keep."
        if missable > 10:
            return (
                f"Your attendance is looking great at **{current:.2f}%**! You can "
                f"miss up to **{missable}** periods. Maybe it's a good time to take "
                "a day for that hobby you love."
            )
        if missable > 0:
            return (
                f"You're on track at **{current:.2f}%**. You can miss "
                f"**{missable}** period(s), but be careful."
            )
        return (
            f"You're right at the line with **{current:.2f}%**. Don't miss any "
            "periods for now."
        )


class GeminiAdvisor:
    """Advice from a hosted model through the ``generateContent`` REST API.

    Transient failures (timeouts, 5xx, 429) are retried with exponential
    backoff; anything else fails fast as a PermanentError.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-pro",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        temperature: float = 0.5,
        timeout: float = 30.0,
        max_attempts: int = 3,
        session: requests.Session | None = None,
        wait: wait_base | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.session = session if session is not None else requests.Session()
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, max=10)

    @classmethod
    def from_config(
        cls, config: AttendanceConfig, session: requests.Session | None = None
    ) -> "GeminiAdvisor":
        return cls(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            base_url=config.gemini_base_url,
            temperature=config.advisor_temperature,
            timeout=config.advisor_timeout_seconds,
            max_attempts=config.advisor_max_attempts,
            session=session,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def advise(self, request: AttendanceRequest) -> str:
        """Generate advice for ``request``.

        Raises:
            TransientError: If every attempt failed with a retryable error.
            PermanentError: If the request was rejected or the reply is malformed.
        """
        prompt = build_prompt(request)
        for attempt in Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        ):
            with attempt:
                return self._generate(prompt)

    def _generate(self, prompt: str) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.temperature},
        }
        try:
            resp = self.session.post(
                self.endpoint,
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            log.warning("advice_request_failed", error=str(e), type=type(e).__name__)
            raise TransientError(f"Advice request failed: {e}") from e
        except requests.RequestException as e:
            log.error("advice_request_invalid", error=str(e), type=type(e).__name__)
            raise PermanentError(f"Advice request could not be sent: {e}") from e

        if resp.status_code == 429:
            log.warning("advice_rate_limited", model=self.model)
            raise RateLimitError("Advice service rate limit exceeded")
        if resp.status_code >= 500:
            log.warning("advice_server_error", status=resp.status_code)
            raise TransientError(f"Advice service error: {resp.status_code}")
        if resp.status_code != 200:
            log.error("advice_rejected", status=resp.status_code, body=resp.text[:200])
            raise PermanentError(f"Advice request rejected: {resp.status_code}")

        try:
            payload = resp.json()
            parts = payload["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts).strip()
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise PermanentError(f"Malformed advice response: {e}") from e
        if not text:
            raise PermanentError("Advice response contained no text")

        log.info("advice_generated", model=self.model, chars=len(text))
        return text


def build_advisor(config: AttendanceConfig) -> Advisor:
    """Hosted-model advisor when an API key is configured, else rule-based."""
    if config.gemini_api_key:
        return GeminiAdvisor.from_config(config)
    log.debug("advisor_selected", type="rule_based", reason="no_api_key")
    return RuleBasedAdvisor()


def get_attendance_advice(request: AttendanceRequest, advisor: Advisor) -> str:
    """Advice text for ``request``, or FALLBACK_ADVICE if the advisor fails."""
    try:
        return advisor.advise(request)
    except AdviceError as e:
        log.error("advice_failed", error=str(e), type=type(e).__name__)
        return FALLBACK_ADVICE
