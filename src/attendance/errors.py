"""Error hierarchy for attendance calculations and advice retrieval.

Input errors are raised for values a caller must fix before retrying.
Advice errors split transient failures (should retry) from permanent ones,
so tenacity retry decorators can classify them automatically.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def advise(request: AttendanceRequest) -> str:
        ...
"""


class AttendanceError(Exception):
    """Base exception for all attendance errors."""

    pass


class InputError(AttendanceError, ValueError):
    """Caller supplied values the calculator cannot work with.

    Examples: start date after end date, attended greater than total.
    """

    pass


class NoPeriodsError(InputError):
    """No periods exist for the requested range and counts.

    Usually means the weekday template is all zeros for the selected dates.
    """

    pass


class InvalidSimulationError(InputError):
    """A leave simulation produced an impossible attendance state."""

    pass


class AdviceError(AttendanceError):
    """Base exception for advice generation failures."""

    pass


class TransientError(AdviceError):
    """Temporary failure that may succeed on retry.

    Examples: network timeouts, 503 Service Unavailable, dropped connections.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded - needs longer backoff.

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(AdviceError):
    """Failure that won't succeed on retry.

    Examples: invalid API key, unknown model, malformed response payload.
    """

    pass
