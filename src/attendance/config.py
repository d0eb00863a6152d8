"""Attendance configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class AttendanceConfig(BaseSettings):
    """Attendance configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Schedule defaults (Sunday..Saturday)
    default_periods: list[int] = Field(
        default=[0, 6, 7, 8, 7, 6, 7],
        description="Periods per weekday, Sunday first (JSON list in env)",
    )
    default_percentage: float = Field(
        default=75,
        description="Required attendance percentage (0-100)",
    )
    holidays_file: str | None = Field(
        default=None,
        description="JSON file mapping month index to holiday day indices",
    )

    # Forward search
    search_horizon_days: int = Field(
        default=730,
        description="Days after the start date the required-date search may look",
    )

    # Advice generation (hosted text model)
    gemini_api_key: str = Field(
        default="",
        description="API key for the hosted text model; empty uses offline advice",
    )
    gemini_model: str = Field(
        default="gemini-pro",
        description="Model name used for attendance advice",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the generateContent API",
    )
    advisor_temperature: float = Field(
        default=0.5,
        description="Sampling temperature for advice generation",
    )
    advisor_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for a single advice request",
    )
    advisor_max_attempts: int = Field(
        default=3,
        description="Attempts before a transient advice failure is given up",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "ATTENDANCE_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: AttendanceConfig | None = None


def get_config() -> AttendanceConfig:
    """Get the attendance configuration singleton.

    Returns:
        AttendanceConfig: Attendance configuration instance
    """
    global _config
    if _config is None:
        _config = AttendanceConfig()
    return _config
