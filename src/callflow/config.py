import logging
import os

from pydantic import BaseModel, field_validator

from callflow.streaming import PAUSE_MARKER

LOG_FORMAT = '%(asctime)s:%(name)s:%(levelname)s:%(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


class Settings(BaseModel):
    """Runtime settings, normally read from the environment."""

    model: str = "gpt-4o-2024-11-20"
    openai_api_key: str | None = None
    pause_marker: str = PAUSE_MARKER
    max_tool_rounds: int = 10
    booking_webhook_url: str | None = None
    booking_webhook_timeout: float = 10.0
    log_level: str = "INFO"

    @field_validator("pause_marker")
    @classmethod
    def _marker_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("pause_marker must be a visible character")
        return value

    @field_validator("max_tool_rounds")
    @classmethod
    def _positive_rounds(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_tool_rounds must be at least 1")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        env = {
            "model": os.getenv("CALLFLOW_MODEL"),
            "openai_api_key": os.getenv("OPENAI_API_KEY"),
            "pause_marker": os.getenv("CALLFLOW_PAUSE_MARKER"),
            "max_tool_rounds": os.getenv("CALLFLOW_MAX_TOOL_ROUNDS"),
            "booking_webhook_url": os.getenv("BOOKING_WEBHOOK_URL"),
            "booking_webhook_timeout": os.getenv("BOOKING_WEBHOOK_TIMEOUT"),
            "log_level": os.getenv("CALLFLOW_LOG_LEVEL"),
        }
        return cls(**{k: v for k, v in env.items() if v is not None})


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Set up root logging for an entry point. Not called on import."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
    )
