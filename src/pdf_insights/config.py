from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from pdf_insights.errors import PdfInsightsError

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ConfigError(PdfInsightsError, ValueError):
    """Raised when required config is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str | None
    gemini_chat_model: str
    answer_temperature: float
    answer_timeout_s: float
    log_level: str


def _get_float_env(key: str, default: float) -> float:
    raw = os.getenv(key, str(default))
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got: {raw}") from exc


def load_settings() -> Settings:
    load_dotenv()
    settings = Settings(
        google_api_key=os.getenv("GOOGLE_API_KEY"),
        gemini_chat_model=os.getenv("GEMINI_CHAT_MODEL", "gemini-2.0-flash"),
        answer_temperature=_get_float_env("ANSWER_TEMPERATURE", 0.1),
        answer_timeout_s=_get_float_env("ANSWER_TIMEOUT_S", 0.0),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    )
    validate_settings(settings)
    return settings


def validate_settings(settings: Settings) -> None:
    if not 0.0 <= settings.answer_temperature <= 2.0:
        raise ConfigError("ANSWER_TEMPERATURE must be between 0 and 2")
    if settings.answer_timeout_s < 0:
        raise ConfigError("ANSWER_TIMEOUT_S must be >= 0")
    if settings.log_level not in _LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got: {settings.log_level}")


def require_api_key(settings: Settings) -> None:
    if not settings.google_api_key:
        raise ConfigError("GOOGLE_API_KEY is required but not set.")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
