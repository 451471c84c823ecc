# src/dealfindr/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # Stamped on every assessment so stored results can be traced to a rule set
    CRITERIA_VERSION: str = Field(default="1.0.0")

    # -----------------------------
    # Text-generation provider (OpenAI-compatible gateway)
    # -----------------------------
    LLM_API_KEY: str | None = Field(default=None)
    LLM_BASE_URL: str | None = Field(default=None)
    LLM_MODEL: str = Field(default="dealfindrs")
    LLM_TEMPERATURE: float = Field(default=0.3)
    LLM_MAX_TOKENS: int = Field(default=4096)
    LLM_TIMEOUT_S: float = Field(default=30.0)

    model_config = SettingsConfigDict(
        env_prefix="DEALFINDR_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("LLM_TEMPERATURE", mode="before")
    @classmethod
    def _temperature_range(cls, v: Any) -> Any:
        try:
            f = float(v)
        except Exception as err:
            raise ValueError("LLM_TEMPERATURE must be numeric") from err
        if not (0.0 <= f <= 2.0):
            raise ValueError("LLM_TEMPERATURE must be between 0 and 2")
        return f

    @field_validator("LLM_MAX_TOKENS", "LLM_TIMEOUT_S", mode="before")
    @classmethod
    def _positive(cls, v: Any) -> Any:
        f = float(v)
        if f <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("LLM_API_KEY", "LLM_BASE_URL", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


config = AppConfig()
