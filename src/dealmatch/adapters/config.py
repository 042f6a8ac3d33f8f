# src/dealmatch/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # -----------------------------
    # Offer calculator market knobs
    # -----------------------------
    HOLDING_COST_PER_MONTH: float = Field(default=500.0)
    DEFAULT_HOLDING_MONTHS: int = Field(default=3)
    TARGET_PROFIT: float = Field(default=15000.0)
    ASSIGNMENT_FEE: float = Field(default=10000.0)
    CLOSING_COST_PCT: float = Field(default=0.03)

    # -----------------------------
    # Buyer matching
    # -----------------------------
    MIN_MATCH_SCORE: float = Field(default=50.0)

    # >1 scores buyers on a thread pool
    MATCH_WORKERS: int = Field(default=1)

    model_config = SettingsConfigDict(
        env_prefix="DEALMATCH_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("CLOSING_COST_PCT", mode="before")
    @classmethod
    def _to_non_negative_fraction(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        try:
            f = float(v)
        except Exception as err:
            raise ValueError("rate must be numeric or percent-like") from err
        if f > 1.0:
            f = f / 100.0
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f

    @field_validator(
        "HOLDING_COST_PER_MONTH",
        "TARGET_PROFIT",
        "ASSIGNMENT_FEE",
        mode="before",
    )
    @classmethod
    def _non_negative_amount(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().replace("$", "").replace(",", "")
        f = float(v)
        if f < 0:
            raise ValueError("amount must be non-negative")
        return f

    @field_validator("MIN_MATCH_SCORE", mode="before")
    @classmethod
    def _score_range(cls, v: Any) -> Any:
        f = float(v)
        if not (0.0 <= f <= 100.0):
            raise ValueError("MIN_MATCH_SCORE must be between 0 and 100")
        return f

    @field_validator("MATCH_WORKERS", "DEFAULT_HOLDING_MONTHS", mode="before")
    @classmethod
    def _non_negative_int(cls, v: Any) -> Any:
        i = int(v)
        if i < 0:
            raise ValueError("must be >= 0")
        return i


config = AppConfig()
