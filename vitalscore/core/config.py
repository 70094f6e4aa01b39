from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator

class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # Optional file handler in addition to stdout

    # Timezone used to turn bedtimes into minutes-from-midnight
    DEFAULT_TIMEZONE: str = "UTC"

    # Personal baseline window
    BASELINE_WINDOW_DAYS: int = 14
    BASELINE_MIN_SAMPLES: int = 5
    SLEEP_STAGE_BASELINE_MIN_SESSIONS: int = 7

    # Allow today's HRV / resting HR to come from older non-nightly samples
    # when last night's sleep lacks them. Off: only last night's values count.
    ALLOW_STALE_METRIC_FALLBACK: bool = False

    # --- Validators & Derived Settings ---
    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Optional[str]) -> str:
        if v is None or (isinstance(v, str) and v.strip() == ""):
            return "INFO"
        level = str(v).strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unsupported LOG_LEVEL '{v}'")
        return level

    @model_validator(mode="after")
    def _validate_baseline_window(self) -> "Settings":
        if self.BASELINE_MIN_SAMPLES < 1:
            raise ValueError("BASELINE_MIN_SAMPLES must be at least 1")
        if self.BASELINE_WINDOW_DAYS < self.BASELINE_MIN_SAMPLES:
            raise ValueError(
                "BASELINE_WINDOW_DAYS must be >= BASELINE_MIN_SAMPLES "
                f"({self.BASELINE_WINDOW_DAYS} < {self.BASELINE_MIN_SAMPLES})"
            )
        return self

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_prefix="VITALSCORE_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
