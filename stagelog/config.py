from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = "INFO"
    database_url: str = "sqlite+aiosqlite:///data/stagelog.db"
    default_adapter: str = "caveat"
    system_actor_id: str = "system"
    run_schedule: str = "06:00"

    # Rendering
    render_timeout_ms: int = 30000
    settle_delay_ms: int = 3000
    headless: bool = True
    http_timeout_seconds: float = 30.0

    # Date normalisation
    fallback_days: int = 7
    date_roll_forward: bool = True

    @field_validator("default_adapter", "system_actor_id", mode="before")
    @classmethod
    def strip_identifier(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("run_schedule", mode="before")
    @classmethod
    def default_empty_schedule(cls, v: str) -> str:
        if not v or not v.strip():
            return "06:00"
        return v

    model_config = {"env_prefix": "", "case_sensitive": False}


settings = Settings()
