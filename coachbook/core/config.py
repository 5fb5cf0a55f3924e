from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives next to pyproject.toml; resolved from this file so cwd does not matter
PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: str = "development"

    # Storage
    database_url: str
    database_ssl: bool = True
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_echo: bool = False

    # Sessions (JWT)
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # Browser origins allowed to call the API, comma separated
    cors_origins: str = "http://localhost:3000"

    # Scheduling
    default_appointment_minutes: int = 60

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
