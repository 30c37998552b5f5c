from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Guest Reviews Analyzer"
    app_env: str = "dev"
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s %(message)s"

    hostaway_api_url: str = "https://api.hostaway.com"
    hostaway_account_id: str = ""
    hostaway_api_key: str = ""
    hostaway_page_limit: int = Field(default=100, ge=1)
    hostaway_timeout_seconds: float = Field(default=10.0, gt=0)

    cache_duration_seconds: float = Field(default=3600, ge=0)
    fallback_dataset_path: str = "data/hostaway.json"

    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: object) -> object:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def hostaway_configured(self) -> bool:
        return bool(self.hostaway_account_id and self.hostaway_api_key)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
