from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Messages
    LANGUAGE: str = "en"
    TRANSLATIONS_PATH: str | None = None  # YAML file of {lang: {rule_key: text}}

    # Struct fields
    ERROR_TAG: str = "json"  # dataclass field metadata key holding the display name

    # Engine
    MAX_DEPTH: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for structured JSON output, False for colored console

    class Config:
        env_file = ".env"
        env_prefix = "RULEBOOK_"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
