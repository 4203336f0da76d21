from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///fitadmin.db"
    log_level: str = "INFO"
    sqlite_wal: bool = True
    echo_sql: bool = False

    model_config = SettingsConfigDict(
        env_prefix="FITADMIN_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
