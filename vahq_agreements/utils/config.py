"""Configuration management using pydantic-settings"""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    log_level: str = Field(default="INFO", description="Logging level")

    # Database mode: 'supabase' or 'sqlite'
    db_mode: str = Field(default="sqlite", description="Database backend: 'supabase' or 'sqlite'")
    database_path: str = Field(default="./data/vahq.db", description="Path to SQLite database")

    # Supabase settings
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_key: Optional[str] = Field(default=None, description="Supabase anon key")
    supabase_service_key: Optional[str] = Field(default=None, description="Supabase service role key")

    # Notifications
    notify_on_publish: bool = Field(default=True, description="Notify the client when an agreement is issued")

    # API settings
    api_title: str = Field(default="VAHQ Agreements API", description="Title shown in the API docs")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    """Get application settings"""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the configured log level to the root logger"""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
