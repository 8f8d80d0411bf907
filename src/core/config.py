import os
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_TITLE: str = os.getenv("APP_TITLE", "Support Ticket Management System")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    MAX_IMPORT_BYTES: int = 2 * 1024 * 1024
    SLOW_REQUEST_SECONDS: float = 2.0
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 1000

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
