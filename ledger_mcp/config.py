"""
Configuration for the ledger connection.
Values come from the environment or a local .env file.
"""
import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """
    Ledger connection settings.
    The ledger is an Actual Budget file served through actual-http-api.
    """
    actual_http_api_url: str = os.getenv("ACTUAL_HTTP_API_URL", "http://localhost:5007")
    actual_http_api_key: str = os.getenv("ACTUAL_HTTP_API_KEY", "")
    actual_budget_sync_id: str = os.getenv("ACTUAL_BUDGET_SYNC_ID", "")
    actual_budget_encryption_password: str | None = os.getenv("ACTUAL_BUDGET_ENCRYPTION_PASSWORD")
    ledger_timeout_seconds: float = 30.0
    log_level: str = "INFO"

    # Allow extra fields in .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
