"""
Configuration — Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed client configuration using:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- Every field has a default so the library imports without a `.env` file.
- `extra="ignore"`: unknown env vars are ignored (not an error).

Usage
-----
from avocat_assist.config.config import settings

api_url = settings.API_URL
token_key = settings.TOKEN_STORAGE_KEY

Notes
-----
- The settings object only provides defaults. The HTTP client, the credential
  store and the session store are built explicitly from these values (see
  `avocat_assist.app`) and can be constructed with other values in tests.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Client configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    API_URL: str = Field("http://localhost:5050/api", description="Base URL of the AvocatAssist REST API.")
    REQUEST_TIMEOUT: float = Field(30.0, description="Timeout (in seconds) applied to every HTTP request.")
    TOKEN_STORAGE_KEY: str = Field("token", description="Key under which the bearer token is persisted. The only credential key.")
    TOKEN_DB_URL: str = Field("sqlite:///avocat_assist.db", description="SQLAlchemy URL of the durable credential store.")
    UPLOAD_PROGRESS_INTERVAL: float = Field(0.2, description="Seconds between two ticks of the simulated upload progress.")
    UPLOAD_PROGRESS_STEP: int = Field(5, description="Percentage added by each simulated upload progress tick.")
    UPLOAD_PROGRESS_CAP: int = Field(95, description="Highest percentage reported before the upload response arrives.")
    SUGGESTION_LIMIT: int = Field(5, description="Maximum number of fallback suggestions drawn after an answer.")
    NOTIFICATION_HISTORY_LIMIT: int = Field(100, description="Number of past notifications kept by a `Notifier`.")
    DOWNLOAD_DIR: str = Field("downloads", description="Directory where downloaded documents are saved.")
    LOG_LEVEL: str = Field("INFO", description="Logging level used by `configure_logging`.")


# Singleton instance of Settings, ready to be imported across the package
settings = Settings()
"""Defines a Settings object that contains the contents of the environment / `.env` file"""
