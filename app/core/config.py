from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        extra="ignore"  # Ignore extra fields in .env
    )

    database_url: str = "sqlite:///./taskflow.db"
    db_connect_retries: int = 30
    db_connect_retry_interval: float = 2.0

    sendgrid_api_key: Optional[str] = None
    sendgrid_from_email: Optional[str] = None

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12
    otp_expire_minutes: int = 24 * 60

    environment: str = "development"
    debug: bool = True

    host: str = "0.0.0.0"
    port: int = 3001

    frontend_url: Optional[List[str]] = None

settings = Settings()
