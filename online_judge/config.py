import logging
from logging.config import dictConfig
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    ENVIRONMENT: str = "local"

    # JWT
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRY: int = 60 * 60 * 24  # seconds

    # API SERVER
    API_SERVER_PORT: int = 8000
    API_SERVER_HOST: str = "0.0.0.0"

    # Main DB (Online Judge)
    POSTGRES_DRIVER: str = "postgresql+asyncpg"
    POSTGRES_USER: str = "postgres"
    ONLINE_JUDGE_DB: str = "online_judge"
    ONLINE_JUDGE_PASSWORD: str = "postgres"
    ONLINE_JUDGE_PORT: int = 5432
    ONLINE_JUDGE_HOST_PROD: str = "db"
    DATABASE_URL: Optional[str] = None

    # Redis
    REDIS_HOST_PROD: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None

    # SMTP
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_SENDER: str = "no-reply@online-judge.local"
    SMTP_USE_TLS: bool = True

    # Verification codes
    VERIFICATION_CODE_LENGTH: int = 6
    VERIFICATION_CODE_EXPIRY: int = 5 * 60  # seconds
    VERIFICATION_CODE_SINGLE_USE: bool = False
    PICTURE_CODE_LENGTH: int = 5
    PICTURE_CODE_EXPIRY: int = 5 * 60  # seconds

    # Unique IDs
    SNOWFLAKE_NODE_ID: int = 1

    # Judge0
    JUDGE0_URL: str = "http://localhost:2358"
    JUDGE0_AUTH_TOKEN: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def ONLINE_JUDGE_DB_URL(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"{self.POSTGRES_DRIVER}://{self.POSTGRES_USER}:{self.ONLINE_JUDGE_PASSWORD}@{self.ONLINE_JUDGE_HOST}:{self.ONLINE_JUDGE_PORT}/{self.ONLINE_JUDGE_DB}"

    @property
    def REDIS_HOST(self) -> str:
        if self.ENVIRONMENT == "local":
            return "localhost"
        return self.REDIS_HOST_PROD

    @property
    def ONLINE_JUDGE_HOST(self) -> str:
        if self.ENVIRONMENT == "local":
            return "localhost"
        return self.ONLINE_JUDGE_HOST_PROD


Config = Settings()

# Ensure logs directory exists
log_dir = Path(Config.LOG_FILE).parent
log_dir.mkdir(parents=True, exist_ok=True)

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "passlib", "PIL")


def configure_logging(level: str = Config.LOG_LEVEL, log_file: str = Config.LOG_FILE):
    """Configure logging for the application.

    Every module logs through a child of the ``app`` logger
    (``app.auth``, ``app.problem``, ...), so handlers are attached once.
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "level": level,
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "level": level,
        },
    }
    loggers = {
        "app": {"handlers": list(handlers), "level": level, "propagate": False},
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(lineno)d - %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": "WARNING"},
    })
    return logging.getLogger("app")


# Initialize logger
logger = configure_logging()
