from typing import Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env into os.environ
load_dotenv()


class Settings(BaseSettings):
    """Application configuration settings backed by environment variables."""

    host: str = Field(default="", validation_alias="DATABRICKS_HOST")
    http_path: str = Field(default="", validation_alias="DATABRICKS_HTTP_PATH")
    catalog: str = Field(default="", validation_alias="DATABRICKS_CATALOG")
    token: SecretStr = Field(default=SecretStr(""), validation_alias="DATABRICKS_TOKEN")
    sqlalchemy_url: Optional[str] = Field(
        default=None,
        validation_alias="SQLALCHEMY_URL",
        description="Explicit SQLAlchemy URL. Overrides the URL assembled from host/http_path/token."
    )

    max_rows: int = Field(
        default=10000,
        ge=0,
        validation_alias="MAX_ROWS",
        description="Row cap appended as LIMIT to statements that carry none. 0 disables it."
    )
    statement_timeout_sec: float = Field(
        default=60,
        gt=0,
        validation_alias="STATEMENT_TIMEOUT_SEC",
        description="Deadline applied to every remote call."
    )
    retries: int = Field(
        default=5,
        ge=0,
        validation_alias="RETRIES",
        description="Connection acquisition attempts before giving up."
    )
    retry_pause_sec: float = Field(
        default=0,
        ge=0,
        validation_alias="RETRY_PAUSE_SEC",
        description="Pause between connection attempts."
    )
    retry_timeout_sec: float = Field(
        default=40,
        ge=0,
        validation_alias="RETRY_TIMEOUT_SEC",
        description="Total time budget for connection attempts."
    )

    exec_workers: int = Field(
        default=4,
        ge=1,
        validation_alias="EXEC_WORKERS",
        description="Worker threads used to bound remote calls by their deadline."
    )
    null_text: str = Field(
        default="",
        validation_alias="NULL_TEXT",
        description="Display text used for NULL cells in result frames."
    )

    breaker_fail_max: int = Field(
        default=5,
        ge=1,
        validation_alias="BREAKER_FAIL_MAX",
        description="Consecutive remote failures that open the circuit breaker."
    )
    breaker_reset_sec: float = Field(
        default=30,
        gt=0,
        validation_alias="BREAKER_RESET_SEC",
        description="Seconds the breaker stays open before a trial call."
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def configure_env(self, env: str) -> None:
        """Loads environment-specific variables and reloads settings."""
        if not env:
            return

        load_dotenv(f".env.{env}", override=True)
        new_settings = Settings()
        self.__dict__.update(new_settings.__dict__)

settings = Settings()

# Configure logging during import
from bricksql.common.logger import configure_logging
configure_logging(
    level="DEBUG" if settings.debug else settings.log_level,
    json_format=settings.log_json
)
