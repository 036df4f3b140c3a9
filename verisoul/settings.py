import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

from verisoul.endpoints import VerisoulEnvironment


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # API Configuration
    api_key: str = Field(default="", alias="VERISOUL_API_KEY")
    environment: VerisoulEnvironment = Field(
        default=VerisoulEnvironment.SANDBOX, alias="VERISOUL_ENVIRONMENT"
    )

    # HTTP Configuration
    timeout: float = Field(default=30, ge=1, le=300, alias="VERISOUL_TIMEOUT")
    connect_timeout: float = Field(default=10, ge=1, alias="VERISOUL_CONNECT_TIMEOUT")

    # Retry Configuration
    retry_attempts: int = Field(default=3, ge=1, alias="VERISOUL_RETRY_ATTEMPTS")
    retry_delay_ms: int = Field(default=1000, ge=0, alias="VERISOUL_RETRY_DELAY_MS")

    # Circuit Breaker Configuration
    failure_threshold: int = Field(default=5, ge=1, alias="VERISOUL_FAILURE_THRESHOLD")
    breaker_timeout: float | None = Field(
        default=None, gt=0, alias="VERISOUL_BREAKER_TIMEOUT"
    )
    breaker_recovery_time: float = Field(
        default=300, ge=1, alias="VERISOUL_BREAKER_RECOVERY_TIME"
    )

    @model_validator(mode="after")
    def _check_connect_timeout(self) -> "Settings":
        if self.connect_timeout > self.timeout:
            raise ValueError(
                f"VERISOUL_CONNECT_TIMEOUT ({self.connect_timeout}) must not "
                f"exceed VERISOUL_TIMEOUT ({self.timeout})"
            )
        return self


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables.

    With no mapping given, a .env file is loaded into os.environ first.
    Unset or empty variables keep their defaults.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    values = {
        field.alias: env[field.alias]
        for field in Settings.model_fields.values()
        if field.alias and env.get(field.alias, "") != ""
    }
    return Settings.model_validate(values)
