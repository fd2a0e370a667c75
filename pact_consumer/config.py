from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.pact import pact_file_name


SpecificationVersion = Literal["1.0.0", "1.1.0", "2.0.0"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="")

    SERVICE_NAME: str = "pact-consumer"
    LOG_LEVEL: str = "INFO"

    # Contract output
    PACT_DIR: str = "/tmp/pacts"
    PACT_SPECIFICATION_VERSION: SpecificationVersion = "2.0.0"

    # Mock service
    PACT_MOCK_SERVICE_HOST: str = "localhost"
    PACT_MOCK_SERVICE_PORT: int = 1234
    PACT_MOCK_SERVICE_BINARY: str = "pact-mock-service"
    PACT_MOCK_SERVICE_START_TIMEOUT: float = 10.0

    # Default budget for each blocking wait in MockService.run()
    PACT_TIMEOUT: float = 10.0

    def pact_file_path(self, consumer: str, provider: str) -> Path:
        return Path(self.PACT_DIR) / pact_file_name(consumer, provider)


def get_settings() -> Settings:
    return Settings()
