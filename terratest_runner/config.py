"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is driven by environment variables."""

    # Go toolchain
    terratest_go_binary: str = "go"

    # Default test run options (overridable per request)
    terratest_tests_path: str = ""
    terratest_use_json_output: bool = False
    terratest_generate_html_report: bool = False
    terratest_disable_test_caching: bool = False
    terratest_create_log_file: bool = False
    terratest_arguments: list[str] = Field(default_factory=list)

    # "<N>m" or "<N>h"; unset means the arguments / 10 minute default decide
    terratest_timeout: Optional[str] = None

    # API key
    terratest_api_key: str = ""

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton – import this from anywhere
settings = Settings()
