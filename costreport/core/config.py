"""
Configuration module for loading environment variables.
All tunables for report assembly are read from the environment.
"""
import os
from typing import Tuple


def _split_prefixes(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class Config:
    """Application configuration loaded from environment variables."""

    # Report document
    OUTPUT_VERSION: str = os.getenv("COSTREPORT_OUTPUT_VERSION", "0.1")

    # Resource types with one of these prefixes belong to a supported provider
    SUPPORTED_PROVIDER_PREFIXES: Tuple[str, ...] = _split_prefixes(
        os.getenv("COSTREPORT_SUPPORTED_PROVIDERS", "aws_,google_,azurerm_")
    )

    # Unsupported resource types message
    SHOW_SKIPPED_FLAG: str = "--show-skipped"
    CALL_TO_ACTION_MESSAGE: str = os.getenv(
        "COSTREPORT_CALL_TO_ACTION",
        "Please watch/star https://github.com/infracost/infracost as new resources are added regularly."
    )

    # HTTP payload limits
    MAX_REQUEST_BODY_SIZE: int = int(os.getenv("COSTREPORT_MAX_REQUEST_BODY_SIZE", "5242880"))  # 5 MB
    MAX_PROJECTS: int = int(os.getenv("COSTREPORT_MAX_PROJECTS", "100"))
    MAX_RESOURCES_PER_PROJECT: int = int(os.getenv("COSTREPORT_MAX_RESOURCES_PER_PROJECT", "5000"))

    @classmethod
    def validate(cls) -> None:
        """
        Validates that required configuration values are set.

        Raises:
            ValueError: If any required configuration is missing or invalid.
        """
        if not cls.OUTPUT_VERSION:
            raise ValueError("COSTREPORT_OUTPUT_VERSION is required")
        if not cls.SUPPORTED_PROVIDER_PREFIXES:
            raise ValueError("COSTREPORT_SUPPORTED_PROVIDERS must list at least one prefix")

        for name in ("MAX_REQUEST_BODY_SIZE", "MAX_PROJECTS", "MAX_RESOURCES_PER_PROJECT"):
            if getattr(cls, name) <= 0:
                raise ValueError(f"{name} must be positive (got: {getattr(cls, name)})")


config = Config()
