"""
Runtime configuration for MRONJ Risk.

Settings come from environment variables and are cached for the process.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings:
    """Configuration read from the environment."""

    def __init__(self):
        self.knowledge_dir = Path(
            os.environ.get("MRONJ_KNOWLEDGE_DIR", PROJECT_ROOT / "knowledge")
        )
        self.output_dir = Path(os.environ.get("MRONJ_OUTPUT_DIR", Path.cwd() / "output"))
        self.log_level = os.environ.get("MRONJ_LOG_LEVEL", "WARNING").upper()
        self.host = os.environ.get("MRONJ_HOST", "127.0.0.1")
        self.port = int(os.environ.get("MRONJ_PORT", "8000"))

    @property
    def guidance_dir(self) -> Path:
        return self.knowledge_dir / "guidance"

    @property
    def log_level_number(self) -> int:
        """Numeric logging level, WARNING when the configured name is unknown."""
        if self.log_level not in LOG_LEVELS:
            return logging.WARNING
        return getattr(logging, self.log_level)


@lru_cache()
def get_settings() -> Settings:
    """Get the process-wide settings."""
    return Settings()
