"""Configuration management for kmp-impact.

Values come from environment variables, optionally loaded from a ``.env``
file in the working directory. Command-line options take precedence.
"""
import os
from pathlib import Path
from typing import Optional, Set

from dotenv import load_dotenv

from .utils.file_utils import EXCLUDED_DIRS

__version__ = "0.1.0"

DEFAULT_FORMAT = "table"
DEFAULT_TOP_N = 10
DEFAULT_MAX_DEPTH = 5


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Optional[str | Path] = None):
        """Load the .env file (if any) into the environment.

        Args:
            env_path: Explicit .env location; defaults to ./.env
        """
        env_path = Path(env_path) if env_path else Path.cwd() / ".env"
        if env_path.is_file():
            load_dotenv(env_path)

    @staticmethod
    def _int_env(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {raw!r}")
        if value < 1:
            raise ValueError(f"{name} must be at least 1, got {value}")
        return value

    @property
    def output_format(self) -> str:
        """Default report format (table, json or markdown)."""
        return os.getenv("KMP_IMPACT_FORMAT", DEFAULT_FORMAT).strip().lower()

    @property
    def top_n(self) -> int:
        """How many top symbols each platform lists."""
        return self._int_env("KMP_IMPACT_TOP_N", DEFAULT_TOP_N)

    @property
    def max_depth(self) -> int:
        """Directory depth searched for build files and manifests."""
        return self._int_env("KMP_IMPACT_MAX_DEPTH", DEFAULT_MAX_DEPTH)

    @property
    def excluded_dirs(self) -> Set[str]:
        """Built-in excluded directories plus KMP_IMPACT_EXCLUDED_DIRS entries.

        Returns:
            Set of directory names never scanned
        """
        extra = os.getenv("KMP_IMPACT_EXCLUDED_DIRS", "")
        names = {name.strip() for name in extra.split(",") if name.strip()}
        return set(EXCLUDED_DIRS) | names


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Forget the cached Config so the next get_config() re-reads .env."""
    global _config
    _config = None
