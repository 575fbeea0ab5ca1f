"""
Configuration for the SmartLists engine.
Reads settings.json and environment overrides (optionally from a .env file).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from smartlists.core.logging import setup_logging
from smartlists.services.smart_lists import RuleCompiler, SmartListEvaluator
from smartlists.utils.name_utils import DEFAULT_NAME_SUFFIX

logger = logging.getLogger("smartlists.config")


__all__ = ["Config", "config"]


def _split_fields(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Config:
    """
    Central configuration for smart list evaluation.
    Holds list-name decoration, similarity defaults and evaluation settings.
    """

    APP_DIR: Path = Path(__file__).parent.parent
    DATA_DIR: Path = APP_DIR / "data"

    SETTINGS_FILE: Path = DATA_DIR / "settings.json"

    # List name decoration, stripped again by Collections rules
    NAME_PREFIX: str = ""
    NAME_SUFFIX: str = DEFAULT_NAME_SUFFIX

    # None means Genre + Tags
    SIMILARITY_FIELDS: list[str] | None = None

    MAX_WORKERS: int = 1
    STRICT_RULES: bool = False
    LOG_LEVEL: str = "INFO"

    def __post_init__(self):
        """Apply environment overrides and load settings after instantiation."""
        load_dotenv()

        env_prefix = os.getenv("SMARTLISTS_NAME_PREFIX")
        if env_prefix is not None:
            self.NAME_PREFIX = env_prefix

        env_suffix = os.getenv("SMARTLISTS_NAME_SUFFIX")
        if env_suffix is not None:
            self.NAME_SUFFIX = env_suffix

        env_fields = os.getenv("SMARTLISTS_SIMILARITY_FIELDS")
        if env_fields:
            self.SIMILARITY_FIELDS = _split_fields(env_fields)

        env_workers = os.getenv("SMARTLISTS_MAX_WORKERS")
        if env_workers:
            try:
                self.MAX_WORKERS = max(1, int(env_workers))
            except ValueError:
                logger.warning("Ignoring invalid SMARTLISTS_MAX_WORKERS=%s", env_workers)

        env_level = os.getenv("SMARTLISTS_LOG_LEVEL")
        if env_level:
            self.LOG_LEVEL = env_level.upper()

        self._load_settings()

    def _load_settings(self) -> None:
        """Load settings from JSON file."""
        if not self.SETTINGS_FILE.exists():
            return

        try:
            with open(self.SETTINGS_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)

                self.NAME_PREFIX = data.get("name_prefix", self.NAME_PREFIX)
                self.NAME_SUFFIX = data.get("name_suffix", self.NAME_SUFFIX)
                self.SIMILARITY_FIELDS = data.get("similarity_fields", self.SIMILARITY_FIELDS)
                self.MAX_WORKERS = max(1, int(data.get("max_workers", self.MAX_WORKERS)))
                self.STRICT_RULES = bool(data.get("strict_rules", self.STRICT_RULES))
                self.LOG_LEVEL = str(data.get("log_level", self.LOG_LEVEL)).upper()

        except (OSError, json.JSONDecodeError, ValueError, TypeError) as e:
            logger.error("Could not load settings from %s: %s", self.SETTINGS_FILE, e)

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = {
            "name_prefix": self.NAME_PREFIX,
            "name_suffix": self.NAME_SUFFIX,
            "similarity_fields": self.SIMILARITY_FIELDS,
            "max_workers": self.MAX_WORKERS,
            "strict_rules": self.STRICT_RULES,
            "log_level": self.LOG_LEVEL,
        }

        try:
            self.SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
            with open(self.SETTINGS_FILE, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error("Could not save settings to %s: %s", self.SETTINGS_FILE, e)

    def apply_logging(self, log_file: Path | None = None) -> None:
        """Configures the smartlists logger with LOG_LEVEL."""
        setup_logging(self.LOG_LEVEL, log_file)

    def create_evaluator(self) -> SmartListEvaluator:
        """Builds a SmartListEvaluator wired with these settings."""
        compiler = RuleCompiler(name_prefix=self.NAME_PREFIX, name_suffix=self.NAME_SUFFIX)
        return SmartListEvaluator(
            compiler=compiler,
            strict=self.STRICT_RULES,
            max_workers=self.MAX_WORKERS,
            default_comparison_fields=self.SIMILARITY_FIELDS,
        )


# Global instance
config = Config()
