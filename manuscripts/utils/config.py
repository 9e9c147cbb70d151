"""
Configuration loader for the manuscripts reader.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


class Config:
    """Configuration manager for the reader."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not self._config:
            self._load_config()

    def _get_project_root(self) -> Path:
        """Get the project root directory."""
        # Navigate up from manuscripts/utils to project root
        current = Path(__file__).resolve()
        return current.parent.parent.parent

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        override = os.environ.get("MANUSCRIPTS_CONFIG")
        if override:
            config_path = Path(override)
        else:
            config_path = self._get_project_root() / "config" / "settings.yaml"

        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or self._get_defaults()
        else:
            # Use defaults if config doesn't exist
            self._config = self._get_defaults()

    def reload(self) -> None:
        """Re-read the configuration file."""
        self._config = {}
        self._load_config()

    def _get_defaults(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "languages": {
                "primary": "en-US",
                "secondary": "el-GR",
            },
            "speech": {
                "rate": 1.0,
                "rates": [0.5, 1.0, 1.5],
                "auto_continue": False,
                "voices": {},
            },
            "practice": {
                "store_path": "data/practice.json",
            },
            "paths": {
                "corpus": "data/aligned_kjv_greek.csv",
            },
        }

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            config.get("speech", "rate") -> 1.0
        """
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
            if value is None:
                return default
        return value

    def get_path(self, *keys: str, default: str = "") -> Path:
        """Get a path configuration as absolute Path."""
        path = Path(self.get(*keys, default=default))
        if path.is_absolute():
            return path
        return self._get_project_root() / path

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        return self._get_project_root()

    @property
    def primary_language(self) -> str:
        """Language tag of the primary (translation) text."""
        return self.get("languages", "primary", default="en-US")

    @property
    def secondary_language(self) -> str:
        """Language tag of the secondary (Greek) text."""
        return self.get("languages", "secondary", default="el-GR")

    @property
    def speech_rate(self) -> float:
        """Get the default speech rate."""
        return float(self.get("speech", "rate", default=1.0))

    @property
    def speech_rates(self) -> List[float]:
        """Get the selectable speech rate presets."""
        return [float(r) for r in self.get("speech", "rates", default=[0.5, 1.0, 1.5])]

    @property
    def auto_continue(self) -> bool:
        """Whether playback advances to the next verse by default."""
        return bool(self.get("speech", "auto_continue", default=False))

    def voice_for(self, language: str) -> Optional[str]:
        """Get an explicitly configured voice id for a language tag."""
        return self.get("speech", "voices", language)

    @property
    def practice_store_path(self) -> Path:
        """Get the practice record file."""
        return self.get_path("practice", "store_path", default="data/practice.json")

    @property
    def corpus_path(self) -> Path:
        """Get the parallel verse CSV file."""
        return self.get_path("paths", "corpus", default="data/aligned_kjv_greek.csv")


# Singleton instance
config = Config()
