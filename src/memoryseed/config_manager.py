"""
Configuration management for MemorySeed
"""

import copy
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from memoryseed.constants import (
    API_BATCH_SIZE,
    CLAUDE_DEFAULT_MODEL,
    CLAUDE_MAX_TOKENS,
    CLAUDE_TIMEOUT,
    DEDUP_SIMILARITY_THRESHOLD,
    EXTRACTION_DEFAULT_BACKEND,
    TECH_MIN_CONVERSATIONS,
    THEME_HIGH_CONFIDENCE_CONVERSATIONS,
    THEME_MIN_CONVERSATIONS,
)

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages MemorySeed configuration

    Values are read with dot notation, e.g. config.get('dedup.enabled').
    """

    DEFAULT_CONFIG = {
        "extraction": {
            "backend": EXTRACTION_DEFAULT_BACKEND,  # "auto", "heuristic", "api"
            "api_key": None,  # falls back to ANTHROPIC_API_KEY
            "model": CLAUDE_DEFAULT_MODEL,
            "max_tokens": CLAUDE_MAX_TOKENS,
            "timeout": CLAUDE_TIMEOUT,
            "batch_size": API_BATCH_SIZE
        },
        "thresholds": {
            "tech_min_conversations": TECH_MIN_CONVERSATIONS,
            "theme_min_conversations": THEME_MIN_CONVERSATIONS,
            "theme_high_confidence": THEME_HIGH_CONFIDENCE_CONVERSATIONS
        },
        "dedup": {
            "enabled": True,
            "similarity_threshold": DEDUP_SIMILARITY_THRESHOLD
        },
        "paths": {
            "candidates_file": ".memoryseed/candidates.json",
            "logs_dir": ".memoryseed/logs"
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager"""
        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = self._find_config_file()

        self.config = self.load()

    def _find_config_file(self) -> Path:
        """Find configuration file in standard locations"""
        # Check in order:
        # 1. .memoryseed/config.json in current directory
        # 2. ~/.memoryseed/config.json (user home)
        candidates = [
            Path.cwd() / ".memoryseed" / "config.json",
            Path.home() / ".memoryseed" / "config.json"
        ]

        for path in candidates:
            if path.exists():
                return path

        return candidates[0]

    def load(self) -> Dict[str, Any]:
        """Load configuration from file or use defaults"""
        if not self.config_path.exists():
            return copy.deepcopy(self.DEFAULT_CONFIG)

        try:
            with open(self.config_path, 'r') as f:
                user_config = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Invalid config file %s, using defaults", self.config_path)
            return copy.deepcopy(self.DEFAULT_CONFIG)

        if not isinstance(user_config, dict):
            logger.warning("Config file %s is not a JSON object, using defaults", self.config_path)
            return copy.deepcopy(self.DEFAULT_CONFIG)

        # User config overrides defaults
        return self._merge_configs(self.DEFAULT_CONFIG, user_config)

    def _merge_configs(self, default: Dict, user: Dict) -> Dict:
        """Recursively merge user config with defaults"""
        result = copy.deepcopy(default)

        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def save(self):
        """Save current configuration to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self.config, f, indent=2)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation
        Example: config.get('extraction.batch_size')
        """
        value = self.config

        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any):
        """
        Set configuration value using dot notation and persist it
        Example: config.set('dedup.enabled', False)
        """
        keys = key_path.split('.')
        config = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if not isinstance(config.get(key), dict):
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value
        self.save()

    def get_path(self, path_key: str) -> Path:
        """Get a configured path as a Path object"""
        path_value = self.get(f'paths.{path_key}')
        if path_value:
            return Path(path_value)
        raise ValueError(f"Path not configured: {path_key}")
