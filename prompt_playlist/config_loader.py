"""
Configuration Loader - Manages YAML configuration and environment variables
"""
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from .config import PipelineConfig, default_pipeline_config


class Config:
    """Configuration manager for playlist generation"""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = config_path
        self.config = self._load_config()
        self._validate_config()

    def _load_config(self) -> dict:
        """Load configuration from YAML file"""
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def _validate_config(self):
        """Validate required configuration fields"""
        required_fields = [
            ('catalog', 'path'),
        ]
        # The API key may come from the environment instead of the file
        if not os.getenv('OPENAI_API_KEY'):
            required_fields.append(('openai', 'api_key'))

        for section, field in required_fields:
            if section not in self.config or not isinstance(self.config[section], dict):
                raise ValueError(f"Missing configuration section: {section}")
            if field not in self.config[section]:
                raise ValueError(f"Missing configuration field: {section}.{field}")

            # Check if value is placeholder or empty
            value = self.config[section][field]
            if not value or str(value).startswith('YOUR_'):
                raise ValueError(f"Please set {section}.{field} in {self.config_path}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            section: Configuration section
            key: Configuration key
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        if not isinstance(self.config.get(section), dict):
            return default
        return self.config[section].get(key, default)

    @property
    def openai_api_key(self) -> str:
        """Get OpenAI API key (with environment variable override)"""
        return os.getenv('OPENAI_API_KEY') or self.get('openai', 'api_key', '')

    @property
    def openai_model(self) -> str:
        """Get OpenAI model"""
        return self.get('openai', 'model', 'gpt-4o-mini')

    @property
    def openai_timeout_seconds(self) -> float:
        """Get timeout for a single completion request"""
        return float(self.get('openai', 'timeout_seconds', 30))

    @property
    def openai_temperature(self) -> float:
        """Get sampling temperature for track selection"""
        return float(self.get('openai', 'temperature', 0.7))

    @property
    def catalog_path(self) -> str:
        """Get catalog location (JSON file or SQLite database)"""
        return self.config['catalog']['path']

    @property
    def catalog_backend(self) -> str:
        """Get catalog backend ('json' or 'sqlite'), inferred from the path suffix if unset"""
        backend = self.get('catalog', 'backend')
        if backend:
            return str(backend).lower()
        suffix = Path(self.catalog_path).suffix.lower()
        return 'sqlite' if suffix in ('.db', '.sqlite', '.sqlite3') else 'json'

    @property
    def catalog_table(self) -> str:
        """Get SQLite table holding catalog rows"""
        return self.get('catalog', 'table', 'artist_tracks')

    @property
    def activity_table_path(self) -> Optional[str]:
        """Get optional override for the packaged activity/BPM table"""
        return self.get('intent', 'activity_table_path')

    @property
    def log_level(self) -> str:
        """Get console log level"""
        return self.get('logging', 'level', 'INFO')

    @property
    def log_file(self) -> Optional[str]:
        """Get optional log file path"""
        return self.get('logging', 'file')

    def pipeline_config(self) -> PipelineConfig:
        """Return immutable pipeline settings (pipeline section + openai section)."""
        overrides = dict(self.config.get('pipeline', {}) or {})
        llm = dict(overrides.get('llm', {}) or {})
        llm.setdefault('model', self.openai_model)
        llm.setdefault('temperature', self.openai_temperature)
        llm.setdefault('timeout_seconds', self.openai_timeout_seconds)
        overrides['llm'] = llm
        return default_pipeline_config(overrides)

    def __repr__(self) -> str:
        """String representation (hides sensitive data)"""
        return f"Config(catalog={self.catalog_path}, model={self.openai_model})"
