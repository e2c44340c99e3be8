"""Configuration management for recipe_extract.

Configuration priority (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (RECIPE_EXTRACT_*)
3. Project config file (.recipe-extract.toml)
4. User config file (~/.config/recipe-extract/config.toml)
5. Default values

API credentials are not part of this configuration. The OpenAI client reads
``OPENAI_API_KEY`` from the environment itself.

Example:
    >>> config = PipelineConfig.load()
    >>> config.update(model="gpt-4o")
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from .exceptions import ConfigurationError

VALID_MODELS = frozenset({"gpt-3.5-turbo", "gpt-4o", "gpt-4o-mini", "gpt-4.1-mini"})


@dataclass
class PipelineConfig:
    """Configuration for the recipe extraction pipeline.

    Attributes:
        Extraction Settings:
            model: OpenAI model used for structured extraction
            temperature: Sampling temperature for extraction
            extraction_timeout: Timeout in seconds for the extraction call

        Metadata Settings:
            metadata_endpoint: Base URL of the metadata-fetch service
            fetch_timeout: Timeout in seconds for the metadata call
            max_content_chars: Cap on the content snapshot sent for extraction

        Output Settings:
            debug_mode: Enable debug logging
    """

    # Extraction settings
    model: str = "gpt-4o-mini"
    temperature: float = 0.2
    extraction_timeout: float = 60.0

    # Metadata settings
    metadata_endpoint: str = "https://api.microlink.io/"
    fetch_timeout: float = 20.0
    max_content_chars: int = 40000

    # Output settings
    debug_mode: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid
        """
        if self.model not in VALID_MODELS:
            raise ConfigurationError(
                f"Invalid model: {self.model}",
                model=self.model,
                valid_models=", ".join(sorted(VALID_MODELS)),
            )

        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(
                "Temperature must be between 0.0 and 2.0",
                temperature=self.temperature,
            )

        if self.extraction_timeout <= 0:
            raise ConfigurationError(
                "extraction_timeout must be positive",
                extraction_timeout=self.extraction_timeout,
            )

        if self.fetch_timeout <= 0:
            raise ConfigurationError(
                "fetch_timeout must be positive",
                fetch_timeout=self.fetch_timeout,
            )

        if self.max_content_chars < 1:
            raise ConfigurationError(
                "max_content_chars must be at least 1",
                max_content_chars=self.max_content_chars,
            )

        parsed = urlparse(self.metadata_endpoint)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                "metadata_endpoint must be an absolute http(s) URL",
                metadata_endpoint=self.metadata_endpoint,
            )

    @classmethod
    def load(
        cls,
        config_path: str | Path | None = None,
        load_user_config: bool = True,
        load_env: bool = True,
    ) -> "PipelineConfig":
        """Load configuration from file(s) and environment variables.

        Configuration is loaded in this order (later overrides earlier):
        1. Default values
        2. User config file (~/.config/recipe-extract/config.toml)
        3. Project config file (.recipe-extract.toml or specified path)
        4. Environment variables (RECIPE_EXTRACT_*)

        Args:
            config_path: Path to project config file (optional)
            load_user_config: Whether to load user config file
            load_env: Whether to load environment variables

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: dict[str, Any] = {}

        if load_user_config:
            user_config_path = Path.home() / ".config" / "recipe-extract" / "config.toml"
            if user_config_path.exists():
                config_dict.update(cls._load_toml(user_config_path))

        if config_path:
            project_path = Path(config_path)
            if not project_path.exists():
                raise ConfigurationError("Config file not found", path=str(project_path))
            config_dict.update(cls._load_toml(project_path))
        else:
            default_path = Path(".recipe-extract.toml")
            if default_path.exists():
                config_dict.update(cls._load_toml(default_path))

        if load_env:
            config_dict.update(cls._load_env())

        unknown = set(config_dict) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                "Unknown configuration keys",
                keys=", ".join(sorted(unknown)),
            )

        return cls(**config_dict)

    @staticmethod
    def _load_toml(path: Path) -> dict[str, Any]:
        """Load configuration from TOML file.

        Raises:
            ConfigurationError: If TOML file is invalid
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {path}",
                path=str(path),
                error=str(e),
            ) from e

        # Extract recipe-extract section if present
        if "recipe-extract" in data:
            return data["recipe-extract"]
        return data

    @staticmethod
    def _load_env() -> dict[str, Any]:
        """Load configuration from environment variables.

        Environment variables are prefixed with RECIPE_EXTRACT_ and use
        uppercase snake_case, e.g. RECIPE_EXTRACT_MODEL=gpt-4o or
        RECIPE_EXTRACT_DEBUG_MODE=true.
        """
        config: dict[str, Any] = {}
        prefix = "RECIPE_EXTRACT_"

        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue

            config_key = key[len(prefix) :].lower()

            if value.lower() in ("true", "yes"):
                config[config_key] = True
            elif value.lower() in ("false", "no"):
                config[config_key] = False
            elif value.isdigit():
                config[config_key] = int(value)
            elif value.replace(".", "", 1).isdigit():  # Float
                config[config_key] = float(value)
            else:
                config[config_key] = value

        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return dict(self.__dict__)

    def update(self, **kwargs: Any) -> None:
        """Update configuration values.

        Raises:
            ConfigurationError: If a key is unknown or updated values are invalid
        """
        for key, value in kwargs.items():
            if key not in self.__dataclass_fields__:
                raise ConfigurationError(
                    f"Unknown configuration key: {key}",
                    key=key,
                    valid_keys=", ".join(self.__dataclass_fields__.keys()),
                )
            setattr(self, key, value)

        self._validate()
