"""Configuration management for the TFE CLI.

Settings live in ``~/.tfe/config.json``. The ``TFE_ADDRESS`` and
``TFE_TOKEN`` environment variables override the stored address and token.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Self

from .errors import ConfigurationError

DEFAULT_ADDRESS = "https://app.terraform.io"

ENV_OVERRIDES = {
    'address': 'TFE_ADDRESS',
    'token': 'TFE_TOKEN',
}


class Config:
    """Manages CLI configuration with schema validation."""

    CONFIG_SCHEMA = {
        'address': {'type': str, 'required': False, 'validator': 'validate_address', 'default': DEFAULT_ADDRESS},
        'token': {'type': str, 'required': False, 'validator': 'validate_token'},
        'timeout': {'type': int, 'required': False, 'min': 5, 'max': 300, 'default': 30},
        'verify_ssl': {'type': bool, 'required': False, 'default': True},
    }

    def __init__(self: Self, config_dir: Optional[Path] = None) -> None:
        """Initialize configuration manager.

        Args:
            config_dir: Directory holding config.json. Defaults to ~/.tfe
        """
        self.config_dir = config_dir or Path.home() / ".tfe"
        self.config_file = self.config_dir / "config.json"

    def _ensure_directory(self: Self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(self.config_dir, 0o700)

    def _validate_config_schema(self: Self, config: Dict[str, Any]) -> None:
        """Validate configuration against schema.

        Raises:
            ConfigurationError: If validation fails.
        """
        errors = []

        for key, schema in self.CONFIG_SCHEMA.items():
            value = config.get(key)

            if schema['required'] and value is None:
                errors.append(f"Required field '{key}' is missing")
                continue

            if value is None:
                continue

            if not isinstance(value, schema['type']):
                errors.append(f"Field '{key}' must be of type {schema['type'].__name__}")
                continue

            if 'min' in schema and value < schema['min']:
                errors.append(f"Field '{key}' must be >= {schema['min']}")
            if 'max' in schema and value > schema['max']:
                errors.append(f"Field '{key}' must be <= {schema['max']}")

            if 'validator' in schema:
                validator = getattr(self, schema['validator'])
                if not validator(value):
                    errors.append(f"Field '{key}' failed validation")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                ["Fix the values with: tfe config --address <URL> --token <TOKEN>"]
            )

    def validate_address(self: Self, address: str) -> bool:
        """Check that an address is an http(s) URL."""
        return isinstance(address, str) and address.startswith(('http://', 'https://'))

    def validate_token(self: Self, token: str) -> bool:
        """Basic token sanity check; tokens are long opaque strings."""
        return isinstance(token, str) and len(token) >= 10

    def _apply_defaults_and_env(self: Self, config: Dict[str, Any]) -> Dict[str, Any]:
        for key, schema in self.CONFIG_SCHEMA.items():
            if key not in config and 'default' in schema:
                config[key] = schema['default']

        for key, env_var in ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                config[key] = value

        return config

    def load(self: Self, validate: bool = True) -> Dict[str, Any]:
        """Load the stored configuration, defaults and env overrides applied.

        Args:
            validate: Whether to validate the configuration schema.

        Raises:
            ConfigurationError: If the file cannot be read or is invalid.
        """
        config: Dict[str, Any] = {}

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    config = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                raise ConfigurationError(
                    f"Failed to load configuration: {e}",
                    [f"Remove or repair {self.config_file}"]
                )

        self._apply_defaults_and_env(config)

        if validate:
            self._validate_config_schema(config)

        return config

    def save(self: Self, config: Dict[str, Any]) -> None:
        """Validate and write the configuration file.

        Raises:
            ConfigurationError: If validation or saving fails.
        """
        self._validate_config_schema(config)
        self._ensure_directory()

        temp_file = self.config_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w') as f:
                json.dump(config, f, indent=2)
            os.chmod(temp_file, 0o600)
            temp_file.replace(self.config_file)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise ConfigurationError(f"Failed to save configuration: {e}")

    def _load_stored(self: Self) -> Dict[str, Any]:
        if not self.config_file.exists():
            return {}
        try:
            with open(self.config_file, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")

    def get(self: Self, key: str, default: Any = None) -> Any:
        """Get a configuration value, or ``default`` when unset.

        An unreadable file is treated as empty; defaults and environment
        overrides still apply.
        """
        try:
            config = self.load(validate=False)
        except ConfigurationError:
            config = self._apply_defaults_and_env({})
        return config.get(key, default)

    def set(self: Self, key: str, value: Any) -> None:
        """Store a single value.

        Environment overrides are not written back to the file.

        Raises:
            ConfigurationError: If the resulting configuration is invalid.
        """
        config = self._load_stored()
        config[key] = value
        self.save(config)

    def get_address(self: Self) -> str:
        return self.get('address', DEFAULT_ADDRESS)

    def get_token(self: Self) -> Optional[str]:
        return self.get('token')

    def is_configured(self: Self) -> bool:
        """True when a token is available from the file or environment."""
        return bool(self.get_token())
