"""
Configuration management for code generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for generator settings.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .discovery import DEFAULT_MARKER_MODULE, DEFAULT_MARKER_NAME, MarkerSpec
from .templates import DEFAULT_TEMPLATE_NAME


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


_STRING_FIELDS = (
    "marker_name",
    "marker_module",
    "generated_suffix",
    "file_extension",
    "template_name",
)
_OPTIONAL_STRING_FIELDS = ("output_dir", "template_dir")
_BOOL_FIELDS = ("strict_marker", "include_private")


@dataclass
class GeneratorConfig:
    """Settings for one generator run."""

    # Marker settings
    marker_name: str = DEFAULT_MARKER_NAME
    marker_module: str = DEFAULT_MARKER_MODULE
    strict_marker: bool = False

    # Output naming
    generated_suffix: str = ".g"
    file_extension: str = ".py"
    output_dir: Optional[str] = None

    # Templates
    template_dir: Optional[str] = None
    template_name: str = DEFAULT_TEMPLATE_NAME

    # Discovery
    include_private: bool = False
    exclude: List[str] = field(default_factory=list)

    # Emission
    workers: int = 1

    # Extra template variables
    custom: Dict[str, Any] = field(default_factory=dict)

    @property
    def marker(self) -> MarkerSpec:
        return MarkerSpec(
            name=self.marker_name, module=self.marker_module, strict=self.strict_marker
        )

    @property
    def generated_pattern(self) -> str:
        """File name glob matching files this configuration generates."""
        return f"*{self.generated_suffix}{self.file_extension}"


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._defaults: Dict[str, Any] = asdict(GeneratorConfig())

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration
        """
        base_config = dict(self._defaults)
        base_config["custom"] = {}
        base_config["exclude"] = []

        if config_file:
            base_config.update(self._load_config_file(config_file))

        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if path.suffix.lower() != ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Unknown keys become template variables
        if custom_args and isinstance(config_args.get("custom") or {}, dict):
            existing_custom = dict(config_args.get("custom") or {})
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        config = GeneratorConfig(**config_args)

        errors = [w for w in self.validate_config(config) if w.startswith("Invalid")]
        if errors:
            raise ConfigError("; ".join(errors))

        return config

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False, default=str)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """
        Validate a configuration.

        Returns:
            List of validation warnings/errors. Errors start with "Invalid".
        """
        warnings = self._type_errors(config)
        if warnings:
            return warnings

        if not config.marker_name or not all(
            part.isidentifier() for part in config.marker_name.split(".")
        ):
            warnings.append(f"Invalid marker_name: {config.marker_name!r}")

        if config.strict_marker and not config.marker_module:
            warnings.append("Invalid strict_marker: marker_module is required")

        if not config.file_extension.startswith("."):
            warnings.append(f"Invalid file_extension: {config.file_extension!r}")

        if any(sep in config.generated_suffix for sep in ("/", "\\")):
            warnings.append(f"Invalid generated_suffix: {config.generated_suffix!r}")

        if config.workers < 1:
            warnings.append(f"Invalid workers: {config.workers!r}")

        if not config.generated_suffix:
            warnings.append(
                "generated_suffix is empty; generated files may overwrite hand-written sources"
            )

        if config.template_dir and not Path(config.template_dir).is_dir():
            warnings.append(f"Template directory does not exist: {config.template_dir}")

        return warnings

    def _type_errors(self, config: GeneratorConfig) -> List[str]:
        """Report fields whose values have the wrong type."""
        errors = []

        for name in _STRING_FIELDS:
            value = getattr(config, name)
            if not isinstance(value, str):
                errors.append(f"Invalid {name}: expected a string, got {value!r}")

        for name in _OPTIONAL_STRING_FIELDS:
            value = getattr(config, name)
            if value is not None and not isinstance(value, (str, Path)):
                errors.append(f"Invalid {name}: expected a path, got {value!r}")

        for name in _BOOL_FIELDS:
            value = getattr(config, name)
            if not isinstance(value, bool):
                errors.append(f"Invalid {name}: expected true or false, got {value!r}")

        if isinstance(config.workers, bool) or not isinstance(config.workers, int):
            errors.append(f"Invalid workers: {config.workers!r}")

        if not isinstance(config.exclude, list) or not all(
            isinstance(pattern, str) for pattern in config.exclude
        ):
            errors.append(f"Invalid exclude: expected a list of globs, got {config.exclude!r}")

        if not isinstance(config.custom, dict):
            errors.append(f"Invalid custom: {config.custom!r}")

        return errors


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(custom_config, config_file)
