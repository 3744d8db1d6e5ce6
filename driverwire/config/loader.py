"""
Configuration file loading.

Sources are layered lowest to highest priority: built-in defaults, a config
file, ``DRIVERWIRE_*`` environment variables, programmatic overrides.
Supported file formats are JSON, TOML and (with PyYAML installed) YAML.
"""

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from pydantic import ValidationError

from .defaults import (
    DEFAULT_CONFIG_EXTENSIONS,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_CONFIG_SEARCH_PATHS,
)
from .env import load_env_config
from .options import DriverwireConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ConfigurationError(Exception):
    """A configuration source is missing, malformed or invalid."""


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _read_toml(path: Path) -> Any:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def _read_yaml(path: Path) -> Any:
    try:
        import yaml
    except ImportError:
        raise ConfigurationError(
            f"Cannot read {path}: YAML support needs PyYAML "
            "(pip install driverwire[yaml])"
        )
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e


_READERS: dict[str, Callable[[Path], Any]] = {
    ".json": _read_json,
    ".toml": _read_toml,
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
}


def load_file(path: PathLike) -> dict[str, Any]:
    """Read one configuration file, choosing the format by extension.

    An empty file yields an empty dictionary.

    Raises:
        ConfigurationError: The file does not exist, cannot be parsed, has an
            unknown extension, or its top level is not a mapping.
    """
    path = Path(path)
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise ConfigurationError(
            f"Unsupported configuration format {path.suffix!r} for {path}"
        )
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        data = reader(path)
    except (ValueError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Top level of {path} must be a mapping, got {type(data).__name__}"
        )
    return data


def find_config_file(
    filename: str = DEFAULT_CONFIG_FILENAME,
    search_paths: Optional[list[str]] = None,
    extensions: Optional[list[str]] = None,
) -> Optional[Path]:
    """First ``<dir>/<filename><ext>`` that exists, in search order."""
    candidates = (
        Path(directory).expanduser() / f"{filename}{ext}"
        for directory in (search_paths or DEFAULT_CONFIG_SEARCH_PATHS)
        for ext in (extensions or DEFAULT_CONFIG_EXTENSIONS)
    )
    return next((candidate for candidate in candidates if candidate.is_file()), None)


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dictionaries; later ones win on conflicts."""
    merged: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = merge_configs(current, value)
            else:
                merged[key] = value
    return merged


class ConfigLoader:
    """Builds a DriverwireConfig from layered sources.

    Args:
        config_file: File that must exist and load. Disables searching.
        search_paths: Directories searched for ``driverwire.config.*``.
        load_env: Apply ``DRIVERWIRE_*`` environment variables.
        auto_find: Search for a config file when none is given.
    """

    def __init__(
        self,
        config_file: Optional[PathLike] = None,
        search_paths: Optional[list[str]] = None,
        load_env: bool = True,
        auto_find: bool = True,
    ):
        self.config_file = Path(config_file) if config_file else None
        self.search_paths = search_paths or DEFAULT_CONFIG_SEARCH_PATHS
        self.load_env = load_env
        self.auto_find = auto_find

    def sources(self, overrides: Optional[dict[str, Any]] = None) -> Iterator[dict[str, Any]]:
        """Yield each non-empty source, lowest priority first."""
        file_data = self._file_source()
        if file_data:
            yield file_data

        if self.load_env:
            try:
                env_data = load_env_config()
            except ValueError as e:
                raise ConfigurationError(f"Invalid environment variable {e}") from e
            if env_data:
                yield env_data

        if overrides:
            yield overrides

    def load(self, overrides: Optional[dict[str, Any]] = None) -> DriverwireConfig:
        """Merge all sources and validate the result.

        Raises:
            ConfigurationError: A source failed to load or validation failed.
        """
        merged = merge_configs(*self.sources(overrides))
        try:
            return DriverwireConfig.from_dict(merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _file_source(self) -> Optional[dict[str, Any]]:
        if self.config_file is not None:
            return load_file(self.config_file)
        if not self.auto_find:
            return None

        found = find_config_file(search_paths=self.search_paths)
        if found is None:
            return None
        logger.debug(f"Using configuration file {found}")
        try:
            return load_file(found)
        except ConfigurationError as e:
            logger.warning(f"Ignoring configuration file {found}: {e}")
            return None


def load_config(
    config_file: Optional[PathLike] = None,
    overrides: Optional[dict[str, Any]] = None,
    load_env: bool = True,
) -> DriverwireConfig:
    """Load configuration from file, environment and ``overrides``."""
    return ConfigLoader(config_file=config_file, load_env=load_env).load(overrides)


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "find_config_file",
    "load_config",
    "load_file",
    "merge_configs",
]
