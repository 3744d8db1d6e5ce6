"""
Environment variable overrides.

Every option of DriverwireConfig can be set through a variable named after its
dotted key, e.g. ``service.port`` -> ``DRIVERWIRE_SERVICE_PORT``. The raw string
is converted according to the option's annotation:

- bool: true/1/yes/on (anything else is false)
- int, float: parsed as numbers
- list: shell-style split, ``"--log debug"`` -> ``["--log", "debug"]``
- dict: ``KEY=value,OTHER=value``
"""

import os
import shlex
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union, get_args, get_origin

from .defaults import ENV_PREFIX
from .options import DriverwireConfig

_TRUTHY = frozenset({"true", "1", "yes", "on", "enabled"})


def get_env_key(key: str, prefix: str = ENV_PREFIX) -> str:
    """Environment variable name for a dotted configuration key."""
    return prefix + key.upper().replace(".", "_").replace("-", "_")


def _strip_optional(annotation: Any) -> Any:
    if get_origin(annotation) is Union:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _split_pairs(raw: str) -> dict[str, str]:
    pairs = {}
    for item in raw.split(","):
        name, sep, value = item.partition("=")
        if sep:
            pairs[name.strip()] = value.strip()
    return pairs


def coerce(raw: str, annotation: Any) -> Any:
    """Convert an environment string to ``annotation``.

    Raises:
        ValueError: ``raw`` is not a valid number.
    """
    annotation = _strip_optional(annotation)
    origin = get_origin(annotation)

    if origin is list:
        return shlex.split(raw)
    if origin is dict:
        return _split_pairs(raw)
    if annotation is bool:
        return raw.strip().lower() in _TRUTHY
    if annotation in (int, float):
        return annotation(raw.strip())
    # Enums and strings are validated by the options models.
    return raw


def _option_annotations() -> Mapping[str, Any]:
    annotations = {}
    for section, section_field in DriverwireConfig.model_fields.items():
        for option, option_field in section_field.annotation.model_fields.items():
            annotations[f"{section}.{option}"] = option_field.annotation
    return MappingProxyType(annotations)


#: Dotted option key -> declared type, for every configurable option.
ENV_MAPPINGS: Mapping[str, Any] = _option_annotations()


def get_env(
    key: str,
    default: Any = None,
    target_type: Optional[Any] = None,
    prefix: str = ENV_PREFIX,
) -> Any:
    """Read one variable, converted to ``target_type`` (or the default's type)."""
    raw = os.environ.get(get_env_key(key, prefix))
    if raw is None:
        return default
    if target_type is None and default is not None:
        target_type = type(default)
    return coerce(raw, target_type) if target_type is not None else raw


def get_env_bool(key: str, default: bool = False, prefix: str = ENV_PREFIX) -> bool:
    return get_env(key, default, bool, prefix)


def get_env_int(key: str, default: int = 0, prefix: str = ENV_PREFIX) -> int:
    return get_env(key, default, int, prefix)


def get_env_float(key: str, default: float = 0.0, prefix: str = ENV_PREFIX) -> float:
    return get_env(key, default, float, prefix)


def load_env_config(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Collect every set ``DRIVERWIRE_*`` option into a nested dictionary.

    Sections without any variable set are omitted.

    Raises:
        ValueError: A variable holds a value of the wrong type.
    """
    result: dict[str, Any] = {}
    for key, annotation in ENV_MAPPINGS.items():
        env_var = get_env_key(key, prefix)
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            value = coerce(raw, annotation)
        except ValueError as e:
            raise ValueError(f"{env_var}={raw!r}: {e}") from e
        section, option = key.split(".", 1)
        result.setdefault(section, {})[option] = value
    return result


__all__ = [
    "ENV_MAPPINGS",
    "coerce",
    "get_env",
    "get_env_bool",
    "get_env_float",
    "get_env_int",
    "get_env_key",
    "load_env_config",
]
