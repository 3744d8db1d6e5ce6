"""
New-session payload encoding.

A single request body carries every dialect's shape side by side:

- JSON Wire Protocol: top-level ``desiredCapabilities``/``requiredCapabilities``
- early geckodriver: the same two keys nested under ``capabilities``
- W3C: ``capabilities.alwaysMatch`` and ``capabilities.firstMatch``

W3C objects only accept standard capability names and ``vendor:name``
extension keys, so anything else is dropped from them (but kept in the legacy
objects). Encoding never fails.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from driverwire.capabilities import CapabilityType, Proxy

logger = logging.getLogger(__name__)

W3C_CAPABILITY_NAMES = frozenset(
    {
        CapabilityType.ACCEPT_INSECURE_CERTS,
        CapabilityType.BROWSER_NAME,
        CapabilityType.BROWSER_VERSION,
        CapabilityType.PLATFORM_NAME,
        CapabilityType.PAGE_LOAD_STRATEGY,
        CapabilityType.PROXY,
        CapabilityType.SET_WINDOW_RECT,
        CapabilityType.TIMEOUTS,
        CapabilityType.UNHANDLED_PROMPT_BEHAVIOUR,
        CapabilityType.STRICT_FILE_INTERACTABILITY,
    }
)

_EXTENSION_KEY = re.compile(r"^[^:]+:[^:]+$")


def is_w3c_key(key: str) -> bool:
    """True for standard W3C names and ``vendor:name`` extension keys."""
    return key in W3C_CAPABILITY_NAMES or bool(_EXTENSION_KEY.match(key))


def _with_prompt_behaviour(caps: Mapping[str, Any]) -> dict[str, Any]:
    data = dict(caps)
    alert_behaviour = data.get(CapabilityType.UNEXPECTED_ALERT_BEHAVIOUR)
    if alert_behaviour is not None:
        data[CapabilityType.UNHANDLED_PROMPT_BEHAVIOUR] = alert_behaviour
    return data


def _serialize(value: Any, w3c: bool) -> Any:
    if isinstance(value, Proxy):
        return value.to_w3c() if w3c else value.to_json()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return _serialize(value.model_dump(exclude_none=True, by_alias=True), w3c)
    if isinstance(value, Mapping):
        return {str(k): _serialize(v, w3c) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_serialize(v, w3c) for v in value]
    return value


def _w3c_proxy(value: Any) -> Any:
    if isinstance(value, Mapping) and "proxyType" in value:
        try:
            value = Proxy.from_json(value)
        except (ValueError, ValidationError) as e:
            # Sent as given; only the type is lower-cased.
            logger.debug(f"Proxy capability not understood, sending it unchanged: {e}")
            data = _serialize(value, w3c=True)
            if isinstance(data["proxyType"], str):
                data["proxyType"] = data["proxyType"].lower()
            return data
    return _serialize(value, w3c=True)


def to_legacy(caps: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Serialize a capability bag for the JSON Wire Protocol."""
    if not caps:
        return {}
    data = _with_prompt_behaviour(caps)
    return {key: _serialize(value, w3c=False) for key, value in data.items()}


def to_w3c(caps: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Serialize a capability bag as a W3C capabilities object."""
    if not caps:
        return {}
    data = _with_prompt_behaviour(caps)
    result: dict[str, Any] = {}

    for key, value in data.items():
        if not is_w3c_key(key) or value is None:
            continue
        if key == CapabilityType.PROXY:
            result[key] = _w3c_proxy(value)
        else:
            result[key] = _serialize(value, w3c=True)

    version = data.get(CapabilityType.VERSION)
    if CapabilityType.BROWSER_VERSION not in result and version:
        result[CapabilityType.BROWSER_VERSION] = str(version)

    platform = data.get(CapabilityType.PLATFORM)
    if CapabilityType.PLATFORM_NAME not in result and platform:
        platform = str(_serialize(platform, w3c=True))
        if platform.upper() != "ANY":
            result[CapabilityType.PLATFORM_NAME] = platform.lower()

    return result


def encode_new_session(
    desired: Optional[Mapping[str, Any]],
    required: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Build the new-session request body understood by every dialect."""
    legacy_desired = to_legacy(desired)
    legacy_required = to_legacy(required)

    always_match = to_w3c(desired)
    # Required settings take priority over desired ones in both W3C objects.
    first_match: dict[str, Any] = {}
    for key, value in to_w3c(required).items():
        if key in always_match:
            always_match[key] = value
        else:
            first_match[key] = value

    return {
        "desiredCapabilities": legacy_desired,
        "requiredCapabilities": legacy_required,
        "capabilities": {
            "desiredCapabilities": legacy_desired,
            "requiredCapabilities": legacy_required,
            "alwaysMatch": always_match,
            "firstMatch": [first_match],
        },
    }


__all__ = [
    "W3C_CAPABILITY_NAMES",
    "encode_new_session",
    "is_w3c_key",
    "to_legacy",
    "to_w3c",
]
