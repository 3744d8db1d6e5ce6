"""
Configuration options classes for driverwire.

This module provides strongly-typed option classes for the driver service,
the HTTP transport and remote session suppliers, with validation via pydantic.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .defaults import (
    DEFAULT_CONNECT_ATTEMPT_TIMEOUT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HEADERS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SERVICE_PORT,
    DEFAULT_STARTUP_TIMEOUT,
    DEFAULT_STATUS_TIMEOUT,
    DEFAULT_STOP_TIMEOUT,
    DEFAULT_SUPPLIER,
)


class SupplierKind(str, Enum):
    """Strategies for obtaining a remote session."""

    REMOTE = "remote"
    EXTERNAL = "external"
    LOCAL_SERVICE = "local_service"


class ServiceOptions(BaseModel):
    """Local driver process options."""

    executable_path: Optional[str] = Field(
        None, description="Driver executable. Auto-detected if not provided"
    )
    port: int = Field(
        DEFAULT_SERVICE_PORT, ge=0, le=65535, description="Port, 0 picks a free one"
    )
    args: list[str] = Field(
        default_factory=list, description="Extra driver arguments"
    )
    env: dict[str, str] = Field(
        default_factory=dict, description="Environment overrides for the driver"
    )
    startup_timeout: float = Field(
        DEFAULT_STARTUP_TIMEOUT, gt=0, description="Seconds to wait for the port"
    )
    poll_interval: float = Field(
        DEFAULT_POLL_INTERVAL, gt=0, description="Seconds between readiness probes"
    )
    connect_attempt_timeout: float = Field(
        DEFAULT_CONNECT_ATTEMPT_TIMEOUT, gt=0, description="Timeout of one probe"
    )
    stop_timeout: float = Field(
        DEFAULT_STOP_TIMEOUT, ge=0, description="Grace period before killing"
    )
    use_technology_preview: bool = Field(
        False, description="Use Safari Technology Preview's driver"
    )

    @field_validator("args", mode="before")
    @classmethod
    def parse_args(cls, v: Any) -> list[str]:
        """Accept a whitespace separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return v.split()
        return [str(item) for item in v]

    def merge(self, other: "ServiceOptions") -> "ServiceOptions":
        """Merge with another ServiceOptions, other takes precedence."""
        data = self.model_dump(exclude_none=True)
        other_data = other.model_dump(exclude_none=True, exclude_unset=True)
        if "env" in other_data:
            data["env"] = {**data.get("env", {}), **other_data.pop("env")}
        data.update(other_data)
        return ServiceOptions(**data)


class TransportOptions(BaseModel):
    """HTTP transport options."""

    timeout: float = Field(
        DEFAULT_REQUEST_TIMEOUT, gt=0, description="Per-request timeout"
    )
    connect_timeout: float = Field(
        DEFAULT_CONNECT_TIMEOUT, gt=0, description="Connection timeout"
    )
    headers: dict[str, str] = Field(
        default_factory=lambda: DEFAULT_HEADERS.copy(),
        description="Default request headers",
    )

    def merge(self, other: "TransportOptions") -> "TransportOptions":
        """Merge with another TransportOptions, other takes precedence."""
        data = self.model_dump(exclude_none=True)
        other_data = other.model_dump(exclude_none=True, exclude_unset=True)
        if "headers" in other_data:
            data["headers"] = {**data.get("headers", {}), **other_data.pop("headers")}
        data.update(other_data)
        return TransportOptions(**data)


class RemoteOptions(BaseModel):
    """How remote sessions are obtained."""

    server_url: Optional[str] = Field(
        None, description="URL of an already running remote end"
    )
    supplier: SupplierKind = Field(
        SupplierKind(DEFAULT_SUPPLIER), description="Session supplier strategy"
    )
    status_timeout: float = Field(
        DEFAULT_STATUS_TIMEOUT, gt=0, description="Seconds to wait for /status"
    )

    @field_validator("server_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else v


class DriverwireConfig(BaseModel):
    """Main configuration class combining all options."""

    service: ServiceOptions = Field(
        default_factory=ServiceOptions, description="Driver service options"
    )
    transport: TransportOptions = Field(
        default_factory=TransportOptions, description="Transport options"
    )
    remote: RemoteOptions = Field(
        default_factory=RemoteOptions, description="Remote session options"
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DriverwireConfig":
        """Create configuration from dictionary."""
        return cls(**data)

    def merge(self, other: "DriverwireConfig") -> "DriverwireConfig":
        """Merge with another DriverwireConfig, other takes precedence."""
        remote = self.remote.model_dump()
        remote.update(other.remote.model_dump(exclude_unset=True))
        return DriverwireConfig(
            service=self.service.merge(other.service),
            transport=self.transport.merge(other.transport),
            remote=RemoteOptions(**remote),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(exclude_none=True, mode="json")
