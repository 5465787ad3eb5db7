"""Public API surface for mp_common."""

from mp_common.errors import (
    ConfigurationError,
    DetectionError,
    DriverError,
    MPError,
    NoCompatibleProvisionerError,
    OsReleaseParseError,
    ProvisioningError,
    RemoteCommandError,
    TemplateRenderError,
    WaitTimeoutError,
    error_to_payload,
)
from mp_common.logging import configure_logging, machine_logger

__all__ = [
    "ConfigurationError",
    "DetectionError",
    "DriverError",
    "MPError",
    "NoCompatibleProvisionerError",
    "OsReleaseParseError",
    "ProvisioningError",
    "RemoteCommandError",
    "TemplateRenderError",
    "WaitTimeoutError",
    "configure_logging",
    "error_to_payload",
    "machine_logger",
]
