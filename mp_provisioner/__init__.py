"""Docker host provisioning engine for machine-provisioner."""

from mp_common.api import configure_logging as _configure_logging

_configure_logging()

from mp_provisioner.api import (  # noqa: F401
    AuthOptions,
    EngineOptions,
    GenericDriver,
    NoCompatibleProvisionerError,
    Provisioner,
    ProvisioningError,
    StandardDetector,
    SwarmOptions,
    default_registry,
    provision_machine,
)

__all__ = [
    "AuthOptions",
    "EngineOptions",
    "GenericDriver",
    "NoCompatibleProvisionerError",
    "Provisioner",
    "ProvisioningError",
    "StandardDetector",
    "SwarmOptions",
    "default_registry",
    "provision_machine",
]
