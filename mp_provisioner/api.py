"""Public provisioning API surface."""

from __future__ import annotations

import logging
from typing import Optional

from mp_common.errors import (
    DetectionError,
    NoCompatibleProvisionerError,
    ProvisioningError,
    WaitTimeoutError,
)
from mp_provisioner.collaborators import AuthConfigurer, SwarmConfigurer
from mp_provisioner.engine.detector import Detector, StandardDetector
from mp_provisioner.engine.registry import ProvisionerRegistry, RegisteredProvisioner
from mp_provisioner.engine.waiter import wait_for, wait_for_specific_or_error
from mp_provisioner.models.actions import PackageAction, ServiceAction
from mp_provisioner.models.options import AuthOptions, EngineOptions, SwarmOptions
from mp_provisioner.models.os_release import OsRelease, parse_os_release
from mp_provisioner.providers import FamilyProvisioner, Provisioner, default_registry
from mp_provisioner.remote.drivers import Driver, GenericDriver
from mp_provisioner.settings import ProvisioningSettings

logger = logging.getLogger(__name__)


def provision_machine(
    driver: Driver,
    swarm_options: Optional[SwarmOptions] = None,
    auth_options: Optional[AuthOptions] = None,
    engine_options: Optional[EngineOptions] = None,
    *,
    detector: Optional[Detector] = None,
    configure_auth: Optional[AuthConfigurer] = None,
    configure_swarm: Optional[SwarmConfigurer] = None,
) -> Provisioner:
    """Detect the machine's OS and run the matching provisioner.

    Returns the provisioner that ran, so callers can inspect the final
    auth and engine options. Its command channel is closed on return,
    whether provisioning succeeded or not.
    """
    detector = detector or StandardDetector(default_registry())
    provisioner = detector.detect_provisioner(driver)
    if configure_auth is not None:
        provisioner.configure_auth = configure_auth
    if configure_swarm is not None:
        provisioner.configure_swarm = configure_swarm

    logger.info(
        "Provisioning %s with the %s provisioner", driver.get_machine_name(), provisioner
    )
    try:
        provisioner.provision(swarm_options, auth_options, engine_options)
    finally:
        provisioner.close()
    return provisioner


__all__ = [
    "AuthConfigurer",
    "AuthOptions",
    "DetectionError",
    "Detector",
    "Driver",
    "EngineOptions",
    "FamilyProvisioner",
    "GenericDriver",
    "NoCompatibleProvisionerError",
    "OsRelease",
    "PackageAction",
    "Provisioner",
    "ProvisionerRegistry",
    "ProvisioningError",
    "ProvisioningSettings",
    "RegisteredProvisioner",
    "ServiceAction",
    "StandardDetector",
    "SwarmConfigurer",
    "SwarmOptions",
    "WaitTimeoutError",
    "default_registry",
    "parse_os_release",
    "provision_machine",
    "wait_for",
    "wait_for_specific_or_error",
]
