"""Select the provisioner variant matching a machine's operating system."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional, Protocol

from mp_common.errors import (
    DetectionError,
    MPError,
    NoCompatibleProvisionerError,
)
from mp_provisioner.engine.registry import ProvisionerRegistry
from mp_provisioner.models.os_release import OsRelease, parse_os_release
from mp_provisioner.remote.channel import SSHCommander
from mp_provisioner.remote.drivers import Driver, DriverSSHCommander

if TYPE_CHECKING:
    from mp_provisioner.providers.base import Provisioner

logger = logging.getLogger(__name__)

OS_RELEASE_PROBE = "cat /etc/os-release"


class Detector(Protocol):
    """Anything able to pick a provisioner for a driver."""

    def detect_provisioner(self, driver: Driver) -> "Provisioner":
        raise NotImplementedError


class StandardDetector:
    """Probe ``/etc/os-release`` once and take the first compatible variant."""

    def __init__(
        self,
        registry: ProvisionerRegistry,
        commander_factory: Optional[Callable[[Driver], SSHCommander]] = None,
    ) -> None:
        self._registry = registry
        self._commander_factory = commander_factory or DriverSSHCommander

    def probe_os_release(self, commander: SSHCommander) -> OsRelease:
        """Run the identification probe; any failure is fatal."""
        try:
            content = commander.ssh_command(OS_RELEASE_PROBE)
        except MPError as exc:
            raise DetectionError(
                f"Error getting OS release information: {exc}", cause=exc
            ) from exc
        try:
            return parse_os_release(content)
        except MPError as exc:
            raise DetectionError(
                f"Error parsing /etc/os-release: {exc}", cause=exc
            ) from exc

    def detect_provisioner(self, driver: Driver) -> "Provisioner":
        """The returned provisioner owns the channel; it is closed on failure."""
        logger.info("Detecting the provisioner...")
        commander = self._commander_factory(driver)
        try:
            return self._select(driver, commander)
        except BaseException:
            commander.close()
            raise

    def _select(self, driver: Driver, commander: SSHCommander) -> "Provisioner":
        info = self.probe_os_release(commander)
        for entry in self._registry:
            provisioner = entry.new(driver)
            provisioner.ssh_commander = commander
            provisioner.set_os_release_info(info)
            if provisioner.compatible_with_host():
                logger.info(
                    "Found compatible host: %s (provisioner %s)",
                    info.pretty_name or info.id,
                    entry.name,
                )
                return provisioner

        raise NoCompatibleProvisionerError(info.id)
