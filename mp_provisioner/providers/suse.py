"""SUSE family provisioner (openSUSE and SUSE Linux Enterprise)."""

from __future__ import annotations

import logging

from mp_common.errors import RemoteCommandError
from mp_provisioner.providers.base import FamilyProvisioner

logger = logging.getLogger(__name__)

CONTAINERS_MODULE_COMMAND = (
    "sudo -E SUSEConnect -p sle-module-containers/12/$(uname -m) -r ''"
)

# The packaged unit is replaced, so the binaries it expects under the
# docker- prefix have to exist.
DOCKER_BINARY_LINKS = (
    "yes no | sudo -E ln -si /usr/sbin/runc /usr/sbin/docker-runc",
    "sudo -E ln -sf /usr/sbin/containerd /usr/sbin/docker-containerd",
    "sudo -E ln -sf /usr/sbin/containerd-shim /usr/sbin/docker-containerd-shim",
)

FIREWALL_COMMAND = (
    "sudo -E /sbin/yast2 firewall services add ipprotocol=tcp tcpport={port} zone=EXT"
)


class SUSEProvisioner(FamilyProvisioner):
    family = "suse"

    def compatible_with_host(self) -> bool:
        if self.os_release_info is None:
            return False
        return "suse" in self.os_release_info.id_like_tokens()

    def is_sle(self) -> bool:
        return not self._os_id().lower().startswith("opensuse")

    def before_install(self) -> None:
        if not self.is_sle():
            return
        logger.debug("Enabling the SLE containers module")
        try:
            self.ssh_command(CONTAINERS_MODULE_COMMAND)
        except RemoteCommandError as exc:
            raise RemoteCommandError(
                "Error while adding the 'containers' module, make sure this machine is "
                "registered either against SUSE Customer Center (SCC) or to a local "
                f"Subscription Management Tool (SMT): {exc}",
                command=exc.command,
                exit_code=exc.exit_code,
                stdout=exc.stdout,
                stderr=exc.stderr,
            ) from exc

    def after_install(self) -> None:
        for command in DOCKER_BINARY_LINKS:
            self.ssh_command(command)

        if self.is_package_installed("yast2-firewall"):
            self.ssh_command(FIREWALL_COMMAND.format(port=self.settings.docker_port))
