"""Ubuntu provisioners: upstart before 15.04, systemd from 15.04 on."""

from __future__ import annotations

from typing import Optional, Tuple

from mp_provisioner.providers.base import FamilyProvisioner

FIRST_SYSTEMD_VERSION = (15, 4)


def parse_version(version_id: str) -> Optional[Tuple[int, ...]]:
    """``"14.04"`` -> ``(14, 4)``; None when not dotted integers."""
    try:
        return tuple(int(part) for part in version_id.split("."))
    except ValueError:
        return None


class UbuntuProvisioner(FamilyProvisioner):
    """Ubuntu releases that still boot with upstart."""

    family = "ubuntu"

    def compatible_with_host(self) -> bool:
        info = self.os_release_info
        if info is None or info.id != "ubuntu":
            return False
        version = parse_version(info.version_id)
        return version is not None and version < FIRST_SYSTEMD_VERSION


class UbuntuSystemdProvisioner(FamilyProvisioner):
    family = "ubuntu-systemd"

    def compatible_with_host(self) -> bool:
        info = self.os_release_info
        if info is None or info.id != "ubuntu":
            return False
        version = parse_version(info.version_id)
        return version is not None and version >= FIRST_SYSTEMD_VERSION
