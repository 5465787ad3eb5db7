from __future__ import annotations

from mp_provisioner.providers.base import FamilyProvisioner


class ArchProvisioner(FamilyProvisioner):
    """Arch Linux; docker comes straight from the official repositories."""

    family = "arch"

    def compatible_with_host(self) -> bool:
        return self._os_id() == "arch"
