from __future__ import annotations

from mp_provisioner.providers.base import FamilyProvisioner


class DebianProvisioner(FamilyProvisioner):
    family = "debian"

    def compatible_with_host(self) -> bool:
        return self._os_id() == "debian"
