"""Red Hat family provisioners (RHEL, CentOS, Fedora)."""

from __future__ import annotations

from mp_provisioner.providers.base import FamilyProvisioner


class RedHatProvisioner(FamilyProvisioner):
    family = "redhat"
    os_release_id = "rhel"

    def compatible_with_host(self) -> bool:
        return self._os_id() == self.os_release_id


class CentOSProvisioner(RedHatProvisioner):
    family = "centos"
    os_release_id = "centos"


class FedoraProvisioner(RedHatProvisioner):
    family = "fedora"
    os_release_id = "fedora"
