"""Minimal buildroot images (minikube-style) with docker baked in."""

from __future__ import annotations

from mp_provisioner.providers.base import FamilyProvisioner


class BuildrootProvisioner(FamilyProvisioner):
    """No package installation; only the unit and the TLS setup change."""

    family = "buildroot"

    def compatible_with_host(self) -> bool:
        return self._os_id() == "buildroot"

    def install_packages(self) -> None:
        return None

    def install_docker(self) -> None:
        return None
