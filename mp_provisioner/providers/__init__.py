"""Built-in provisioner variants and the default registry."""

from __future__ import annotations

from functools import partial
from typing import List, Optional

from mp_provisioner.engine.registry import ProvisionerRegistry, RegisteredProvisioner
from mp_provisioner.providers.arch import ArchProvisioner
from mp_provisioner.providers.base import FamilyProvisioner, Provisioner
from mp_provisioner.providers.buildroot import BuildrootProvisioner
from mp_provisioner.providers.debian import DebianProvisioner
from mp_provisioner.providers.redhat import (
    CentOSProvisioner,
    FedoraProvisioner,
    RedHatProvisioner,
)
from mp_provisioner.providers.suse import SUSEProvisioner
from mp_provisioner.providers.ubuntu import UbuntuProvisioner, UbuntuSystemdProvisioner
from mp_provisioner.settings import ProvisioningSettings

# Detection walks this order and stops at the first match.
BUILTIN_PROVISIONERS = (
    ArchProvisioner,
    BuildrootProvisioner,
    CentOSProvisioner,
    DebianProvisioner,
    FedoraProvisioner,
    RedHatProvisioner,
    SUSEProvisioner,
    UbuntuProvisioner,
    UbuntuSystemdProvisioner,
)


def builtin_provisioners(
    settings: Optional[ProvisioningSettings] = None,
) -> List[RegisteredProvisioner]:
    entries = []
    for cls in BUILTIN_PROVISIONERS:
        factory = partial(cls, settings=settings) if settings is not None else cls
        entries.append(RegisteredProvisioner(name=cls.family, new=factory))
    return entries


def default_registry(
    settings: Optional[ProvisioningSettings] = None,
) -> ProvisionerRegistry:
    """Return a frozen registry holding every built-in variant."""
    return ProvisionerRegistry(builtin_provisioners(settings)).freeze()


__all__ = [
    "ArchProvisioner",
    "BUILTIN_PROVISIONERS",
    "BuildrootProvisioner",
    "CentOSProvisioner",
    "DebianProvisioner",
    "FamilyProvisioner",
    "FedoraProvisioner",
    "Provisioner",
    "RedHatProvisioner",
    "SUSEProvisioner",
    "UbuntuProvisioner",
    "UbuntuSystemdProvisioner",
    "builtin_provisioners",
    "default_registry",
]
