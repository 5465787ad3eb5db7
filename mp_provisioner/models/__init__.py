"""Value objects shared by the provisioning engine."""

from mp_provisioner.models.actions import PackageAction, ServiceAction
from mp_provisioner.models.options import (
    DEFAULT_ENGINE_PORT,
    DEFAULT_INSTALL_URL,
    AuthOptions,
    DockerOptions,
    EngineConfigContext,
    EngineOptions,
    SwarmOptions,
)
from mp_provisioner.models.os_release import OsRelease, parse_os_release

__all__ = [
    "AuthOptions",
    "DEFAULT_ENGINE_PORT",
    "DEFAULT_INSTALL_URL",
    "DockerOptions",
    "EngineConfigContext",
    "EngineOptions",
    "OsRelease",
    "PackageAction",
    "ServiceAction",
    "SwarmOptions",
    "parse_os_release",
]
