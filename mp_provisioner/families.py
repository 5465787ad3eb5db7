"""Table of OS families: package manager, init system and daemon defaults.

Every per-family difference that is data rather than behaviour lives here so
that provisioners never hard-code a command at the call site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from mp_provisioner.models.actions import PackageAction, ServiceAction


@dataclass(frozen=True)
class PackageManager:
    """Command templates of one package manager; ``{name}`` is the package."""

    name: str
    commands: Mapping[PackageAction, str] = field(default_factory=dict)
    installed_query: Optional[str] = None
    refresh: Optional[str] = None

    def command(self, action: PackageAction, package: str) -> Optional[str]:
        template = self.commands.get(action)
        if template is None:
            return None
        return template.format(name=package)

    def query(self, package: str) -> Optional[str]:
        if self.installed_query is None:
            return None
        return self.installed_query.format(name=package)

    def needs_refresh(self, action: PackageAction) -> bool:
        return self.refresh is not None and action in (
            PackageAction.INSTALL,
            PackageAction.UPGRADE,
        )


@dataclass(frozen=True)
class InitSystem:
    """How services are driven and how a changed unit is activated."""

    name: str
    service_template: str
    reload_command: Optional[str] = None
    unsupported: Tuple[ServiceAction, ...] = ()
    activation: Tuple[ServiceAction, ...] = (ServiceAction.RESTART,)

    def service_command(self, service: str, action: ServiceAction) -> Optional[str]:
        if action in self.unsupported:
            return None
        if action is ServiceAction.DAEMON_RELOAD:
            return self.reload_command
        return self.service_template.format(name=service, action=action.value)

    def activation_commands(self, service: str) -> list[str]:
        commands = []
        for action in self.activation:
            command = self.service_command(service, action)
            if command is not None:
                commands.append(command)
        return commands


APT = PackageManager(
    name="apt",
    commands={
        PackageAction.INSTALL: "DEBIAN_FRONTEND=noninteractive sudo -E apt-get install -y {name}",
        PackageAction.REMOVE: "DEBIAN_FRONTEND=noninteractive sudo -E apt-get remove -y {name}",
        PackageAction.UPGRADE: "DEBIAN_FRONTEND=noninteractive sudo -E apt-get upgrade -y {name}",
    },
    installed_query="dpkg-query -W -f='${{Status}}' {name} 2>/dev/null | grep -q 'install ok installed'",
    refresh="sudo apt-get update",
)

YUM = PackageManager(
    name="yum",
    commands={
        PackageAction.INSTALL: "sudo -E yum install -y {name}",
        PackageAction.REMOVE: "sudo -E yum remove -y {name}",
        PackageAction.UPGRADE: "sudo -E yum update -y {name}",
    },
    installed_query="rpm -q {name}",
)

DNF = PackageManager(
    name="dnf",
    commands={
        PackageAction.INSTALL: "sudo -E dnf install -y {name}",
        PackageAction.REMOVE: "sudo -E dnf remove -y {name}",
        PackageAction.UPGRADE: "sudo -E dnf upgrade -y {name}",
    },
    installed_query="rpm -q {name}",
)

ZYPPER = PackageManager(
    name="zypper",
    commands={
        PackageAction.INSTALL: "sudo -E zypper -n in {name}",
        PackageAction.REMOVE: "sudo -E zypper -n rm {name}",
        PackageAction.UPGRADE: "sudo -E zypper -n up {name}",
    },
    # Skipping refreshes of stale repository metadata saves minutes on
    # images that already ship the packages.
    installed_query="rpm -q {name}",
)

PACMAN = PackageManager(
    name="pacman",
    commands={
        PackageAction.INSTALL: "sudo pacman -S --noconfirm --needed {name}",
        PackageAction.REMOVE: "sudo pacman -R --noconfirm {name}",
        PackageAction.UPGRADE: "sudo pacman -Syu --noconfirm --needed {name}",
    },
    installed_query="pacman -Q {name}",
)

# The daemon is part of the image; nothing is ever installed.
NO_PACKAGES = PackageManager(name="none")

SYSTEMD = InitSystem(
    name="systemd",
    service_template="sudo systemctl -f {action} {name}",
    reload_command="sudo systemctl -f daemon-reload",
    activation=(
        ServiceAction.DAEMON_RELOAD,
        ServiceAction.ENABLE,
        ServiceAction.RESTART,
    ),
)

UPSTART = InitSystem(
    name="upstart",
    service_template="sudo service {name} {action}",
    unsupported=(ServiceAction.DAEMON_RELOAD, ServiceAction.ENABLE, ServiceAction.DISABLE),
    activation=(ServiceAction.RESTART,),
)


@dataclass(frozen=True)
class FamilyProfile:
    """Everything data-driven about one provisioner variant."""

    name: str
    package_manager: PackageManager
    init_system: InitSystem
    default_storage_driver: str
    docker_package: str
    docker_options_dir: str
    unit_template: str
    unit_path: str
    unit_dialect: str = "systemd"
    base_packages: Tuple[str, ...] = ()
    service_name: str = "docker"
    # Check for btrfs before settling on an overlay default.
    probe_btrfs: bool = False


SYSTEMD_UNIT = "systemd/docker.service.j2"
SYSTEMD_UNIT_PATH = "/lib/systemd/system/docker.service"


FAMILIES: Mapping[str, FamilyProfile] = {
    "arch": FamilyProfile(
        name="arch",
        package_manager=PACMAN,
        init_system=SYSTEMD,
        default_storage_driver="overlay2",
        docker_package="docker",
        docker_options_dir="/etc/docker",
        unit_template=SYSTEMD_UNIT,
        unit_path=SYSTEMD_UNIT_PATH,
    ),
    "buildroot": FamilyProfile(
        name="buildroot",
        package_manager=NO_PACKAGES,
        init_system=SYSTEMD,
        default_storage_driver="overlay2",
        docker_package="",
        docker_options_dir="/var/lib/buildroot",
        unit_template="systemd/buildroot-docker.service.j2",
        unit_path=SYSTEMD_UNIT_PATH,
    ),
    "centos": FamilyProfile(
        name="centos",
        package_manager=YUM,
        init_system=SYSTEMD,
        default_storage_driver="overlay2",
        docker_package="docker",
        docker_options_dir="/etc/docker",
        unit_template=SYSTEMD_UNIT,
        unit_path=SYSTEMD_UNIT_PATH,
        base_packages=("curl",),
    ),
    "debian": FamilyProfile(
        name="debian",
        package_manager=APT,
        init_system=SYSTEMD,
        default_storage_driver="overlay2",
        docker_package="docker.io",
        docker_options_dir="/etc/docker",
        unit_template=SYSTEMD_UNIT,
        unit_path=SYSTEMD_UNIT_PATH,
        base_packages=("curl",),
    ),
    "fedora": FamilyProfile(
        name="fedora",
        package_manager=DNF,
        init_system=SYSTEMD,
        default_storage_driver="overlay2",
        docker_package="docker",
        docker_options_dir="/etc/docker",
        unit_template=SYSTEMD_UNIT,
        unit_path=SYSTEMD_UNIT_PATH,
        base_packages=("curl",),
    ),
    "redhat": FamilyProfile(
        name="redhat",
        package_manager=YUM,
        init_system=SYSTEMD,
        default_storage_driver="overlay2",
        docker_package="docker",
        docker_options_dir="/etc/docker",
        unit_template=SYSTEMD_UNIT,
        unit_path=SYSTEMD_UNIT_PATH,
        base_packages=("curl",),
    ),
    "suse": FamilyProfile(
        name="suse",
        package_manager=ZYPPER,
        init_system=SYSTEMD,
        default_storage_driver="overlay",
        docker_package="docker",
        docker_options_dir="/etc/docker",
        unit_template=SYSTEMD_UNIT,
        unit_path=SYSTEMD_UNIT_PATH,
        probe_btrfs=True,
    ),
    "ubuntu": FamilyProfile(
        name="ubuntu",
        package_manager=APT,
        init_system=UPSTART,
        default_storage_driver="overlay2",
        docker_package="docker.io",
        docker_options_dir="/etc/docker",
        unit_template="upstart/docker.default.j2",
        unit_path="/etc/default/docker",
        unit_dialect="upstart",
        base_packages=("curl",),
    ),
    "ubuntu-systemd": FamilyProfile(
        name="ubuntu-systemd",
        package_manager=APT,
        init_system=SYSTEMD,
        default_storage_driver="overlay2",
        docker_package="docker.io",
        docker_options_dir="/etc/docker",
        unit_template=SYSTEMD_UNIT,
        unit_path=SYSTEMD_UNIT_PATH,
        base_packages=("curl",),
    ),
}


def get_family(name: str) -> FamilyProfile:
    try:
        return FAMILIES[name]
    except KeyError:
        raise KeyError(f"Unknown OS family '{name}'") from None
