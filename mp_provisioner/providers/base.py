"""Provisioner contract and the table-driven pipeline every family shares."""

from __future__ import annotations

import logging
import shlex
from abc import ABC, abstractmethod
from typing import Optional

from mp_common.errors import RemoteCommandError
from mp_common.logging import machine_logger
from mp_provisioner.collaborators import (
    AuthConfigurer,
    SwarmConfigurer,
    skip_auth_configuration,
    skip_swarm_configuration,
)
from mp_provisioner.engine.rendering import render_engine_config
from mp_provisioner.engine.unit_updater import update_unit
from mp_provisioner.engine.waiter import wait_for, wait_for_specific_or_error
from mp_provisioner.families import FamilyProfile, get_family
from mp_provisioner.models.actions import PackageAction, ServiceAction
from mp_provisioner.models.options import (
    AuthOptions,
    DockerOptions,
    EngineConfigContext,
    EngineOptions,
    SwarmOptions,
)
from mp_provisioner.models.os_release import OsRelease
from mp_provisioner.providers import common
from mp_provisioner.remote.channel import SSHCommander
from mp_provisioner.remote.drivers import Driver, DriverSSHCommander
from mp_provisioner.settings import ProvisioningSettings

logger = logging.getLogger(__name__)

APT_LOCK_MARKER = "Could not get lock"


class Provisioner(ABC):
    """Everything the detector, the CLI and the TLS/swarm steps rely on."""

    ssh_commander: SSHCommander

    @abstractmethod
    def compatible_with_host(self) -> bool:
        """Pure predicate over the cached OS release info."""

    @abstractmethod
    def package(self, name: str, action: PackageAction) -> None:
        ...

    @abstractmethod
    def service(self, name: str, action: ServiceAction) -> None:
        ...

    @abstractmethod
    def hostname(self) -> str:
        ...

    @abstractmethod
    def set_hostname(self, hostname: str) -> None:
        ...

    @abstractmethod
    def generate_docker_options(self, docker_port: int, tls: bool = True) -> DockerOptions:
        ...

    @abstractmethod
    def get_docker_options_dir(self) -> str:
        ...

    @abstractmethod
    def get_auth_options(self) -> AuthOptions:
        ...

    @abstractmethod
    def get_swarm_options(self) -> SwarmOptions:
        ...

    @abstractmethod
    def get_driver(self) -> Driver:
        ...

    @abstractmethod
    def ssh_command(self, command: str) -> str:
        ...

    @abstractmethod
    def set_os_release_info(self, info: OsRelease) -> None:
        ...

    @abstractmethod
    def get_os_release_info(self) -> Optional[OsRelease]:
        ...

    @abstractmethod
    def provision(
        self,
        swarm_options: Optional[SwarmOptions] = None,
        auth_options: Optional[AuthOptions] = None,
        engine_options: Optional[EngineOptions] = None,
    ) -> None:
        ...

    def close(self) -> None:
        """Release the command channel; safe to call more than once."""
        self.ssh_commander.close()


class FamilyProvisioner(Provisioner):
    """Provisioner whose commands come from a :class:`FamilyProfile` row.

    Variants set ``family`` and override :meth:`compatible_with_host` plus,
    where needed, the ``before_install``/``after_install`` hooks.
    """

    family: str = ""

    def __init__(
        self,
        driver: Driver,
        *,
        profile: Optional[FamilyProfile] = None,
        settings: Optional[ProvisioningSettings] = None,
        ssh_commander: Optional[SSHCommander] = None,
        configure_auth: Optional[AuthConfigurer] = None,
        configure_swarm: Optional[SwarmConfigurer] = None,
    ) -> None:
        self.driver = driver
        self.profile = profile or get_family(self.family)
        self.settings = settings or ProvisioningSettings.from_env()
        self.ssh_commander = ssh_commander or DriverSSHCommander(driver)
        self.configure_auth: AuthConfigurer = configure_auth or skip_auth_configuration
        self.configure_swarm: SwarmConfigurer = (
            configure_swarm or skip_swarm_configuration
        )
        self.os_release_info: Optional[OsRelease] = None
        self.packages = list(self.profile.base_packages)
        self.engine_options = EngineOptions()
        self.auth_options = AuthOptions()
        self.swarm_options = SwarmOptions()

    def __str__(self) -> str:
        return self.profile.name

    # -- OS identity -----------------------------------------------------

    def set_os_release_info(self, info: OsRelease) -> None:
        self.os_release_info = info

    def get_os_release_info(self) -> Optional[OsRelease]:
        return self.os_release_info

    def _os_id(self) -> str:
        return self.os_release_info.id if self.os_release_info else ""

    # -- accessors -------------------------------------------------------

    def get_docker_options_dir(self) -> str:
        return self.profile.docker_options_dir

    def get_auth_options(self) -> AuthOptions:
        return self.auth_options

    def get_swarm_options(self) -> SwarmOptions:
        return self.swarm_options

    def get_driver(self) -> Driver:
        return self.driver

    def ssh_command(self, command: str) -> str:
        return self.ssh_commander.ssh_command(command)

    # -- host primitives -------------------------------------------------

    def hostname(self) -> str:
        return common.get_hostname(self)

    def set_hostname(self, hostname: str) -> None:
        common.set_hostname(self, hostname)

    def is_package_installed(self, name: str) -> bool:
        query = self.profile.package_manager.query(name)
        if query is None:
            return False
        try:
            self.ssh_command(query)
        except RemoteCommandError as exc:
            if exc.transport_failure:
                raise
            return False
        return True

    def package(self, name: str, action: PackageAction) -> None:
        manager = self.profile.package_manager
        command = manager.command(action, name)
        if command is None:
            logger.debug("%s manages no packages; skipping %s %s", self, action.value, name)
            return

        if action is PackageAction.INSTALL and self.is_package_installed(name):
            logger.debug("%s is already installed, skipping operation", name)
            return

        if manager.needs_refresh(action):
            self._refresh_package_metadata()

        logger.debug("%s: action=%s name=%s", manager.name, action.value, name)
        self.ssh_command(command)

    def _refresh_package_metadata(self) -> None:
        refresh = self.profile.package_manager.refresh
        if refresh is None:
            return

        def attempt() -> tuple[bool, Optional[Exception]]:
            try:
                self.ssh_command(refresh)
            except RemoteCommandError as exc:
                if APT_LOCK_MARKER in exc.stderr or APT_LOCK_MARKER in str(exc):
                    logger.debug("Package database locked; retrying %r", refresh)
                    return False, None
                return False, exc
            return True, None

        wait_for_specific_or_error(
            attempt,
            max_attempts=self.settings.wait_attempts,
            interval=self.settings.wait_interval,
            deadline=self.settings.wait_deadline,
        )

    def service(self, name: str, action: ServiceAction) -> None:
        command = self.profile.init_system.service_command(name, action)
        if command is None:
            logger.debug(
                "%s has no %s action; skipping for %s",
                self.profile.init_system.name,
                action.value,
                name,
            )
            return
        self.ssh_command(command)

    # -- daemon configuration --------------------------------------------

    def generate_docker_options(self, docker_port: int, tls: bool = True) -> DockerOptions:
        """Render the daemon configuration for this family.

        With ``tls`` false the daemon only listens on its local socket.
        """
        provider_label = f"provider={self.driver.driver_name()}"
        if provider_label not in self.engine_options.labels:
            self.engine_options.labels.append(provider_label)

        context = EngineConfigContext(
            docker_port=docker_port,
            auth_options=common.remote_auth_options(self),
            engine_options=self.engine_options,
            docker_options_dir=self.get_docker_options_dir(),
            tls=tls,
        )
        content = render_engine_config(
            self.profile.unit_template, context, self.profile.unit_dialect
        )
        return DockerOptions(
            engine_options=content, engine_options_path=self.profile.unit_path
        )

    def apply_docker_options(self, options: DockerOptions) -> bool:
        return update_unit(
            self.ssh_commander,
            self.profile.init_system,
            self.profile.service_name,
            options.engine_options,
            options.engine_options_path,
        )

    def docker_daemon_responding(self) -> bool:
        logger.debug("checking docker daemon")
        try:
            self.ssh_command("sudo docker version")
        except RemoteCommandError as exc:
            logger.warning("Error running command to check if the daemon is up: %s", exc)
            logger.debug("'sudo docker version' output:\n%s", exc.stdout)
            return False
        return True

    def tls_material_present(self) -> bool:
        """Whether the certificates the secured unit points at exist remotely."""
        paths = common.tls_material_paths(
            common.remote_auth_options(self), self.engine_options.tls_verify
        )
        return common.tls_material_present(self, paths)

    def wait_for_docker(self, log: logging.LoggerAdapter) -> None:
        log.info("Waiting for docker daemon")
        wait_for(
            self.docker_daemon_responding,
            max_attempts=self.settings.wait_attempts,
            interval=self.settings.wait_interval,
            deadline=self.settings.wait_deadline,
        )

    # -- pipeline --------------------------------------------------------

    def before_install(self) -> None:
        """Family hook run before any package is installed."""

    def after_install(self) -> None:
        """Family hook run after the docker package is installed."""

    def install_packages(self) -> None:
        for name in self.packages:
            self.package(name, PackageAction.INSTALL)

    def install_docker(self) -> None:
        install_url = self.engine_options.install_url
        if install_url:
            self.ssh_command(
                f"if ! type docker; then curl -sSL {shlex.quote(install_url)} | sh -; fi"
            )
            return
        if self.profile.docker_package:
            self.package(self.profile.docker_package, PackageAction.INSTALL)

    def provision(
        self,
        swarm_options: Optional[SwarmOptions] = None,
        auth_options: Optional[AuthOptions] = None,
        engine_options: Optional[EngineOptions] = None,
    ) -> None:
        """Run the provisioning pipeline; the first failing step's error propagates."""
        self.swarm_options = swarm_options if swarm_options is not None else SwarmOptions()
        self.auth_options = auth_options if auth_options is not None else AuthOptions()
        self.engine_options = engine_options if engine_options is not None else EngineOptions()
        self.swarm_options.env = self.engine_options.env

        machine = self.driver.get_machine_name()
        log = machine_logger(logger, machine, phase="provision")
        port = self.settings.docker_port

        self.engine_options.storage_driver = common.decide_storage_driver(
            self,
            self.profile.default_storage_driver,
            self.engine_options.storage_driver,
            probe_btrfs=self.profile.probe_btrfs,
        )

        log.info("Setting hostname to %s", machine)
        self.set_hostname(machine)

        common.make_docker_options_dir(self)

        self.before_install()
        log.info("Installing base packages")
        self.install_packages()
        log.info("Installing docker")
        self.install_docker()
        self.after_install()

        log.info("Configuring the %s docker service", self.profile.init_system.name)
        tls = self.tls_material_present()
        if not tls:
            log.info("No TLS material yet; docker starts on its local socket only")
        self.apply_docker_options(self.generate_docker_options(port, tls=tls))
        self.wait_for_docker(log)

        self.auth_options = common.remote_auth_options(self)
        log.info("Configuring auth")
        self.configure_auth(self)

        if self.tls_material_present():
            if self.apply_docker_options(self.generate_docker_options(port, tls=True)):
                log.info("Docker restarted with TLS on port %d", port)
                self.wait_for_docker(log)
        else:
            log.warning(
                "TLS material missing on %s; docker is not exposed on port %d",
                machine,
                port,
            )

        self.swarm_options.env = self.engine_options.env
        log.info("Configuring swarm")
        self.configure_swarm(self, self.swarm_options, self.auth_options)

        if self.settings.attempt_ip_contact:
            common.attempt_ip_contact(self, port, self.settings.contact_timeout)
