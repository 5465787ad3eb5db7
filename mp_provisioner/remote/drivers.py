"""Machine driver contract and the generic SSH driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from mp_common.errors import DriverError
from mp_provisioner.remote.channel import FabricCommander


class Driver(Protocol):
    """What the provisioning engine needs from a hypervisor or cloud driver."""

    def driver_name(self) -> str:
        ...

    def get_machine_name(self) -> str:
        ...

    def get_ip(self) -> str:
        ...

    def get_ssh_hostname(self) -> str:
        ...

    def get_ssh_port(self) -> int:
        ...

    def get_ssh_username(self) -> str:
        ...

    def get_ssh_key_path(self) -> str:
        ...


@dataclass
class GenericDriver:
    """Driver for an existing machine that is already reachable over SSH."""

    machine_name: str
    ip_address: str
    ssh_user: str = "root"
    ssh_port: int = 22
    ssh_key_path: str = ""

    def driver_name(self) -> str:
        return "generic"

    def get_machine_name(self) -> str:
        return self.machine_name

    def get_ip(self) -> str:
        if not self.ip_address:
            raise DriverError(
                "IP address is not set", context={"machine": self.machine_name}
            )
        return self.ip_address

    def get_ssh_hostname(self) -> str:
        return self.get_ip()

    def get_ssh_port(self) -> int:
        return self.ssh_port

    def get_ssh_username(self) -> str:
        return self.ssh_user

    def get_ssh_key_path(self) -> str:
        return self.ssh_key_path


class DriverSSHCommander:
    """Command channel resolved lazily from a driver's SSH coordinates."""

    def __init__(self, driver: Driver) -> None:
        self._driver = driver
        self._commander: Optional[FabricCommander] = None

    def _resolve(self) -> FabricCommander:
        if self._commander is None:
            self._commander = FabricCommander(
                self._driver.get_ssh_hostname(),
                user=self._driver.get_ssh_username(),
                port=self._driver.get_ssh_port(),
                key_filename=self._driver.get_ssh_key_path() or None,
            )
        return self._commander

    def ssh_command(self, command: str) -> str:
        return self._resolve().ssh_command(command)

    def close(self) -> None:
        if self._commander is not None:
            self._commander.close()
            self._commander = None
