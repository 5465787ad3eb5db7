"""Steps shared by every provisioner variant."""

from __future__ import annotations

import logging
import posixpath
import shlex
import socket
from typing import TYPE_CHECKING, List

from mp_common.errors import MPError, RemoteCommandError
from mp_provisioner.models.options import AuthOptions

if TYPE_CHECKING:
    from mp_provisioner.providers.base import Provisioner

logger = logging.getLogger(__name__)

OVERLAY_DRIVERS = ("overlay", "overlay2")

_UNREACHABLE_WARNING = """
This machine has been allocated an IP address, but it could not be reached
on the Docker daemon port (%s:%d): %s

SSH for the machine should still work, but connecting to exposed ports, such
as the Docker daemon port, may not work properly.

This could be due to a VPN, proxy, firewall or host file configuration issue.
"""


def get_hostname(provisioner: "Provisioner") -> str:
    return provisioner.ssh_command("hostname")


def set_hostname(provisioner: "Provisioner", hostname: str) -> None:
    """Set the running and persistent hostname and map it in /etc/hosts."""
    quoted = shlex.quote(hostname)
    provisioner.ssh_command(
        f"sudo hostname {quoted} && echo {quoted} | sudo tee /etc/hostname"
    )
    # Debian-style systems resolve the machine's own name through 127.0.1.1.
    pattern = shlex.quote(".*\\s" + hostname)
    substitution = shlex.quote("s/^127.0.1.1\\s.*/127.0.1.1 " + hostname + "/g")
    entry = shlex.quote("127.0.1.1 " + hostname)
    provisioner.ssh_command(
        f"if ! grep -xq {pattern} /etc/hosts; then "
        "if grep -xq '127.0.1.1\\s.*' /etc/hosts; then "
        f"sudo sed -i {substitution} /etc/hosts; "
        f"else echo {entry} | sudo tee -a /etc/hosts; "
        "fi; fi"
    )


def make_docker_options_dir(provisioner: "Provisioner") -> None:
    directory = provisioner.get_docker_options_dir()
    provisioner.ssh_command(f"sudo mkdir -p {shlex.quote(directory)}")


def remote_auth_options(provisioner: "Provisioner") -> AuthOptions:
    """Return a copy of the auth options with the on-machine paths filled in."""
    docker_dir = provisioner.get_docker_options_dir()
    # Remote paths are POSIX whatever the local platform is.
    return provisioner.get_auth_options().model_copy(
        update={
            "ca_cert_remote_path": posixpath.join(docker_dir, "ca.pem"),
            "server_cert_remote_path": posixpath.join(docker_dir, "server.pem"),
            "server_key_remote_path": posixpath.join(docker_dir, "server-key.pem"),
        }
    )


def tls_material_paths(auth: AuthOptions, verify: bool) -> List[str]:
    """Remote files the daemon's TLS flags point at."""
    paths = [auth.server_cert_remote_path, auth.server_key_remote_path]
    if verify:
        paths.insert(0, auth.ca_cert_remote_path)
    return paths


def tls_material_present(provisioner: "Provisioner", paths: List[str]) -> bool:
    command = " && ".join(f"sudo test -f {shlex.quote(path)}" for path in paths)
    try:
        provisioner.ssh_command(command)
    except RemoteCommandError as exc:
        if exc.transport_failure:
            raise
        return False
    return True


def get_filesystem_type(provisioner: "Provisioner", directory: str) -> str:
    return provisioner.ssh_command(f"stat -f -c %T {shlex.quote(directory)}").strip()


def probe_storage_filesystem(provisioner: "Provisioner") -> str:
    """Filesystem backing /var/lib/docker, or /var/lib before docker exists."""
    try:
        return get_filesystem_type(provisioner, "/var/lib/docker")
    except RemoteCommandError:
        return get_filesystem_type(provisioner, "/var/lib/")


def decide_storage_driver(
    provisioner: "Provisioner",
    default_driver: str,
    supplied_driver: str,
    probe_btrfs: bool = False,
) -> str:
    """Pick the storage driver: supplied value, else default.

    With ``probe_btrfs`` an overlay default gives way to btrfs when the
    remote docker storage lives on a btrfs filesystem.
    """
    if supplied_driver:
        return supplied_driver
    if not probe_btrfs or default_driver not in OVERLAY_DRIVERS:
        return default_driver

    filesystem = probe_storage_filesystem(provisioner)
    if "btrfs" in filesystem:
        logger.info(
            "Default storage driver is %s but the remote filesystem is btrfs; using btrfs",
            default_driver,
        )
        return "btrfs"
    return default_driver


def attempt_ip_contact(provisioner: "Provisioner", port: int, timeout: float) -> bool:
    """Try a TCP connection to the daemon port; only ever warns on failure."""
    machine = provisioner.get_driver()
    try:
        ip = machine.get_ip()
    except MPError as exc:
        logger.warning("Could not get IP address for created machine: %s", exc)
        return False

    try:
        with socket.create_connection((ip, port), timeout=timeout):
            return True
    except OSError as exc:
        logger.warning(_UNREACHABLE_WARNING, ip, port, exc)
        return False
