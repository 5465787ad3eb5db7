"""Package and service actions understood by every provisioner."""

from __future__ import annotations

from enum import Enum


class PackageAction(str, Enum):
    """Package manager operations."""

    INSTALL = "install"
    REMOVE = "remove"
    UPGRADE = "upgrade"


class ServiceAction(str, Enum):
    """Init system operations."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"
    ENABLE = "enable"
    DISABLE = "disable"
    DAEMON_RELOAD = "daemon-reload"
