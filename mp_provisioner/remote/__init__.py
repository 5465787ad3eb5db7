"""Remote command channel and machine driver seams."""

from mp_provisioner.remote.channel import FabricCommander, SSHCommander
from mp_provisioner.remote.drivers import Driver, DriverSSHCommander, GenericDriver

__all__ = [
    "Driver",
    "DriverSSHCommander",
    "FabricCommander",
    "GenericDriver",
    "SSHCommander",
]
