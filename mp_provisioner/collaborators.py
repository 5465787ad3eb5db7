"""Seams for the TLS and swarm steps, which live outside this engine."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from mp_common.errors import ConfigurationError
from mp_provisioner.models.options import AuthOptions, SwarmOptions

if TYPE_CHECKING:
    from mp_provisioner.providers.base import Provisioner

logger = logging.getLogger(__name__)


class AuthConfigurer(Protocol):
    """Generate or distribute TLS material for the daemon endpoint.

    Called after the remote auth paths are final. Implementations read
    ``provisioner.get_auth_options()``, talk to the machine through
    ``provisioner.ssh_command`` and raise on failure.
    """

    def __call__(self, provisioner: "Provisioner") -> None:
        ...


class SwarmConfigurer(Protocol):
    """Configure cluster membership for a provisioned machine."""

    def __call__(
        self,
        provisioner: "Provisioner",
        swarm_options: SwarmOptions,
        auth_options: AuthOptions,
    ) -> None:
        ...


def skip_auth_configuration(provisioner: "Provisioner") -> None:
    logger.warning(
        "No auth configurer installed; TLS material on %s left untouched",
        provisioner.get_driver().get_machine_name(),
    )


def skip_swarm_configuration(
    provisioner: "Provisioner",
    swarm_options: SwarmOptions,
    auth_options: AuthOptions,
) -> None:
    if not swarm_options.is_swarm:
        return
    raise ConfigurationError(
        "Swarm configuration requested but no swarm configurer was supplied",
        context={"machine": provisioner.get_driver().get_machine_name()},
    )
