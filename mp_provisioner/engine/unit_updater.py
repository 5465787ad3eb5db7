"""Install a rendered unit only when it differs from the active one."""

from __future__ import annotations

import logging
import posixpath
import shlex

from mp_common.errors import ProvisioningError
from mp_provisioner.families import InitSystem
from mp_provisioner.remote.channel import SSHCommander

logger = logging.getLogger(__name__)

UNCHANGED = "unchanged"
CHANGED = "changed"


def _write_staged(commander: SSHCommander, content: str, dst: str) -> str:
    staged = f"{dst}.new"
    commander.ssh_command(
        f"sudo mkdir -p {shlex.quote(posixpath.dirname(dst))} && "
        f"printf %s {shlex.quote(content)} | sudo tee {shlex.quote(staged)} > /dev/null"
    )
    return staged


def _compare(commander: SSHCommander, dst: str, staged: str) -> str:
    verdict = commander.ssh_command(
        f"sudo cmp -s {shlex.quote(dst)} {shlex.quote(staged)} "
        f"&& echo {UNCHANGED} || echo {CHANGED}"
    )
    if verdict not in (UNCHANGED, CHANGED):
        raise ProvisioningError(
            f"Unexpected comparison output for {dst}: {verdict!r}",
            context={"path": dst},
        )
    return verdict


def update_unit(
    commander: SSHCommander,
    init_system: InitSystem,
    name: str,
    content: str,
    dst: str,
) -> bool:
    """Stage ``content`` next to ``dst`` and activate it if it changed.

    Returns True when the active file was replaced and the service was
    reloaded and restarted, False when the content was already in place.
    """
    logger.info("Updating %s unit: %s ...", name, dst)
    staged = _write_staged(commander, content, dst)

    if _compare(commander, dst, staged) == UNCHANGED:
        logger.info("%s is up to date; leaving %s running", dst, name)
        return False

    commander.ssh_command(f"sudo mv {shlex.quote(staged)} {shlex.quote(dst)}")
    for command in init_system.activation_commands(name):
        commander.ssh_command(command)
    logger.info("Activated new %s configuration for %s", init_system.name, name)
    return True
