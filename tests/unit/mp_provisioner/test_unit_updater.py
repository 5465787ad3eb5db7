"""Tests for the idempotent unit updater."""

from __future__ import annotations

import pytest

from mp_common.errors import ProvisioningError
from mp_provisioner.engine.unit_updater import update_unit
from mp_provisioner.families import SYSTEMD, UPSTART
from tests.helpers.fakes import FakeSSHCommander


pytestmark = pytest.mark.unit_provisioner

UNIT = "/lib/systemd/system/docker.service"
CONTENT = "[Service]\nExecStart=/usr/bin/dockerd --label 'a b' $MAINPID 90%%\n"


def test_first_update_installs_and_activates() -> None:
    commander = FakeSSHCommander()

    changed = update_unit(commander, SYSTEMD, "docker", CONTENT, UNIT)

    assert changed is True
    assert commander.files[UNIT] == CONTENT
    assert f"{UNIT}.new" not in commander.files
    assert commander.ran("daemon-reload") == ["sudo systemctl -f daemon-reload"]
    assert commander.ran("systemctl -f enable") == ["sudo systemctl -f enable docker"]
    assert commander.ran("systemctl -f restart") == ["sudo systemctl -f restart docker"]


def test_identical_content_is_applied_once() -> None:
    commander = FakeSSHCommander()

    assert update_unit(commander, SYSTEMD, "docker", CONTENT, UNIT) is True
    assert update_unit(commander, SYSTEMD, "docker", CONTENT, UNIT) is False

    assert len(commander.ran("restart")) == 1
    assert len(commander.ran("daemon-reload")) == 1
    assert len(commander.ran("sudo mv ")) == 1


def test_changed_content_is_reapplied() -> None:
    commander = FakeSSHCommander()

    update_unit(commander, SYSTEMD, "docker", CONTENT, UNIT)
    assert update_unit(commander, SYSTEMD, "docker", CONTENT + "# v2\n", UNIT) is True

    assert commander.files[UNIT].endswith("# v2\n")
    assert len(commander.ran("restart")) == 2


def test_upstart_activation_only_restarts() -> None:
    commander = FakeSSHCommander()

    update_unit(commander, UPSTART, "docker", "DOCKER_OPTS=''\n", "/etc/default/docker")

    assert commander.ran("service docker") == ["sudo service docker restart"]
    assert commander.ran("systemctl") == []


def test_staging_creates_parent_directory() -> None:
    commander = FakeSSHCommander()

    update_unit(commander, SYSTEMD, "docker", CONTENT, UNIT)

    assert commander.commands[0].startswith("sudo mkdir -p /lib/systemd/system && printf %s ")


def test_unexpected_compare_output_is_an_error() -> None:
    commander = FakeSSHCommander().respond("sudo cmp -s", "maybe")

    with pytest.raises(ProvisioningError):
        update_unit(commander, SYSTEMD, "docker", CONTENT, UNIT)

    assert commander.ran("sudo mv ") == []
