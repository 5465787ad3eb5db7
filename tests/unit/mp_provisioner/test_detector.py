"""Tests for OS detection and provisioner selection."""

from __future__ import annotations

import pytest

from mp_common.errors import DetectionError, NoCompatibleProvisionerError
from mp_provisioner.engine.detector import OS_RELEASE_PROBE, StandardDetector
from mp_provisioner.engine.registry import ProvisionerRegistry
from mp_provisioner.providers import default_registry
from mp_provisioner.providers.debian import DebianProvisioner
from mp_provisioner.providers.ubuntu import UbuntuProvisioner
from tests.helpers.fakes import (
    DEBIAN_8,
    UBUNTU_1404,
    FakeDriver,
    FakeSSHCommander,
    command_failure,
    fake_entry,
)


pytestmark = pytest.mark.unit_provisioner


def _detector(registry: ProvisionerRegistry, commander: FakeSSHCommander) -> StandardDetector:
    return StandardDetector(registry, commander_factory=lambda driver: commander)


def test_first_registered_compatible_provisioner_wins() -> None:
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, UBUNTU_1404)
    registry = ProvisionerRegistry([fake_entry("fake-a"), fake_entry("fake-b")])

    provisioner = _detector(registry, commander).detect_provisioner(FakeDriver())

    assert str(provisioner) == "fake-a"
    assert provisioner.get_os_release_info().id == "ubuntu"
    assert provisioner.ssh_commander is commander


def test_incompatible_entries_are_skipped() -> None:
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, UBUNTU_1404)
    registry = ProvisionerRegistry(
        [fake_entry("never", compatible=False), fake_entry("always")]
    )

    provisioner = _detector(registry, commander).detect_provisioner(FakeDriver())

    assert str(provisioner) == "always"


def test_probe_runs_exactly_once() -> None:
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, DEBIAN_8)

    _detector(default_registry(), commander).detect_provisioner(FakeDriver())

    assert commander.ran(OS_RELEASE_PROBE) == [OS_RELEASE_PROBE]


def test_no_match_names_the_os_id() -> None:
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, "ID=plan9\n")

    with pytest.raises(NoCompatibleProvisionerError) as excinfo:
        _detector(default_registry(), commander).detect_provisioner(FakeDriver())

    assert excinfo.value.os_id == "plan9"
    assert "plan9" in str(excinfo.value)


def test_probe_failure_is_a_detection_error() -> None:
    failure = command_failure(OS_RELEASE_PROBE, exit_code=None)
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, failure)

    with pytest.raises(DetectionError) as excinfo:
        _detector(default_registry(), commander).detect_provisioner(FakeDriver())

    assert excinfo.value.__cause__ is failure


@pytest.mark.parametrize(
    "response",
    [
        command_failure(OS_RELEASE_PROBE, exit_code=None),
        "not an os-release file",
        "ID=plan9\n",
    ],
)
def test_failed_detection_closes_the_channel(response) -> None:
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, response)

    with pytest.raises(DetectionError):
        _detector(default_registry(), commander).detect_provisioner(FakeDriver())

    assert commander.closed == 1


def test_selected_provisioner_keeps_the_channel_open() -> None:
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, DEBIAN_8)

    _detector(default_registry(), commander).detect_provisioner(FakeDriver())

    assert commander.closed == 0


def test_unparsable_release_is_a_detection_error() -> None:
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, "not an os-release file")

    with pytest.raises(DetectionError):
        _detector(default_registry(), commander).detect_provisioner(FakeDriver())


@pytest.mark.parametrize(
    "content,expected",
    [
        (UBUNTU_1404, UbuntuProvisioner),
        (DEBIAN_8, DebianProvisioner),
    ],
)
def test_builtin_registry_detects_real_releases(content, expected) -> None:
    commander = FakeSSHCommander().respond(OS_RELEASE_PROBE, content)

    provisioner = _detector(default_registry(), commander).detect_provisioner(FakeDriver())

    assert type(provisioner) is expected
