"""Tests for environment-driven provisioning settings."""

import pytest
from pydantic import ValidationError

from mp_provisioner.settings import ProvisioningSettings


pytestmark = pytest.mark.unit_provisioner


def test_defaults() -> None:
    settings = ProvisioningSettings.from_env({})

    assert settings.wait_attempts == 60
    assert settings.wait_interval == 3.0
    assert settings.wait_deadline is None
    assert settings.docker_port == 2376
    assert settings.contact_timeout == 5.0
    assert settings.attempt_ip_contact is True


def test_overrides_from_env() -> None:
    settings = ProvisioningSettings.from_env(
        {
            "MP_WAIT_ATTEMPTS": "5",
            "MP_WAIT_INTERVAL": "0.5",
            "MP_WAIT_DEADLINE": "30",
            "MP_DOCKER_PORT": "12376",
            "MP_CONTACT_TIMEOUT": "2",
            "MP_ATTEMPT_IP_CONTACT": "no",
        }
    )

    assert settings.wait_attempts == 5
    assert settings.wait_interval == 0.5
    assert settings.wait_deadline == 30.0
    assert settings.docker_port == 12376
    assert settings.contact_timeout == 2.0
    assert settings.attempt_ip_contact is False


@pytest.mark.parametrize(
    "key,value,field,default",
    [
        ("MP_WAIT_ATTEMPTS", "many", "wait_attempts", 60),
        ("MP_WAIT_ATTEMPTS", "0", "wait_attempts", 60),
        ("MP_WAIT_INTERVAL", "-1", "wait_interval", 3.0),
        ("MP_DOCKER_PORT", "70000", "docker_port", 2376),
        ("MP_WAIT_DEADLINE", "0", "wait_deadline", None),
    ],
)
def test_invalid_values_keep_defaults(key, value, field, default) -> None:
    settings = ProvisioningSettings.from_env({key: value})
    assert getattr(settings, field) == default


def test_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("MP_WAIT_ATTEMPTS", "7")
    assert ProvisioningSettings.from_env().wait_attempts == 7


def test_direct_construction_is_validated() -> None:
    with pytest.raises(ValidationError):
        ProvisioningSettings(wait_attempts=0)
