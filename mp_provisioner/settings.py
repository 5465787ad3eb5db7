"""Runtime knobs of the provisioning engine, resolved from the environment."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from mp_common.config import parse_bool_env, parse_float_env, parse_int_env
from mp_provisioner.models.options import DEFAULT_ENGINE_PORT


class ProvisioningSettings(BaseModel):
    """Polling and reachability settings shared by every provisioner."""

    wait_attempts: int = Field(default=60, gt=0, description="Daemon readiness polls")
    wait_interval: float = Field(default=3.0, ge=0, description="Seconds between polls")
    wait_deadline: Optional[float] = Field(
        default=None, gt=0, description="Optional wall-clock bound for a wait, in seconds"
    )
    docker_port: int = Field(default=DEFAULT_ENGINE_PORT, gt=0, lt=65536)
    contact_timeout: float = Field(default=5.0, gt=0)
    attempt_ip_contact: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProvisioningSettings":
        """Build settings from ``MP_*`` variables; unparsable values keep defaults."""
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}

        attempts = parse_int_env(env.get("MP_WAIT_ATTEMPTS"))
        if attempts is not None and attempts > 0:
            overrides["wait_attempts"] = attempts
        interval = parse_float_env(env.get("MP_WAIT_INTERVAL"))
        if interval is not None and interval >= 0:
            overrides["wait_interval"] = interval
        deadline = parse_float_env(env.get("MP_WAIT_DEADLINE"))
        if deadline is not None and deadline > 0:
            overrides["wait_deadline"] = deadline
        port = parse_int_env(env.get("MP_DOCKER_PORT"))
        if port is not None and 0 < port < 65536:
            overrides["docker_port"] = port
        timeout = parse_float_env(env.get("MP_CONTACT_TIMEOUT"))
        if timeout is not None and timeout > 0:
            overrides["contact_timeout"] = timeout
        contact = parse_bool_env(env.get("MP_ATTEMPT_IP_CONTACT"))
        if contact is not None:
            overrides["attempt_ip_contact"] = contact

        return cls(**overrides)
