"""Option bundles consumed and finalized by the provisioning pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from pydantic import BaseModel, Field

DEFAULT_ENGINE_PORT = 2376
DEFAULT_INSTALL_URL = "https://get.docker.com"


class EngineOptions(BaseModel):
    """Docker daemon runtime configuration."""

    arbitrary_flags: List[str] = Field(
        default_factory=list, description="Extra daemon flags, rendered as --<flag>"
    )
    dns: List[str] = Field(default_factory=list)
    graph_dir: str = ""
    env: List[str] = Field(
        default_factory=list, description="KEY=VALUE entries exported to the daemon"
    )
    ipv6: bool = False
    insecure_registry: List[str] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)
    log_level: str = ""
    storage_driver: str = Field(default="", description="Empty means unset")
    selinux_enabled: bool = False
    tls_verify: bool = True
    registry_mirror: List[str] = Field(default_factory=list)
    install_url: str = Field(
        default="",
        description="When set, docker is installed with this upstream script",
    )


class AuthOptions(BaseModel):
    """TLS material locations, local and on the provisioned machine."""

    cert_dir: str = ""
    ca_cert_path: str = ""
    ca_private_key_path: str = ""
    ca_cert_remote_path: str = ""
    server_cert_path: str = ""
    server_key_path: str = ""
    client_key_path: str = ""
    server_cert_remote_path: str = ""
    server_key_remote_path: str = ""
    client_cert_path: str = ""
    server_cert_sans: List[str] = Field(default_factory=list)
    store_path: str = ""


class SwarmOptions(BaseModel):
    """Cluster membership configuration."""

    is_swarm: bool = False
    address: str = ""
    discovery: str = ""
    agent: bool = False
    master: bool = False
    host: str = ""
    image: str = ""
    strategy: str = ""
    heartbeat: int = 0
    overcommit: float = 0.0
    arbitrary_flags: List[str] = Field(default_factory=list)
    arbitrary_join_flags: List[str] = Field(default_factory=list)
    env: List[str] = Field(default_factory=list)
    is_experimental: bool = False


@dataclass(frozen=True)
class DockerOptions:
    """Rendered daemon configuration and where it lives on the machine."""

    engine_options: str
    engine_options_path: str


@dataclass(frozen=True)
class EngineConfigContext:
    """Immutable input of the configuration renderer."""

    docker_port: int
    auth_options: AuthOptions
    engine_options: EngineOptions
    docker_options_dir: str = ""
    # False renders a daemon listening on the local socket only.
    tls: bool = True
