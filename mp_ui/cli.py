"""
Command-line interface for machine-provisioner.

Lists the built-in provisioners, identifies remote hosts and provisions them
as Docker hosts over SSH.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mp_common.api import MPError, configure_logging, error_to_payload
from mp_provisioner.api import (
    EngineOptions,
    GenericDriver,
    StandardDetector,
    default_registry,
    provision_machine,
)
from mp_provisioner.models.options import DEFAULT_INSTALL_URL

console = Console()

app = typer.Typer(
    help="Provision remote machines as Docker hosts over SSH.", no_args_is_help=True
)


@app.callback(invoke_without_command=True)
def entry(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    log_json: bool = typer.Option(False, "--log-json", help="Emit JSON log lines."),
) -> None:
    """Global entry point configuring logging."""
    configure_logging(debug=debug, json=log_json or None, force=True)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _driver_for(
    name: str, address: str, user: str, port: int, key: Optional[str]
) -> GenericDriver:
    return GenericDriver(
        machine_name=name,
        ip_address=address,
        ssh_user=user,
        ssh_port=port,
        ssh_key_path=key or "",
    )


def _split_hosts(hosts: List[str]) -> List[Tuple[str, str]]:
    """``name=address`` pairs; a bare address is its own machine name."""
    pairs = []
    for raw in hosts:
        name, sep, address = raw.partition("=")
        pairs.append((name, address) if sep else (raw, raw))
    return pairs


@app.command("provisioners")
def list_provisioners() -> None:
    """Show the built-in provisioners in detection order."""
    table = Table(title="Provisioners", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    for index, name in enumerate(default_registry().names(), start=1):
        table.add_row(str(index), name)
    console.print(table)


@app.command("detect")
def detect(
    host: str = typer.Argument(..., help="Address of the machine to inspect."),
    user: str = typer.Option("root", "--user", "-u", help="SSH user."),
    port: int = typer.Option(22, "--port", "-p", help="SSH port."),
    key: Optional[str] = typer.Option(None, "--key", "-i", help="SSH private key path."),
) -> None:
    """Identify the host's OS and the provisioner that would handle it."""
    driver = _driver_for(host, host, user, port, key)
    detector = StandardDetector(default_registry())
    try:
        provisioner = detector.detect_provisioner(driver)
    except MPError as exc:
        console.print(f"[red]Detection failed:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    provisioner.close()

    info = provisioner.get_os_release_info()
    table = Table(title=f"Host {host}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    if info is not None:
        table.add_row("ID", info.id)
        table.add_row("ID_LIKE", info.id_like)
        table.add_row("VERSION_ID", info.version_id)
        table.add_row("PRETTY_NAME", info.pretty_name)
    table.add_row("Provisioner", str(provisioner))
    console.print(table)


def _check_pairs(values: List[str], flag: str) -> None:
    for value in values:
        if "=" not in value:
            raise typer.BadParameter(f"expected KEY=VALUE, got {value!r}", param_hint=flag)


@app.command("provision")
def provision(
    hosts: List[str] = typer.Argument(
        ..., help="Machines to provision, as ADDRESS or NAME=ADDRESS."
    ),
    user: str = typer.Option("root", "--user", "-u", help="SSH user."),
    port: int = typer.Option(22, "--port", "-p", help="SSH port."),
    key: Optional[str] = typer.Option(None, "--key", "-i", help="SSH private key path."),
    labels: Optional[List[str]] = typer.Option(
        None, "--engine-label", help="Daemon label KEY=VALUE (repeatable)."
    ),
    env: Optional[List[str]] = typer.Option(
        None, "--engine-env", help="Daemon environment KEY=VALUE (repeatable)."
    ),
    insecure_registries: Optional[List[str]] = typer.Option(
        None, "--engine-insecure-registry", help="Insecure registry (repeatable)."
    ),
    registry_mirrors: Optional[List[str]] = typer.Option(
        None, "--engine-registry-mirror", help="Registry mirror (repeatable)."
    ),
    engine_opts: Optional[List[str]] = typer.Option(
        None, "--engine-opt", help="Extra daemon flag FLAG or FLAG=VALUE (repeatable)."
    ),
    storage_driver: str = typer.Option(
        "", "--engine-storage-driver", help="Storage driver; default is per OS family."
    ),
    install_url: str = typer.Option(
        DEFAULT_INSTALL_URL,
        "--engine-install-url",
        help="Docker install script URL; empty installs the distribution package.",
    ),
) -> None:
    """Provision each host in turn; failures are reported per host."""
    labels = labels or []
    env = env or []
    _check_pairs(labels, "--engine-label")
    _check_pairs(env, "--engine-env")

    failures: Dict[str, dict] = {}
    for name, address in _split_hosts(hosts):
        engine = EngineOptions(
            labels=list(labels),
            env=list(env),
            insecure_registry=list(insecure_registries or []),
            registry_mirror=list(registry_mirrors or []),
            arbitrary_flags=list(engine_opts or []),
            storage_driver=storage_driver,
            install_url=install_url,
        )
        driver = _driver_for(name, address, user, port, key)
        console.print(f"Provisioning [bold]{name}[/bold] ({address})...")
        try:
            provisioner = provision_machine(driver, engine_options=engine)
        except MPError as exc:
            failures[name] = error_to_payload(exc)
            console.print(f"[red]{escape(name)}: {escape(str(exc))}[/red]")
            continue
        console.print(f"[green]{name}: provisioned with {provisioner}[/green]")

    if failures:
        table = Table(title="Failed hosts")
        table.add_column("Host", style="bold")
        table.add_column("Error type")
        table.add_column("Message")
        for name, payload in failures.items():
            table.add_row(name, payload["error_type"], payload["error"])
        console.print(table)
        raise typer.Exit(1)


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
