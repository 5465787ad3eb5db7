"""Render OS-family daemon unit definitions from engine and auth options."""

from __future__ import annotations

import shlex
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, Iterable, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from mp_common.errors import TemplateRenderError
from mp_provisioner.models.options import EngineConfigContext

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def escape_systemd_specifiers(value: str) -> str:
    """Double every ``%`` so systemd never expands it as a specifier."""
    return value.replace("%", "%%")


def _quote_systemd_value(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def escape_systemd_env(env: Iterable[str]) -> List[str]:
    """Escape ``KEY=VALUE`` entries for ``Environment=`` directives.

    Specifiers are escaped first, then the value is wrapped in double quotes
    (``KEY="VALUE"``). An entry without ``=`` is quoted as a whole. Newlines,
    backslashes and quotes inside the value cannot start a new directive.
    """
    escaped: List[str] = []
    for entry in env:
        entry = escape_systemd_specifiers(entry)
        key, sep, value = entry.partition("=")
        if sep and key:
            escaped.append(f"{key}={_quote_systemd_value(value)}")
        else:
            escaped.append(_quote_systemd_value(entry))
    return escaped


def quote_shell_env(env: Iterable[str]) -> List[str]:
    """Render ``KEY=VALUE`` entries as shell assignments with a quoted value."""
    quoted: List[str] = []
    for entry in env:
        key, sep, value = entry.partition("=")
        if sep and key:
            quoted.append(f"{key}={shlex.quote(value)}")
        else:
            quoted.append(shlex.quote(entry))
    return quoted


def _single_quoted(value: str) -> str:
    """Escape a word placed inside an existing single-quoted shell string."""
    return str(value).replace("'", "'\\''")


ENV_ESCAPERS: Dict[str, Callable[[Iterable[str]], List[str]]] = {
    "systemd": escape_systemd_env,
    "upstart": quote_shell_env,
}


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )
    env.filters["specifier"] = escape_systemd_specifiers
    env.filters["sq"] = _single_quoted
    return env


def render_engine_config(
    template_name: str, context: EngineConfigContext, dialect: str = "systemd"
) -> str:
    """Render ``template_name`` for ``context``.

    Environment entries are escaped for ``dialect`` before they reach the
    template; the options inside ``context`` are never modified.
    """
    try:
        escaper = ENV_ESCAPERS[dialect]
    except KeyError:
        raise TemplateRenderError(
            f"Unknown unit dialect '{dialect}'", context={"template": template_name}
        ) from None
    environment = escaper(context.engine_options.env)

    try:
        template = _environment().get_template(template_name)
        return template.render(
            docker_port=context.docker_port,
            docker_options_dir=context.docker_options_dir,
            auth=context.auth_options,
            engine=context.engine_options,
            environment=environment,
            tls=context.tls,
        )
    except TemplateError as exc:
        raise TemplateRenderError(
            f"Failed to render {template_name}: {exc}",
            context={"template": template_name},
            cause=exc,
        ) from exc
