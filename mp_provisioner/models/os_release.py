"""Parsed ``/etc/os-release`` identity of a remote machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields

from mp_common.errors import OsReleaseParseError

logger = logging.getLogger(__name__)

_KEY_TO_FIELD = {
    "NAME": "name",
    "VERSION": "version",
    "ID": "id",
    "ID_LIKE": "id_like",
    "PRETTY_NAME": "pretty_name",
    "VERSION_ID": "version_id",
    "ANSI_COLOR": "ansi_color",
    "HOME_URL": "home_url",
    "SUPPORT_URL": "support_url",
    "BUG_REPORT_URL": "bug_report_url",
}


@dataclass(frozen=True)
class OsRelease:
    """Immutable snapshot of the remote OS identification fields."""

    name: str = ""
    version: str = ""
    id: str = ""
    id_like: str = ""
    pretty_name: str = ""
    version_id: str = ""
    ansi_color: str = ""
    home_url: str = ""
    support_url: str = ""
    bug_report_url: str = ""

    def id_like_tokens(self) -> list[str]:
        return self.id_like.split()


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def parse_os_release(content: str) -> OsRelease:
    """Parse os-release text into an :class:`OsRelease`.

    Malformed lines are skipped with a warning. Content with no recognised
    key at all raises :class:`OsReleaseParseError`.
    """
    values: dict[str, str] = {}
    recognised = False
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep or not key:
            logger.warning("Skipping invalid os-release line: %r", raw_line)
            continue
        field_name = _KEY_TO_FIELD.get(key.strip())
        if field_name is None:
            logger.debug("Ignoring os-release key %s", key)
            continue
        values[field_name] = _strip_quotes(value.strip())
        recognised = True

    if not recognised:
        raise OsReleaseParseError(
            "No os-release fields found in probe output",
            context={"content": content[:200]},
        )
    known = {f.name for f in fields(OsRelease)}
    return OsRelease(**{k: v for k, v in values.items() if k in known})
