"""Tests for /etc/os-release parsing."""

from __future__ import annotations

import pytest

from mp_common.errors import OsReleaseParseError
from mp_provisioner.models.os_release import OsRelease, parse_os_release
from tests.helpers.fakes import DEBIAN_8, UBUNTU_1404


pytestmark = pytest.mark.unit_provisioner


def test_parses_quoted_and_bare_values() -> None:
    info = parse_os_release(UBUNTU_1404)

    assert info.id == "ubuntu"
    assert info.id_like == "debian"
    assert info.version_id == "14.04"
    assert info.name == "Ubuntu"
    assert info.pretty_name == "Ubuntu 14.04 LTS"
    assert info.bug_report_url == "http://bugs.launchpad.net/ubuntu/"


def test_unknown_keys_comments_and_bad_lines_are_ignored() -> None:
    content = "# comment\n\nID=fedora\nVARIANT=\"Server\"\nthis is junk\nVERSION_ID=29\n"

    info = parse_os_release(content)

    assert info == OsRelease(id="fedora", version_id="29")


def test_value_may_contain_equals_sign() -> None:
    info = parse_os_release('ID=debian\nHOME_URL="http://example.com/?a=b"\n')
    assert info.home_url == "http://example.com/?a=b"


def test_id_like_tokens_split_on_whitespace() -> None:
    info = parse_os_release('ID=opensuse-leap\nID_LIKE="suse opensuse"\n')
    assert info.id_like_tokens() == ["suse", "opensuse"]


@pytest.mark.parametrize("content", ["", "garbage without separator", "# only a comment\n"])
def test_content_without_known_fields_is_rejected(content: str) -> None:
    with pytest.raises(OsReleaseParseError):
        parse_os_release(content)


def test_debian_without_id_like() -> None:
    info = parse_os_release(DEBIAN_8)
    assert info.id == "debian"
    assert info.id_like_tokens() == []
