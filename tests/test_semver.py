"""Tests for semantic version parsing and precedence."""

import pytest

from starpin.versions.semver import SemVer, try_parse


def test_parse_full_version():
    v = SemVer.parse("1.2.3-rc.1+build.5")
    assert (v.major, v.minor, v.patch) == (1, 2, 3)
    assert v.pre == ("rc", "1")
    assert v.build == ("build", "5")
    assert str(v) == "1.2.3-rc.1+build.5"
    assert not v.is_stable


def test_parse_rejects_invalid():
    for text in ("1.0", "01.0.0", "1.0.0-", "v1.0.0", "latest", ""):
        with pytest.raises(ValueError):
            SemVer.parse(text)
    assert try_parse("1.0") is None


def test_numeric_ordering():
    assert SemVer.parse("1.10.0") > SemVer.parse("1.9.9")
    assert SemVer.parse("2.0.0") > SemVer.parse("1.99.99")


def test_prerelease_below_release():
    assert SemVer.parse("1.0.0-alpha") < SemVer.parse("1.0.0")
    assert SemVer.parse("1.1.0-beta") > SemVer.parse("1.0.5")


def test_semver_spec_precedence_chain():
    chain = [
        "1.0.0-alpha",
        "1.0.0-alpha.1",
        "1.0.0-alpha.beta",
        "1.0.0-beta",
        "1.0.0-beta.2",
        "1.0.0-beta.11",
        "1.0.0-rc.1",
        "1.0.0",
    ]
    parsed = [SemVer.parse(v) for v in chain]
    assert sorted(reversed(parsed)) == parsed


def test_build_metadata_ignored_for_precedence():
    assert SemVer.parse("1.0.0+a") == SemVer.parse("1.0.0+b")
    assert len({SemVer.parse("1.0.0+a"), SemVer.parse("1.0.0")}) == 1
