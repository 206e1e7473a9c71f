# tests/addonlens/semver/test_semver_parse.py
import pytest

from addonlens.semver.semver import SemVer, cleanVersionString, parseSemVer


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("3.20.0", SemVer(3, 20, 0)),
        ("=v1.2.3", SemVer(1, 2, 3)),
        (" 1.2.3 ", SemVer(1, 2, 3)),
        ("2.0.0-rc.1+meta", SemVer(2, 0, 0, ("rc", "1"), ("meta",))),
    ],
)
def test_parse_accepts_exact_pins(raw, expected):
    assert parseSemVer(raw) == expected


@pytest.mark.parametrize("raw", ["^1.2.3", "~2.1", ">=1.0.0 <2.0.0", "1.2", "latest", "01.2.3"])
def test_parse_rejects_ranges_and_tags(raw):
    with pytest.raises(ValueError):
        parseSemVer(raw)


def test_parse_rejects_blank_and_non_strings():
    with pytest.raises(ValueError):
        parseSemVer("   ")
    with pytest.raises(TypeError):
        parseSemVer(123)  # type: ignore[arg-type]


def test_clean_strips_pin_markers():
    assert cleanVersionString(" =v1.2.3 ") == "1.2.3"
