"""
Tests for semantic version parsing and the installed MaaCore version query.
"""

import subprocess

import pytest

from maa_installer.core.version import (
    SemVer,
    make_version_query,
    parse_core_version_output,
    parse_semver,
    parse_tagged_version,
    query_installed_version,
)
from maa_installer.dirs import Dirs
from maa_installer.exceptions import VersionParseError, VersionQueryError

pytestmark = pytest.mark.unit

# Precedence example from semver.org, lowest first
SEMVER_PRECEDENCE = [
    "1.0.0-alpha",
    "1.0.0-alpha.1",
    "1.0.0-alpha.beta",
    "1.0.0-beta",
    "1.0.0-beta.2",
    "1.0.0-beta.11",
    "1.0.0-rc.1",
    "1.0.0",
]


class TestParseSemver:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("5.0.0", SemVer(5, 0, 0)),
            ("0.1.10", SemVer(0, 1, 10)),
            ("5.0.0-beta.1", SemVer(5, 0, 0, ("beta", 1))),
            ("5.0.0-alpha.1.d003", SemVer(5, 0, 0, ("alpha", 1, "d003"))),
            ("5.0.0-0.3.7", SemVer(5, 0, 0, (0, 3, 7))),
            ("5.0.0-x-y.01a", SemVer(5, 0, 0, ("x-y", "01a"))),
            ("5.0.0+build.7", SemVer(5, 0, 0, (), ("build", "7"))),
        ],
    )
    def test_valid(self, value, expected):
        parsed = parse_semver(value)
        assert parsed == expected
        assert parsed.prerelease == expected.prerelease
        assert parsed.build == expected.build

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "5",
            "5.0",
            "5.0.0.1",
            "05.0.0",
            "a.b.c",
            "5.0.0-",
            "5.0.0-beta.01",
            "5.0.0-beta..1",
            "5.0.0+",
            "v5.0.0",
            " 5.0.0",
            "٥.0.0",
        ],
    )
    def test_invalid(self, value):
        with pytest.raises(VersionParseError):
            parse_semver(value)

    @pytest.mark.parametrize(
        "value", ["5.0.0", "5.1.0-beta.2", "1.0.0-alpha.beta", "1.0.0-rc.1+build.5"]
    )
    def test_str_keeps_semver_spelling(self, value):
        assert str(parse_semver(value)) == value

    def test_precedence_follows_semver(self):
        versions = [parse_semver(v) for v in SEMVER_PRECEDENCE]
        for lower, higher in zip(versions, versions[1:]):
            assert lower < higher, f"{lower} should sort below {higher}"
        assert sorted(reversed(versions)) == versions

    def test_numeric_triple_compares_numerically(self):
        assert parse_semver("1.9.0") < parse_semver("1.10.0") < parse_semver("2.0.0")
        assert parse_semver("5.0.0") < parse_semver("5.0.1")

    def test_prerelease_sorts_below_release(self):
        assert parse_semver("5.0.0-dev") < parse_semver("5.0.0")
        assert parse_semver("5.0.0-beta.2") < parse_semver("5.0.0")
        assert parse_semver("5.0.0") < parse_semver("5.0.1-alpha")

    def test_longer_prerelease_sorts_higher(self):
        assert parse_semver("5.0.0-beta") < parse_semver("5.0.0-beta.0")
        assert parse_semver("5.0.0-beta") != parse_semver("5.0.0-beta.0")

    def test_numeric_identifiers_sort_below_alphanumeric(self):
        assert parse_semver("1.0.0-alpha.99") < parse_semver("1.0.0-alpha.beta")
        assert parse_semver("1.0.0-2") < parse_semver("1.0.0-10") < parse_semver("1.0.0-a")

    def test_build_metadata_ignored_for_precedence(self):
        assert parse_semver("1.0.0+a") == parse_semver("1.0.0+b")
        assert hash(parse_semver("1.0.0+a")) == hash(parse_semver("1.0.0"))

    def test_is_prerelease(self):
        assert parse_semver("5.0.0-rc.1").is_prerelease
        assert not parse_semver("5.0.0+build").is_prerelease


class TestParseTaggedVersion:
    def test_strips_leading_character(self):
        assert parse_tagged_version("v5.0.0") == SemVer(5, 0, 0)
        assert parse_tagged_version("v5.1.0-beta.2") == SemVer(5, 1, 0, ("beta", 2))

    @pytest.mark.parametrize("tag", ["", "v", "1.2.3", "vX.2.3", "v1.2", "v1.2.3.4"])
    def test_malformed_tags(self, tag):
        with pytest.raises(VersionParseError):
            parse_tagged_version(tag)


class TestParseCoreVersionOutput:
    def test_release(self):
        assert parse_core_version_output(b"MaaCore v5.0.0\n") == SemVer(5, 0, 0)

    def test_prerelease(self):
        version = parse_core_version_output(b"MaaCore v5.1.0-beta.2\n")
        assert str(version) == "5.1.0-beta.2"

    @pytest.mark.parametrize(
        "output", [b"", b"MaaCore v\n", b"MaaCore vnot-a-version\n", b"\xff" * 20]
    )
    def test_malformed_output(self, output):
        with pytest.raises(VersionParseError):
            parse_core_version_output(output)


class TestQueryInstalledVersion:
    @pytest.fixture
    def dirs(self, tmp_path):
        return Dirs(library=tmp_path / "lib", resource=tmp_path / "res", cache=tmp_path)

    def test_runs_runner_with_library_on_loader_path(self, mocker, dirs):
        mocker.patch(
            "maa_installer.core.version.shutil.which", return_value="/usr/bin/maa-run"
        )
        run = mocker.patch(
            "maa_installer.core.version.subprocess.run",
            return_value=subprocess.CompletedProcess(
                args=[], returncode=0, stdout=b"MaaCore v4.9.0\n", stderr=b""
            ),
        )

        assert query_installed_version(dirs) == SemVer(4, 9, 0)

        args, kwargs = run.call_args
        assert args[0] == ["/usr/bin/maa-run", "version"]
        assert kwargs["check"] is True
        assert kwargs["capture_output"] is True
        assert any(str(dirs.library()) in value for value in kwargs["env"].values())

    def test_missing_runner(self, mocker, dirs):
        mocker.patch("maa_installer.core.version.shutil.which", return_value=None)
        mocker.patch(
            "maa_installer.core.version.subprocess.run",
            side_effect=FileNotFoundError("maa-run"),
        )
        with pytest.raises(VersionQueryError) as exc_info:
            query_installed_version(dirs, runner="maa-run")
        assert exc_info.value.command == ["maa-run", "version"]

    def test_runner_failure(self, mocker, dirs):
        mocker.patch("maa_installer.core.version.shutil.which", return_value=None)
        mocker.patch(
            "maa_installer.core.version.subprocess.run",
            side_effect=subprocess.CalledProcessError(
                1, ["maa-run", "version"], stderr=b"libMaaCore.so: not found"
            ),
        )
        with pytest.raises(VersionQueryError) as exc_info:
            query_installed_version(dirs)
        assert exc_info.value.details == "libMaaCore.so: not found"

    def test_runner_timeout(self, mocker, dirs):
        mocker.patch("maa_installer.core.version.shutil.which", return_value=None)
        mocker.patch(
            "maa_installer.core.version.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["maa-run", "version"], 30),
        )
        with pytest.raises(VersionQueryError):
            query_installed_version(dirs)

    def test_make_version_query_binds_runner(self, mocker, dirs):
        query = mocker.patch(
            "maa_installer.core.version.query_installed_version",
            return_value=SemVer(5, 0, 0),
        )
        assert make_version_query("/opt/maa/maa-run")(dirs) == SemVer(5, 0, 0)
        query.assert_called_once_with(dirs, runner="/opt/maa/maa-run")
