import json
import os
import urllib.error
from unittest import mock

import pytest

from spacecli.checks import (
    CheckError,
    check_dirs_exist,
    check_latest_version,
    check_not_empty,
    check_project_initialized,
    get_latest_cli_version,
    is_prerelease,
)
from spacecli.project import (
    ProjectMeta,
    cache_latest_version,
    get_latest_cached_version,
    store_project_meta,
)


class _FakeResponse:
    def __init__(self, payload, status=200):
        self.status = status
        self._body = json.dumps(payload).encode()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def read(self):
        return self._body


def _write_stale_cache(home, version):
    directory = os.path.join(home, ".detaspace")
    os.makedirs(directory, exist_ok=True)
    with open(os.path.join(directory, "space_latest_version"), "w") as handle:
        json.dump({"version": version, "updatedAt": 0}, handle)


def test_check_dirs_exist_reports_missing(tmp_path):
    missing = str(tmp_path / "missing")
    with pytest.raises(CheckError, match=f"directory {missing} does not exist"):
        check_dirs_exist(str(tmp_path), missing)


def test_check_project_initialized(tmp_path):
    with pytest.raises(CheckError, match="project is not initialized"):
        check_project_initialized(str(tmp_path))
    store_project_meta(str(tmp_path), ProjectMeta(id="abc", name="demo"))
    assert check_project_initialized(str(tmp_path)) is None


def test_check_project_initialized_missing_dir(tmp_path):
    with pytest.raises(CheckError, match="does not exist"):
        check_project_initialized(str(tmp_path / "nope"))


def test_check_not_empty():
    with pytest.raises(CheckError, match="^id cannot be empty$"):
        check_not_empty({"dir": "./", "id": "   "})
    # only spaces count as blank; unset values are skipped
    assert check_not_empty({"tag": "\t", "id": None}) is None


@pytest.mark.parametrize(
    "version, expected",
    [("1.0.0", False), ("1.0.0-beta", True), ("dev", False), ("0.1-rc-2", True)],
)
def test_is_prerelease(version, expected):
    assert is_prerelease(version) is expected


def test_get_latest_cli_version_strips_prefix():
    with mock.patch("urllib.request.urlopen", return_value=_FakeResponse({"tag_name": "v1.2.3"})):
        assert get_latest_cli_version() == "1.2.3"


def test_get_latest_cli_version_failure():
    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
        with pytest.raises(RuntimeError, match="error while fetching latest release"):
            get_latest_cli_version()


def test_get_latest_cli_version_bad_status():
    with mock.patch("urllib.request.urlopen", return_value=_FakeResponse({}, status=204)):
        with pytest.raises(RuntimeError):
            get_latest_cli_version()


def test_prerelease_skips_check(tmp_path):
    assert check_latest_version("1.0.0-beta", str(tmp_path)) is None
    assert not (tmp_path / ".detaspace").exists()


def test_fresh_cache_used_without_network(tmp_path, capsys):
    cache_latest_version("2.0.0", str(tmp_path))
    with mock.patch("urllib.request.urlopen", side_effect=AssertionError("no network")):
        assert check_latest_version("1.0.0", str(tmp_path)) == "2.0.0"
    assert "New Space CLI version available" in capsys.readouterr().err


def test_same_version_prints_no_notice(tmp_path, capsys):
    cache_latest_version("1.0.0", str(tmp_path))
    assert check_latest_version("1.0.0", str(tmp_path)) == "1.0.0"
    assert "New Space CLI version available" not in capsys.readouterr().err


def test_stale_cache_refreshes(tmp_path, capsys):
    _write_stale_cache(str(tmp_path), "0.9.0")
    with mock.patch("urllib.request.urlopen", return_value=_FakeResponse({"tag_name": "v2.0.0"})):
        assert check_latest_version("1.0.0", str(tmp_path)) == "2.0.0"
    assert get_latest_cached_version(str(tmp_path))[0] == "2.0.0"
    assert "Checking for new Space CLI version..." in capsys.readouterr().err


def test_network_failure_reports(tmp_path, capsys):
    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
        assert check_latest_version("1.0.0", str(tmp_path)) is None
    assert "Failed to check for new Space CLI version" in capsys.readouterr().err