"""Tests for the esa-resolve command line."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from archive_builders import esa
from archive_builders import jar
from archive_builders import zip_bytes
from esa_resolver.main import cli
from esa_resolver.repository import RepositoryRegistry


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """Runner isolated from user and project settings files."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for name in ("DATA_DIR", "MAX_DEPTH", "LOG_PATH", "LOG_LEVEL"):
        monkeypatch.delenv(f"ESA_RESOLVER_{name}", raising=False)
    with patch("esa_resolver.main.RepositoryRegistry.from_entry_points", return_value=RepositoryRegistry()):
        yield CliRunner()


def test_resolve_prints_summary(runner, tmp_path, write_archive):
    path = write_archive("foo@1.2.0.esa", esa({"bar.jar": jar()}))

    result = runner.invoke(cli, ["resolve", path, "--data-dir", str(tmp_path / "data")])

    assert result.exit_code == 0, result.output
    assert "foo" in result.output
    assert "1.2.0" in result.output
    assert "Resources" in result.output
    assert (tmp_path / "data" / "1" / "1.ssa").exists()


def test_repeated_runs_share_data_dir(runner, tmp_path, write_archive):
    path = write_archive("foo@1.2.0.esa", esa({"bar.jar": jar()}))
    data_dir = str(tmp_path / "data")

    first = runner.invoke(cli, ["resolve", path, "--data-dir", data_dir, "--json"])
    second = runner.invoke(cli, ["resolve", path, "--data-dir", data_dir, "--json"])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert json.loads(second.stdout)["id"] == 2
    assert (tmp_path / "data" / "1" / "1.ssa").exists()
    assert (tmp_path / "data" / "2" / "2.ssa").exists()


def test_resolve_json(runner, tmp_path, write_archive):
    path = write_archive("foo@1.2.0.esa", esa({"bar.jar": jar()}))

    result = runner.invoke(cli, ["resolve", path, "--data-dir", str(tmp_path / "data"), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["id"] == 1
    assert payload["manifest"]["Subsystem-SymbolicName"] == "foo"
    assert payload["resources"] == [{"name": "bar.jar", "version": "0.0.0", "type": "osgi.bundle"}]
    assert payload["requirements"] == []
    assert payload["deployment_manifest"] is None


def test_manifest_command(runner, tmp_path, write_archive):
    path = write_archive("foo@1.2.0.esa", esa())

    result = runner.invoke(cli, ["manifest", path, "--data-dir", str(tmp_path / "data")])

    assert result.exit_code == 0, result.output
    assert result.stdout == "Subsystem-SymbolicName: foo\nSubsystem-Version: 1.2.0\n"


def test_resolve_failure_exits_with_error(runner, tmp_path):
    result = runner.invoke(cli, ["resolve", str(tmp_path / "missing.esa"), "--data-dir", str(tmp_path / "data")])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "InvalidLocationError" in result.output


def test_invalid_max_depth(runner, tmp_path, write_archive):
    path = write_archive("foo.esa", esa())

    result = runner.invoke(cli, ["resolve", path, "--max-depth=-1", "--data-dir", str(tmp_path / "data")])

    assert result.exit_code == 1
    assert "Invalid settings" in result.output


def test_no_command_shows_help(runner):
    result = runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "resolve" in result.output


def test_undecodable_manifest_exits_with_error(runner, tmp_path, write_archive):
    broken = b"Manifest-Version: 1.0\nBundle-SymbolicName: caf\xe9\n"
    path = write_archive("foo.esa", esa({"bar.jar": zip_bytes({"META-INF/MANIFEST.MF": broken})}))

    result = runner.invoke(cli, ["resolve", path, "--data-dir", str(tmp_path / "data")])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "UTF-8" in result.output
