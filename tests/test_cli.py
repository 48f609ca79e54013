"""
Tests for CLI commands — install, features, resolve, and global options.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from libacquire.core.models.options import API_TOKEN_ENV, ENV_OPTIONS
from libacquire.core.services import acquire
from libacquire.core.services.acquire import (
    AcquireOutcome,
    CapabilityProbe,
    ExternalBuildFailedError,
    ReleaseAsset,
)
from libacquire.main import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (*ENV_OPTIONS, API_TOKEN_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def recorded(monkeypatch):
    """Replace acquire_library with a recorder returning ``outcome``."""
    calls: list[dict] = []

    def _install(outcome=None, error=None):
        def fake(config, options, **kwargs):
            calls.append({"config": config, "options": options})
            if error is not None:
                raise error
            return outcome

        monkeypatch.setattr(acquire, "acquire_library", fake)
        return calls

    return _install


def _download_outcome() -> AcquireOutcome:
    return AcquireOutcome(
        method="download",
        variant="standard-pairing",
        target_features="+adx,+sse2",
        asset=ReleaseAsset(
            repository="acme/zkcrypto",
            tag="0123456789abcdef",
            name="zkcrypto-linux-amd64-standard-pairing.tar.gz",
            pattern="zkcrypto-linux-amd64-standard-pairing",
            api_url="https://api.example.com/assets/1",
            download_url="https://cdn.example.com/zk.tar.gz",
        ),
        transitions=["start", "compute_flags", "try_download", "installed"],
    )


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "install" in result.output
        assert "features" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestInstallCommand:
    def test_prebuilt_success(self, config_file: Path, recorded):
        calls = recorded(_download_outcome())
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_file), "install"])
        assert result.exit_code == 0, result.output
        assert "Installed zkcrypto via prebuilt release" in result.output
        assert "libzkcrypto.a" in result.output
        assert calls[0]["options"].force_build is False

    def test_flags_become_options(self, config_file: Path, recorded):
        outcome = AcquireOutcome(method="build", fallback_reason="build from source forced")
        calls = recorded(outcome)
        runner = CliRunner()
        result = runner.invoke(cli, [
            "--config", str(config_file), "install",
            "--force-build", "--alternate-backend", "--portable", "--no-gpu",
        ])
        assert result.exit_code == 0, result.output
        assert "via source build" in result.output
        options = calls[0]["options"]
        assert options.force_build and options.alternate_backend
        assert options.portable_backend and options.disable_gpu

    def test_env_switches(self, config_file: Path, recorded, monkeypatch):
        monkeypatch.setenv("FORCE_BUILD_FROM_SOURCE", "1")
        monkeypatch.setenv(API_TOKEN_ENV, "secret")
        calls = recorded(AcquireOutcome(method="build"))
        runner = CliRunner()
        runner.invoke(cli, ["--config", str(config_file), "install"])
        options = calls[0]["options"]
        assert options.force_build is True
        assert options.api_token == "secret"

    def test_json_output(self, config_file: Path, recorded):
        recorded(_download_outcome())
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_file), "install", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["method"] == "download"
        assert data["asset"]["tag"] == "0123456789abcdef"

    def test_fatal_error_exits_nonzero(self, config_file: Path, recorded):
        recorded(error=ExternalBuildFailedError("Source build of zkcrypto failed: exit 101"))
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_file), "install"])
        assert result.exit_code == 1
        assert "Source build of zkcrypto failed" in result.output

    def test_fatal_error_json(self, config_file: Path, recorded):
        recorded(error=ExternalBuildFailedError("boom"))
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_file), "install", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data == {"ok": False, "error": "boom", "kind": "ExternalBuildFailedError"}

    def test_missing_config(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["install"])
        assert result.exit_code == 1
        assert "No libacquire.yml" in result.output


class TestFeaturesCommand:
    def test_json(self, config_file: Path, monkeypatch):
        probe = CapabilityProbe(source="/proc/cpuinfo", arch="x86_64", text="flags\t: adx sse2 avx2")
        monkeypatch.setattr(acquire, "detect_capabilities", lambda: probe)
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_file), "features", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["required"] == ["adx", "sha_ni", "sse2"]
        assert data["present"] == ["adx", "sse2"]
        assert data["target_features"] == "+adx,+sse2"
        assert data["capabilities"]["arch"] == "x86_64"

    def test_degraded(self, config_file: Path, monkeypatch):
        probe = CapabilityProbe(source="sysctl", arch="arm64", text="")
        monkeypatch.setattr(acquire, "detect_capabilities", lambda: probe)
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config_file), "features"])
        assert result.exit_code == 0
        assert "standard build only" in result.output
        assert "Target features: (none)" in result.output
