"""
Tests for the source-build fallback — toolchain checks, command
composition, scoped target-feature environment.
"""

import os
import sys
from pathlib import Path

import pytest

from libacquire.core.models.config import AcquireConfig, BuildConfig
from libacquire.core.models.options import AcquireOptions
from libacquire.core.services.acquire.detection.toolchain import (
    check_toolchain,
    read_toolchain_version,
)
from libacquire.core.services.acquire.domain.errors import (
    ExternalBuildFailedError,
    ToolchainMissingError,
)
from libacquire.core.services.acquire.execution.source_build import (
    build_command,
    build_from_source,
    target_feature_env,
)
from libacquire.core.services.acquire.execution.subprocess_runner import _run_subprocess


def _which_all(tool: str) -> str:
    return f"/usr/bin/{tool}"


class RecordingRunner:
    def __init__(self, result: dict | None = None):
        self.result = result or {"ok": True, "stdout": "", "elapsed_ms": 10}
        self.calls: list[tuple[list[str], dict]] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        return self.result


# ── Toolchain ────────────────────────────────────────────────────────


class TestToolchain:
    def test_all_present(self):
        found = check_toolchain(BuildConfig(), which=_which_all)
        assert found == {"cargo": "/usr/bin/cargo", "rustup": "/usr/bin/rustup"}

    def test_reports_every_missing_tool(self):
        with pytest.raises(ToolchainMissingError) as info:
            check_toolchain(BuildConfig(), which=lambda tool: None)
        assert info.value.missing == ["cargo", "rustup"]
        assert "cargo, rustup" in str(info.value)

    def test_plain_version_file(self, tmp_path: Path):
        path = tmp_path / "rust-toolchain"
        path.write_text("\n# pinned\n1.79.0\n")
        assert read_toolchain_version(path) == "1.79.0"

    def test_toml_version_file(self, tmp_path: Path):
        path = tmp_path / "rust-toolchain.toml"
        path.write_text('[toolchain]\nchannel = "nightly-2024-05-01"\ncomponents = ["rustfmt"]\n')
        assert read_toolchain_version(path) == "nightly-2024-05-01"

    def test_missing_version_file(self, tmp_path: Path):
        with pytest.raises(ToolchainMissingError, match="rust-toolchain"):
            read_toolchain_version(tmp_path / "rust-toolchain")

    def test_empty_version_file(self, tmp_path: Path):
        path = tmp_path / "rust-toolchain"
        path.write_text("\n\n")
        with pytest.raises(ToolchainMissingError, match="no toolchain version"):
            read_toolchain_version(path)


# ── Command composition ──────────────────────────────────────────────


class TestBuildCommand:
    def test_env_override_with_features(self, config):
        assert target_feature_env(config, "+adx,+sha") == {
            "RUSTFLAGS": "-C target-feature=+adx,+sha",
        }

    def test_no_env_override_for_standard_build(self, config):
        assert target_feature_env(config, "") == {}

    def test_template_with_other_braces(self):
        config = AcquireConfig(
            library="zkcrypto",
            repository="acme/zkcrypto",
            build={"flags_template": "-C target-feature={features} --cfg zk_cfg={}"},
        )
        assert target_feature_env(config, "+adx") == {
            "RUSTFLAGS": "-C target-feature=+adx --cfg zk_cfg={}",
        }

    def test_script_in_sources_dir(self, config):
        script = config.sources_path / "scripts" / "build.sh"
        script.parent.mkdir(parents=True)
        script.write_text("#!/bin/sh\n")
        cmd = build_command(config, "1.79.0", "pairing,gpu")
        assert cmd == [str(script), "zkcrypto", "1.79.0", "pairing,gpu"]

    def test_script_on_path(self, config):
        cmd = build_command(config, "1.79.0", "blst")
        assert cmd[0] == "scripts/build.sh"


# ── build_from_source ────────────────────────────────────────────────


class TestBuildFromSource:
    def test_missing_toolchain_runs_nothing(self, config):
        runner = RecordingRunner()
        with pytest.raises(ToolchainMissingError):
            build_from_source(
                config, AcquireOptions(), "+adx",
                runner=runner, which=lambda tool: None,
            )
        assert runner.calls == []

    def test_runner_invocation(self, config):
        runner = RecordingRunner()
        out = build_from_source(
            config, AcquireOptions(), "+adx,+sse2",
            runner=runner, which=_which_all,
        )
        assert out == config.output_path

        cmd, kwargs = runner.calls[0]
        assert cmd[1:] == ["zkcrypto", "1.79.0", "pairing,gpu"]
        assert kwargs["env_overrides"] == {"RUSTFLAGS": "-C target-feature=+adx,+sse2"}
        assert kwargs["timeout"] == 60
        assert kwargs["cwd"] == str(config.sources_path)

    def test_standard_build_has_no_env_override(self, config):
        runner = RecordingRunner()
        build_from_source(config, AcquireOptions(), "", runner=runner, which=_which_all)
        assert runner.calls[0][1]["env_overrides"] is None

    def test_backend_switches_reach_the_script(self, config):
        runner = RecordingRunner()
        options = AcquireOptions(alternate_backend=True, portable_backend=True, disable_gpu=True)
        build_from_source(config, options, "", runner=runner, which=_which_all)
        assert runner.calls[0][0][-1] == "blst,portable"

    def test_failed_build(self, config):
        runner = RecordingRunner({
            "ok": False, "error": "Command failed (exit 101)",
            "returncode": 101, "stderr": "error[E0432]: unresolved import",
        })
        with pytest.raises(ExternalBuildFailedError, match="exit 101") as info:
            build_from_source(config, AcquireOptions(), "", runner=runner, which=_which_all)
        assert info.value.returncode == 101
        assert "E0432" in info.value.stderr


# ── Subprocess runner ────────────────────────────────────────────────


class TestRunSubprocess:
    def test_override_scoped_to_child(self, monkeypatch):
        monkeypatch.delenv("RUSTFLAGS", raising=False)
        result = _run_subprocess(
            [sys.executable, "-c", "import os; print(os.environ['RUSTFLAGS'])"],
            timeout=30,
            env_overrides={"RUSTFLAGS": "-C target-feature=+adx"},
        )
        assert result["ok"] is True
        assert result["stdout"].strip() == "-C target-feature=+adx"
        assert "RUSTFLAGS" not in os.environ

    def test_override_values_not_expanded(self, monkeypatch):
        monkeypatch.setenv("ORIGIN", "/expanded")
        result = _run_subprocess(
            [sys.executable, "-c", "import os; print(os.environ['RUSTFLAGS'])"],
            timeout=30,
            env_overrides={"RUSTFLAGS": "-C link-arg=-Wl,-rpath,$ORIGIN"},
        )
        assert result["stdout"].strip() == "-C link-arg=-Wl,-rpath,$ORIGIN"

    def test_nonzero_exit(self):
        result = _run_subprocess(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"],
            timeout=30,
        )
        assert result["ok"] is False
        assert result["returncode"] == 3
        assert result["stderr"] == "bad"

    def test_missing_executable(self, tmp_path: Path):
        result = _run_subprocess([str(tmp_path / "no-such-script")], timeout=5)
        assert result["ok"] is False
        assert "Cannot run" in result["error"]
