"""
libacquire — CLI entrypoint.

Usage:
    python -m libacquire.main --help
    python -m libacquire.main install
    python -m libacquire.main features --json
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from libacquire import __version__
from libacquire.core.config.loader import ConfigError, load_config
from libacquire.core.models.config import AcquireConfig
from libacquire.core.models.options import AcquireOptions
from libacquire.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="libacquire")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to libacquire.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """libacquire — install a native library from a prebuilt release or source."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("LIBACQUIRE_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("LIBACQUIRE_LOG_FILE"),
        log_file_level=os.environ.get("LIBACQUIRE_LOG_FILE_LEVEL"),
    )


def _load(ctx: click.Context) -> AcquireConfig:
    """Load libacquire.yml or exit 1 with the reason."""
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.option("--force-build", is_flag=True, help="Skip the release download (FORCE_BUILD_FROM_SOURCE).")
@click.option("--alternate-backend", is_flag=True, help="Use the alternate crypto backend (USE_ALTERNATE_CRYPTO_BACKEND).")
@click.option("--portable", is_flag=True, help="Portable alternate backend (USE_PORTABLE_BACKEND).")
@click.option("--no-gpu", is_flag=True, help="Build without the GPU feature (DISABLE_GPU).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    force_build: bool,
    alternate_backend: bool,
    portable: bool,
    no_gpu: bool,
    as_json: bool,
) -> None:
    """Install the library artifacts into the repository root."""
    from libacquire.core.services.acquire import AcquireError, acquire_library

    config = _load(ctx)
    options = AcquireOptions.from_env().with_overrides(
        force_build=force_build or None,
        alternate_backend=alternate_backend or None,
        portable_backend=portable or None,
        disable_gpu=no_gpu or None,
    )

    try:
        outcome = acquire_library(config, options)
    except (AcquireError, OSError) as e:
        if as_json:
            click.echo(json.dumps({"ok": False, "error": str(e), "kind": type(e).__name__}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(getattr(e, "exit_code", 1))

    if as_json:
        click.echo(json.dumps({"ok": True, **outcome.to_dict()}, indent=2))
        return

    if ctx.obj.get("quiet"):
        return

    via = "prebuilt release" if outcome.method == "download" else "source build"
    click.secho(f"✅ Installed {config.library} via {via}", fg="green", bold=True)
    if outcome.asset:
        click.echo(f"   Asset: {outcome.asset.name} ({outcome.asset.tag})")
    elif outcome.fallback_reason:
        click.echo(f"   Reason: {outcome.fallback_reason}")
    click.echo(f"   Target features: {outcome.target_features or '(none)'}")
    for name in config.artifacts.names():
        click.echo(f"     • {name}  → {config.root_path / name}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def features(ctx: click.Context, as_json: bool) -> None:
    """Show detected CPU features and the target-feature expression."""
    from libacquire.core.services.acquire import (
        UnsupportedArchitectureError,
        compute_flags,
        detect_capabilities,
        present_features,
    )

    config = _load(ctx)
    try:
        probe = detect_capabilities()
    except UnsupportedArchitectureError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(e.exit_code)

    present = present_features(probe.text, config.required_features)
    expression = compute_flags(config, probe)

    if as_json:
        click.echo(json.dumps({
            "capabilities": probe.to_dict(),
            "required": config.required_features,
            "present": list(present),
            "target_features": expression,
        }, indent=2))
        return

    click.secho(f"\n🔍 CPU features ({probe.source}, {probe.arch})", fg="cyan", bold=True)
    if probe.degraded:
        click.secho("   ⚠️  No capability line found — standard build only", fg="yellow")
    for token in config.required_features:
        if token in present:
            click.secho(f"   ✓ {token}", fg="green")
        else:
            click.secho(f"   ✗ {token}", fg="red")
    click.echo(f"\n   Target features: {expression or '(none)'}")
    click.echo()


@cli.command()
@click.option("--alternate-backend", is_flag=True, help="Resolve the alternate-backend asset.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(ctx: click.Context, alternate_backend: bool, as_json: bool) -> None:
    """Resolve the prebuilt release asset for the current commit."""
    from libacquire.core.reliability.retry import Deadline
    from libacquire.core.services.acquire import (
        ReleaseNotFoundError,
        configured_platform,
        current_commit,
        make_release_client,
        resolve_asset,
        select_release_variant,
    )

    config = _load(ctx)
    options = AcquireOptions.from_env().with_overrides(
        alternate_backend=alternate_backend or None,
    )
    variant = select_release_variant(options)
    client = make_release_client(config, options, Deadline(config.network.deadline))

    try:
        asset = resolve_asset(
            client,
            config.repository,
            variant,
            commit=current_commit(config.root_path),
            platform_id=configured_platform(config.release),
        )
    except ReleaseNotFoundError as e:
        if as_json:
            click.echo(json.dumps({"ok": False, "error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"ok": True, **asset.to_dict()}, indent=2))
        return

    click.secho(f"📦 {asset.name}", fg="cyan", bold=True)
    click.echo(f"   Tag: {asset.tag}")
    click.echo(f"   URL: {asset.download_url}")


if __name__ == "__main__":
    cli()
