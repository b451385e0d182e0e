"""
gemini-cli-provisioner — CLI entrypoint.

Usage:
    provision --help
    provision run
    provision detect --json
    provision config show
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from provisioner import __version__
from provisioner.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="provision")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (every command and its output).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to provision.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Provision nvm, Node.js and the Gemini CLI on an Ubuntu host."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = os.environ.get("PROVISION_LOG_LEVEL", "INFO")

    ctx.obj["logging"] = {
        "level": level,
        "log_file": os.environ.get("PROVISION_LOG_FILE"),
        "log_file_level": os.environ.get("PROVISION_LOG_FILE_LEVEL"),
    }
    setup_logging(**ctx.obj["logging"])


@cli.command()
@click.option(
    "--report",
    "report_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the run report (steps, summary, exit code) as JSON.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the run report as JSON at the end.")
@click.pass_context
def run(ctx: click.Context, report_path: str | None, as_json: bool) -> None:
    """Install nvm, Node.js and the CLI package, step by step.

    Exits 0 on success, otherwise with the failing command's exit code.
    """
    from provisioner.core.config.loader import ConfigError, load_config
    from provisioner.core.models import StepState
    from provisioner.core.services.provision import ProvisionContext, Reporter, run_pipeline
    from provisioner.core.services.provision.context import environment_snapshot

    if as_json:
        # stdout carries only the report
        setup_logging(**ctx.obj["logging"], progress_stream=sys.stderr)

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        Reporter(StepState()).report_failure(e, 1, environment_snapshot(os.environ, os.geteuid()))
        sys.exit(1)

    report = run_pipeline(ProvisionContext(config=config))

    if report_path:
        Path(report_path).write_text(
            json.dumps(report.model_dump(mode="json"), indent=2) + "\n",
            encoding="utf-8",
        )

    if as_json:
        click.echo(report.model_dump_json(indent=2))

    sys.exit(report.exit_code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Show what is already on this host (read-only)."""
    from provisioner.core.config.loader import ConfigError, load_config
    from provisioner.core.services.provision import ProvisionContext, detect_host

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    result = detect_host(ProvisionContext(config=config))

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    osr = result["os"]
    if osr.get("readable"):
        icon = "✅" if osr["matches_target"] else "⚠️"
        click.echo(f"   {icon} OS: {osr['pretty_name'] or osr['id']}")
    else:
        click.echo("   ⚠️  OS: /etc/os-release not readable")
    click.echo(f"   👤 User: {result['user']} (uid {result['uid']})")
    click.echo(f"   {'✅' if result['bash'] else '❌'} bash: {result['bash'] or 'not found'}")

    elev = result["elevation"]
    icon = "❌" if elev["kind"] == "unavailable" else "✅"
    click.echo(f"   {icon} Elevation: {elev['kind']} ({elev['reason']})")

    nvm = result["nvm"]
    if nvm["installed"]:
        versions = ", ".join(nvm["available_versions"]) or "no node versions"
        click.echo(f"   ✅ nvm: {nvm['nvm_dir']} ({versions})")
    else:
        click.echo(f"   ❌ nvm: not installed in {nvm['nvm_dir']}")

    app = result["app"]
    click.echo(f"   {'✅' if app['installed'] else '❌'} {app['bin']}: {app['path'] or 'not on PATH'}")


# ── Register sub-command groups from provisioner/ui/cli/ ──────────

from provisioner.ui.cli.config import config  # noqa: E402

cli.add_command(config)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
