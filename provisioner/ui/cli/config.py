"""
CLI commands for provisioning configuration.

Thin wrappers over ``provisioner.core.config.loader``.
"""

from __future__ import annotations

import json
import sys

import click
import yaml


@click.group()
def config() -> None:
    """Configuration — show the resolved run settings."""


@config.command("show")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Print the configuration `provision run` would use."""
    from provisioner.core.config.loader import ConfigError, find_config_file, load_config

    config_path = ctx.obj.get("config_path")
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    data = cfg.model_dump(mode="json")

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    source = config_path or find_config_file()
    click.secho(f"⚙️  Config source: {source or 'defaults + environment'}", fg="cyan", bold=True)
    click.echo(yaml.safe_dump({"provision": data}, sort_keys=False).rstrip())
    click.echo()
    channel = "latest LTS (alias lts/*)" if cfg.is_lts_channel else f"explicit {cfg.node_channel}"
    click.echo(f"   Node channel: {channel}")
    click.echo(f"   nvm marker:   {cfg.nvm_marker}")
