"""CLI entry point: pubsentinel.

Subcommands:
    pubsentinel check                        # check all repositories, notify Slack
    pubsentinel check --dry-run -o reports   # no Slack, write the xlsx locally
    pubsentinel scan path/to/pubspec.yaml    # list what a local pubspec declares
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from pubsentinel.config import load_config, load_settings
from pubsentinel.core.logging import setup_logging
from pubsentinel.engines.version_checker.dependencies import (
    extract_dependencies,
    is_registry_dependency,
    parse_manifest,
)
from pubsentinel.engines.version_checker.extractors import (
    extract_pin_file_version,
    extract_runtime_pin,
)
from pubsentinel.exceptions import ManifestParseError, PubSentinelError
from pubsentinel.pipeline import run_checks


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Log renderer (default: $PUBSENTINEL_LOG_FORMAT or console)",
)
def main(verbose: bool, log_format: str | None) -> None:
    """PubSentinel: keep a fleet of Flutter apps' dependencies in check."""
    load_dotenv(Path.cwd() / ".env")
    setup_logging("DEBUG" if verbose else None, log_format)


@main.command("check")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    help="Repositories config (default: $REPOSITORIES_CONFIG or ./repositories.json)",
)
@click.option("--dry-run", is_flag=True, help="Skip Slack; only build the report")
@click.option(
    "-o",
    "--output",
    "output_dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Also write the xlsx report into this directory",
)
def check(config_path: str | None, dry_run: bool, output_dir: Path | None) -> None:
    """Check every configured repository and publish the report."""
    try:
        config = load_config(config_path)
        settings = load_settings()
        result = asyncio.run(
            run_checks(config, settings, dry_run=dry_run, output_dir=output_dir)
        )
    except PubSentinelError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    report = result.report
    click.echo(f"Latest Flutter: {result.latest_runtime}")
    click.echo(
        f"Repositories: {report.total} (succeeded {report.succeeded}, failed {report.failed})"
    )
    click.echo(f"Outdated packages: {report.outdated_package_count}")
    if result.workbook is None:
        click.echo("Warning: the xlsx report could not be rendered; see the log", err=True)
    elif output_dir is not None:
        click.echo(f"Report written to {output_dir / result.filename}")
    if result.notification and result.notification.upload_error:
        click.echo(f"Warning: {result.notification.upload_error}", err=True)


@main.command("scan")
@click.argument("pubspec", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--no-dev", is_flag=True, help="Ignore dev_dependencies")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(pubspec: Path, no_dev: bool, as_json: bool) -> None:
    """List the Flutter pin and dependencies declared by a local pubspec.yaml."""
    content = pubspec.read_text(encoding="utf-8", errors="replace")
    try:
        manifest = parse_manifest(content)
    except ManifestParseError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    fvmrc = pubspec.parent / ".fvmrc"
    pin = None
    if fvmrc.is_file():
        pin = extract_pin_file_version(fvmrc.read_text(encoding="utf-8", errors="replace"))
    pin = pin or extract_runtime_pin(content)

    deps = extract_dependencies(manifest, include_dev_dependencies=not no_dev)

    if as_json:
        rows = [
            {
                "name": d.name,
                "constraint": d.constraint,
                "dev": d.dev,
                "checked": is_registry_dependency(d),
            }
            for d in deps
        ]
        click.echo(json.dumps({"flutter": pin, "dependencies": rows}, indent=2))
        return

    click.echo(f"Flutter: {pin or 'not pinned'}")
    if not deps:
        click.echo("No dependencies found.")
        return
    click.echo(f"Found {len(deps)} dependencies\n")
    for d in deps:
        flags = " (dev)" if d.dev else ""
        if not is_registry_dependency(d):
            flags += " [skipped]"
        click.echo(f"  {d.name} {d.constraint}{flags}")


if __name__ == "__main__":
    main()
