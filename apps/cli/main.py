"""CLI application for pm."""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from pm.config import (
    DEFAULT_CONSTRAINT,
    DEFAULT_STORE_CONFIG,
    load_create_config,
    load_store_config,
    load_update_config,
)
from pm.constraint import parse_constraint
from pm.errors import PackageError, ResolutionFailed
from pm.models import FetchPlan
from pm.store import LocalStore, SftpStore
from pm.transfer import Downloader, Uploader

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # paramiko logs every transport negotiation step at INFO
    logging.getLogger("paramiko").setLevel(logging.WARNING)


def open_store(store_dir: Path | None, store_config: Path):
    """Local directory store if ``store_dir`` is given, SFTP store otherwise."""
    if store_dir is not None:
        return LocalStore(store_dir)
    return SftpStore(load_store_config(store_config))


def format_plan_text(plan: FetchPlan) -> str:
    """Format fetch plan as one line per package."""
    lines = []
    for entry in plan:
        reqs = ", ".join(str(r) for r in entry.requirements)
        lines.append(f"{entry.identifier}  <- {reqs}")
    return "\n".join(lines)


def format_json_output(plan: FetchPlan) -> str:
    """Format JSON output."""
    packages = []
    for entry in plan:
        packages.append({
            "package": str(entry.identifier),
            "entry": entry.entry,
            "requirements": [str(r) for r in entry.requirements],
        })

    return json.dumps({"packages": packages}, indent=2)


def report_error(error: PackageError, out: Console = console) -> None:
    if isinstance(error, ResolutionFailed):
        out.print("Error: packages not found:", style="red", soft_wrap=True)
        for requirement in error.unsatisfied:
            out.print(f"  - {requirement}", style="red", markup=False, highlight=False, soft_wrap=True)
        return
    out.print(f"Error: {error}", style="red", markup=False, highlight=False, soft_wrap=True)


app = typer.Typer(
    name="pm",
    help="pm - Resolve, fetch and publish versioned package archives",
    add_completion=False,
)

STORE_CONFIG_OPTION = typer.Option(
    DEFAULT_STORE_CONFIG, "--store-config", help="SFTP store settings (JSON or YAML)"
)
STORE_DIR_OPTION = typer.Option(
    None, "--store-dir", help="Use a local directory as the package store instead of SFTP"
)
DEFAULT_VER_OPTION = typer.Option(
    DEFAULT_CONSTRAINT, "--default-ver", help="Version constraint for entries without 'ver'"
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Debug logging")


@app.command()
def update(
    config_path: Path = typer.Argument(help="Update config listing packages to fetch (.json, .yaml)"),
    dest: Path = typer.Option(Path("."), "--dest", "-d", help="Directory to extract packages into"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the fetch plan without downloading"),
    format_type: str = typer.Option("text", "--format", help="Plan output format: text or json"),
    default_ver: str = DEFAULT_VER_OPTION,
    store_config: Path = STORE_CONFIG_OPTION,
    store_dir: Path | None = STORE_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Fetch and extract the best matching version of every listed package."""
    configure_logging(verbose, quiet=format_type == "json")
    if format_type not in ("text", "json"):
        console.print(f"Error: Unsupported format: {format_type}", style="red")
        raise typer.Exit(1)

    try:
        requirements = load_update_config(config_path, parse_constraint(default_ver))
        if not requirements:
            if format_type == "json":
                typer.echo(format_json_output(FetchPlan([])))
            else:
                console.print("No packages to update")
            raise typer.Exit(0)

        with open_store(store_dir, store_config) as store:
            downloader = Downloader(store, dest)
            if dry_run:
                plan = downloader.plan(requirements)
            else:
                plan = downloader.download(requirements)

        if format_type == "json":
            typer.echo(format_json_output(plan))
        else:
            console.print(format_plan_text(plan), markup=False, highlight=False, soft_wrap=True)
            if not dry_run:
                console.print(f"Extracted {len(plan)} package(s) into {dest}")

    except PackageError as e:
        # keep stdout parseable in json mode
        report_error(e, err_console if format_type == "json" else console)
        raise typer.Exit(1)


@app.command()
def create(
    config_path: Path = typer.Argument(help="Create config describing the package (.json, .yaml)"),
    base_dir: Path = typer.Option(Path("."), "--base-dir", help="Directory target paths are relative to"),
    default_ver: str = DEFAULT_VER_OPTION,
    store_config: Path = STORE_CONFIG_OPTION,
    store_dir: Path | None = STORE_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Pack the configured targets and upload them as a new package version."""
    configure_logging(verbose)
    try:
        config = load_create_config(config_path)
        with open_store(store_dir, store_config) as store:
            uploader = Uploader(store, config, base_dir, parse_constraint(default_ver))
            name = uploader.upload()
        console.print(f"Uploaded {name}")

    except PackageError as e:
        report_error(e)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
