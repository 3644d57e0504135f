#!/usr/bin/env python3
"""
fileman - elementary file operations from the command line

Main entry point for the fileman CLI application.
"""

import click
from rich.console import Console
from rich.table import Table

from core import AuditLogger, ConfigError, OperationResult, Settings, load_settings
from core.config import parse_mode
from modules.file_manager import FileOperator, OrderingPolicy, run_demo


console = Console()
err_console = Console(stderr=True)


def get_settings(config_path: str) -> Settings:
    """Load settings, turning config errors into usage errors."""
    try:
        return load_settings(config_path)
    except ConfigError as e:
        raise click.UsageError(f"Invalid configuration in {config_path}: {e}")


def get_operator(obj: dict) -> FileOperator:
    """Get the file operator for this invocation, building it on first use."""
    if "operator" not in obj:
        settings = obj["settings"]
        obj["operator"] = FileOperator(
            console=console,
            err_console=err_console,
            logger=AuditLogger(log_path=settings.audit_log),
            settings=settings
        )
    return obj["operator"]


def finish(result: OperationResult) -> None:
    """Exit with status 1 when the operation failed."""
    if not result.success:
        raise SystemExit(1)


@click.group()
@click.version_option(version="0.1.0", prog_name="fileman")
@click.option(
    "--config", "config_path",
    default="config.yaml",
    show_default=True,
    help="YAML file with tool defaults."
)
@click.pass_context
def fileman(ctx, config_path: str):
    """
    fileman - elementary file operations

    Create, read, append, delete, chmod, list, stat, rename, move and copy
    files, and list a directory sorted by size or modification time.
    """
    settings = get_settings(config_path)
    ctx.obj = {"settings": settings}


@fileman.command()
@click.argument("path")
@click.pass_obj
def create(obj, path: str):
    """Create PATH if it does not exist."""
    finish(get_operator(obj).create_file(path))


@fileman.command()
@click.argument("path")
@click.pass_obj
def read(obj, path: str):
    """Print the contents of PATH."""
    finish(get_operator(obj).read_file(path))


@fileman.command()
@click.argument("path")
@click.argument("content")
@click.pass_obj
def write(obj, path: str, content: str):
    """Append CONTENT to the existing file PATH."""
    finish(get_operator(obj).write_file(path, content))


@fileman.command()
@click.argument("path")
@click.pass_obj
def delete(obj, path: str):
    """Delete the file PATH."""
    finish(get_operator(obj).delete_file(path))


@fileman.command()
@click.argument("mode")
@click.argument("path")
@click.pass_obj
def chmod(obj, mode: str, path: str):
    """Set permission bits of PATH to octal MODE (e.g. 644)."""
    try:
        bits = parse_mode(mode)
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="MODE")
    finish(get_operator(obj).set_permissions(path, bits))


@fileman.command("ls")
@click.argument("directory", default=".")
@click.pass_obj
def list_directory(obj, directory: str):
    """List every entry of DIRECTORY."""
    finish(get_operator(obj).list_files(directory))


@fileman.command()
@click.argument("path")
@click.pass_obj
def stat(obj, path: str):
    """Show size and modification time of PATH."""
    finish(get_operator(obj).file_attributes(path))


@fileman.command()
@click.argument("old")
@click.argument("new")
@click.pass_obj
def rename(obj, old: str, new: str):
    """Rename OLD to NEW."""
    finish(get_operator(obj).rename_file(old, new))


@fileman.command()
@click.argument("path")
@click.argument("directory")
@click.pass_obj
def move(obj, path: str, directory: str):
    """Move PATH into DIRECTORY."""
    finish(get_operator(obj).move_file(path, directory))


@fileman.command()
@click.argument("source")
@click.argument("destination")
@click.pass_obj
def copy(obj, source: str, destination: str):
    """Copy SOURCE to DESTINATION, overwriting it."""
    finish(get_operator(obj).copy_file(source, destination))


@fileman.command()
@click.argument("path")
@click.pass_obj
def mkdir(obj, path: str):
    """Create directory PATH."""
    finish(get_operator(obj).make_directory(path))


@fileman.command()
@click.argument("path")
@click.pass_obj
def rmdir(obj, path: str):
    """Remove the empty directory PATH."""
    finish(get_operator(obj).remove_directory(path))


@fileman.command("sort")
@click.argument("directory", default=".")
@click.option(
    "--by", "ordering",
    type=click.Choice([p.value for p in OrderingPolicy]),
    default=None,
    help="size: smallest first; mtime: most recently modified first."
)
@click.pass_obj
def sort_directory(obj, directory: str, ordering):
    """List regular files of DIRECTORY sorted by size or modification time."""
    policy = OrderingPolicy.from_name(ordering or obj["settings"].default_ordering)
    finish(get_operator(obj).sort_files(directory, policy))


@fileman.command()
@click.argument("workdir", default=".", type=click.Path(file_okay=False))
@click.pass_obj
def demo(obj, workdir: str):
    """Run every operation once inside WORKDIR."""
    steps = run_demo(get_operator(obj), workdir)
    failed = [name for name, result in steps if not result.success]

    if failed:
        console.print(f"\n[red]{len(failed)} of {len(steps)} steps failed:[/red] {', '.join(failed)}")
        raise SystemExit(1)
    console.print(f"\n[green]All {len(steps)} steps completed.[/green]")


@fileman.command()
@click.option("--limit", default=20, show_default=True, help="Number of entries to show.")
@click.option("--failed", "only_failed", is_flag=True, help="Show failed operations only.")
@click.pass_obj
def audit(obj, limit: int, only_failed: bool):
    """View the audit log."""
    logger = AuditLogger(log_path=obj["settings"].audit_log)
    if only_failed:
        entries = logger.get_failed_actions(limit=limit)
    else:
        entries = logger.get_recent(limit=limit)

    if not entries:
        console.print("[dim]No audit entries found.[/dim]")
        return

    table = Table(title="Recent Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Action")
    table.add_column("Description")
    table.add_column("Status")

    for entry in entries:
        time_str = entry.timestamp.split("T")[1].split(".")[0] if "T" in entry.timestamp else entry.timestamp

        status_str = entry.status
        if entry.status == "executed":
            status_str = f"[green]{entry.status}[/green]"
        elif entry.status == "failed":
            status_str = f"[red]{entry.status}[/red]"

        description = entry.action_description
        if len(description) > 50:
            description = description[:50] + "..."

        table.add_row(time_str, entry.action_type, description, status_str)

    console.print(table)


if __name__ == "__main__":
    fileman()
