"""Command-line interface for the image rename tool."""

import logging
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .constants import DEFAULT_CONFIG_FILE
from .core import ImageRenameError, Language, ProgressEvent, RenameConfig, RenamePlan
from .renamer import FileRenamer
from .safety import FileSafetyChecker

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _collect_target(paths: tuple[str, ...]) -> Path | list[Path]:
    """A single directory is scanned; anything else is an explicit file list."""
    if len(paths) == 1 and Path(paths[0]).is_dir():
        return Path(paths[0])
    files: list[Path] = []
    for path in map(Path, paths):
        if path.is_dir():
            files.extend(sorted(p for p in path.iterdir() if p.is_file()))
        else:
            files.append(path)
    return files


def _show_config(config: RenameConfig) -> None:
    console.print("[blue]\n=== Current Configuration ===[/blue]")
    for key, value in config.as_display_dict().items():
        console.print(f"{key}: {value}", highlight=False)


def _plans_table(plans: list[RenamePlan]) -> Table:
    checker = FileSafetyChecker()
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Original", style="cyan")
    table.add_column("New Name", style="green")
    table.add_column("Source", style="dim")

    for index, plan in enumerate(plans, 1):
        if plan.error:
            table.add_row(str(index), escape(plan.original_name), f"[red]{escape(plan.error)}[/red]", "")
            continue
        new_name = escape(plan.suggested_name)
        if plan.is_same_name:
            new_name = f"[yellow]{new_name} (unchanged)[/yellow]"
        else:
            for problem in checker.validate_filename(plan.suggested_name):
                new_name += f"\n[red]{escape(problem)}[/red]"
        table.add_row(str(index), escape(plan.original_name), new_name, plan.source.value)
    return table


def _scan_table(plans: list[RenamePlan]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("File", style="cyan")
    table.add_column("Analysis")
    table.add_column("Size", justify="right")
    table.add_column("Source", style="dim")

    for index, plan in enumerate(plans, 1):
        if plan.error:
            table.add_row(str(index), escape(plan.original_name), f"[red]{escape(plan.error)}[/red]", "", "")
            continue
        size = f"{plan.metadata.size_bytes} bytes" if plan.metadata else ""
        table.add_row(
            str(index), escape(plan.original_name), escape(plan.suggested_name), size, plan.source.value
        )
    return table


def _describe(event: ProgressEvent) -> str:
    if event.processed is None:
        return f"Analyzing {escape(event.file_name)}"
    return (
        f"Renaming {escape(event.file_name)} "
        f"[green]{event.success} ok[/green] "
        f"[yellow]{event.skipped} skipped[/yellow] "
        f"[red]{event.failed} failed[/red]"
    )


def _with_progress(renamer: FileRenamer, description: str, run):
    """Call ``run()`` while a progress bar follows the renamer's events."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=None)

        def on_progress(event: ProgressEvent) -> None:
            progress.update(
                task, total=event.total, completed=event.current, description=_describe(event)
            )

        renamer.progress_callback = on_progress
        try:
            return run()
        finally:
            renamer.progress_callback = None


def _scan_with_progress(renamer: FileRenamer, target) -> list[RenamePlan]:
    return _with_progress(renamer, "Analyzing images", lambda: renamer.scan(target))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--api-key", "-k", help="API key (overrides config file and environment).")
@click.option("--base-url", "-b", help="API endpoint (overrides config file and environment).")
@click.option("--model-name", "-m", help="Model name (overrides config file and environment).")
@click.option(
    "--language",
    type=click.Choice([lang.value for lang in Language]),
    help="Language of the generated filenames.",
)
@click.option("--offline", is_flag=True, help="Use offline mode (no AI analysis).")
@click.option(
    "--config",
    "config_path",
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="YAML configuration file (ignored when missing).",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.version_option(package_name="image-rename-tool")
@click.pass_context
def cli(ctx, api_key, base_url, model_name, language, offline, config_path, verbose):
    """Rename image files based on their content using LLM analysis."""
    _setup_logging(verbose)
    try:
        config = RenameConfig.load(config_path)
        config = config.with_overrides(
            api_key=api_key,
            base_url=base_url,
            model_name=model_name,
            language=language,
            offline_mode=True if offline else None,
        )
    except ImageRenameError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = config


@cli.command("show-config")
@click.pass_obj
def show_config(config: RenameConfig):
    """Show the resolved configuration and exit."""
    _show_config(config)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.pass_obj
def scan(config: RenameConfig, paths):
    """List every image found with its analysis and size."""
    renamer = FileRenamer(config)
    try:
        plans = _scan_with_progress(renamer, _collect_target(paths))
    except ImageRenameError as e:
        raise click.ClickException(str(e)) from e

    if not plans:
        console.print("[yellow]No image files found.[/yellow]")
        return

    console.print("[green]\n=== Image Files Found ===[/green]")
    console.print(f"Found {len(plans)} image file(s):\n")
    console.print(_scan_table(plans))
    _show_config(config)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.pass_obj
def preview(config: RenameConfig, paths):
    """Preview what files would be renamed."""
    renamer = FileRenamer(config)
    try:
        plans = _scan_with_progress(renamer, _collect_target(paths))
    except ImageRenameError as e:
        raise click.ClickException(str(e)) from e

    if not plans:
        console.print("[yellow]No image files found.[/yellow]")
        return

    renamable = sum(1 for plan in plans if plan.would_rename)
    console.print("[green]\n=== Preview of Files to Rename ===[/green]")
    console.print(f"Found {len(plans)} image(s), {renamable} would be renamed:\n")
    console.print(_plans_table(plans))
    _show_config(config)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--dry-run", is_flag=True, help="Show what would be renamed without renaming.")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_obj
def rename(config: RenameConfig, paths, dry_run, yes):
    """Perform the renaming operation."""
    renamer = FileRenamer(config)
    try:
        plans = _scan_with_progress(renamer, _collect_target(paths))
    except ImageRenameError as e:
        raise click.ClickException(str(e)) from e

    if not any(plan.would_rename for plan in plans):
        console.print("[yellow]No image files found that would be renamed.[/yellow]")
        return

    console.print("[green]\n=== Files to be Renamed ===[/green]")
    console.print(_plans_table(plans))

    if not dry_run and not yes and not click.confirm("Proceed with renaming?", default=False):
        console.print("[yellow]Operation cancelled.[/yellow]")
        return

    report = _with_progress(
        renamer,
        "Renaming images",
        lambda: renamer.perform_rename(plans=plans, dry_run=dry_run),
    )

    if dry_run:
        console.print("[blue]\n=== Dry Run Mode ===[/blue]")
        console.print(
            f"Would rename: {len(report.successful)} file(s). No files were actually renamed."
        )
    else:
        console.print("[green]\n✓ Rename operation completed![/green]")
        console.print(f"Successfully renamed: {len(report.successful)} file(s)")

    if report.skipped:
        console.print(f"[yellow]Skipped: {len(report.skipped)} file(s)[/yellow]")
        for outcome in report.skipped:
            console.print(f"[yellow]  - {escape(outcome.original_name)}: {outcome.reason}[/yellow]")
    if report.failed:
        console.print(f"[red]Failed to rename: {len(report.failed)} file(s)[/red]")
        for outcome in report.failed:
            console.print(f"[red]  - {escape(outcome.original_name)}: {escape(outcome.error)}[/red]")


def main():
    """Console script entry point."""
    load_dotenv()
    cli()
