"""Command-line interface for image-optimizer."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.table import Table

from image_optimizer import __version__
from image_optimizer.core.history import VersionHistoryStore
from image_optimizer.core.pipeline import ImagePipeline, RunSummary
from image_optimizer.errors import PipelineError
from image_optimizer.utils.checksum import sha256_hex
from image_optimizer.utils.config import PipelineConfig
from image_optimizer.utils.logger import set_log_level, setup_logger

console = Console()
logger = setup_logger(__name__)


def _load_config(config_file: Optional[Path], **overrides: Any) -> PipelineConfig:
    try:
        return PipelineConfig.from_file(config_file).with_overrides(**overrides)
    except PipelineError as e:
        console.print(f"[red]✗ Invalid configuration:[/red] {e}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="image-optimizer")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """
    Image Optimizer - Compress, standardize and deduplicate image folders.

    Processed copies, duplicate review folders and a versioned manifest are
    written to an output folder. Originals are never modified or deleted.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if verbose:
        set_log_level(logging.DEBUG)


@cli.command()
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project root that sources and output are relative to",
)
@click.option(
    "--source",
    "-s",
    "sources",
    multiple=True,
    help="Source directory to process (repeatable, default: from config)",
)
@click.option("--output", "-o", "output_root", help="Output folder (default: data_dump)")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON configuration file",
)
@click.option("--max-width", type=int, help="Maximum output width in pixels")
@click.option("--max-height", type=int, help="Maximum output height in pixels")
@click.option("--jpeg-quality", type=click.IntRange(1, 100), help="JPEG quality")
@click.option("--png-compression", type=click.IntRange(0, 9), help="PNG compression level")
@click.option("--hash-size", type=int, help="aHash grid size (default: 8)")
@click.option(
    "--threshold",
    "-t",
    type=int,
    help="Duplicate threshold (Hamming distance, default: 5)",
)
@click.option(
    "--show-progress/--no-progress",
    default=True,
    help="Show progress bars",
)
@click.pass_context
def run(
    ctx: click.Context,
    root: Path,
    sources: tuple,
    output_root: Optional[str],
    config_file: Optional[Path],
    max_width: Optional[int],
    max_height: Optional[int],
    jpeg_quality: Optional[int],
    png_compression: Optional[int],
    hash_size: Optional[int],
    threshold: Optional[int],
    show_progress: bool,
) -> None:
    """
    Optimize images and flag likely duplicates.

    Example:
        image-optimizer run --source images --output data_dump
    """
    config = _load_config(
        config_file,
        sources=sources or None,
        output_root=output_root,
        max_width=max_width,
        max_height=max_height,
        jpeg_quality=jpeg_quality,
        png_compression_level=png_compression,
        hash_size=hash_size,
        duplicate_hamming_threshold=threshold,
    )

    console.print(
        f"\n[bold cyan]Image Optimizer v{__version__}[/bold cyan] - Optimization run\n"
    )

    logger.debug(f"Configuration: {config.to_dict()}")
    pipeline = ImagePipeline(config, root.resolve(), show_progress=show_progress)

    try:
        summary = pipeline.run()
    except (PipelineError, OSError) as e:
        console.print(f"[red]✗ Pipeline failed:[/red] {e}")
        sys.exit(1)

    _display_summary(summary)
    _display_duplicates(summary.manifest_path)


@cli.command()
@click.option(
    "--output",
    "-o",
    "output_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("data_dump"),
    show_default=True,
    help="Output folder of previous runs",
)
@click.option("--history-file", default="history.json", show_default=True)
def history(output_root: Path, history_file: str) -> None:
    """
    Show the version history of previous runs.
    """
    entries = VersionHistoryStore(output_root, history_file).load()

    if not entries:
        console.print("[yellow]No runs recorded yet.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Version")
    table.add_column("Manifest")
    table.add_column("Items", justify="right")
    table.add_column("Duplicate groups", justify="right")

    for entry in entries:
        table.add_row(
            str(entry.get("version", "?")),
            str(entry.get("manifest", "?")),
            str(entry.get("items", "?")),
            str(entry.get("duplicates", "?")),
        )

    console.print(table)


@cli.command()
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project root the manifest paths are relative to",
)
@click.option(
    "--manifest",
    "-m",
    "manifest_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=Path("data_dump") / "manifest.json",
    show_default=True,
    help="Manifest to verify",
)
def verify(root: Path, manifest_path: Path) -> None:
    """
    Check processed and original files against manifest checksums.

    Exits with status 1 if any file is missing or altered.
    """
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            manifest = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]✗ Error loading manifest:[/red] {e}")
        sys.exit(1)

    problems = verify_manifest(manifest, root)
    checked = sum(1 for item in manifest.get("items", []) if "error" not in item)

    if not problems:
        console.print(f"[green]✓ {checked} items verified[/green]")
        return

    table = Table(show_header=True, header_style="bold red")
    table.add_column("File")
    table.add_column("Problem")
    for path, problem in problems:
        table.add_row(path, problem)
    console.print(table)
    console.print(f"[red]✗ {len(problems)} problems in {checked} items[/red]")
    sys.exit(1)


def verify_manifest(manifest: Dict[str, Any], root: Path) -> List[tuple]:
    """
    Compare files on disk with the checksums recorded in a manifest.

    Args:
        manifest: Parsed manifest.json
        root: Project root the manifest paths are relative to

    Returns:
        List of (path, problem) tuples; empty when everything matches
    """
    problems = []
    for item in manifest.get("items", []):
        if "error" in item:
            continue
        for path_key, checksum_key in (
            ("original", "originalChecksum"),
            ("processed", "processedChecksum"),
        ):
            relative = item[path_key]
            path = root / relative
            if not path.is_file():
                problems.append((relative, "missing"))
                continue
            if sha256_hex(path.read_bytes()) != item[checksum_key]:
                problems.append((relative, "checksum mismatch"))
    return problems


def _display_summary(summary: RunSummary) -> None:
    """Display run totals in a table."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("Version", summary.version)
    table.add_row("Processed items", str(summary.items))
    table.add_row("Errors", str(summary.errors))
    table.add_row("Duplicate groups", str(summary.duplicate_groups))
    table.add_row("Output", str(summary.output_root))

    console.print(table)
    console.print("\n[green]✓ Image optimization complete.[/green]")


def _display_duplicates(manifest_path: Path) -> None:
    """Display the first duplicate groups of a manifest."""
    with open(manifest_path, "r", encoding="utf-8") as f:
        duplicates = json.load(f).get("duplicates", [])

    if not duplicates:
        return

    console.print(f"\n[bold green]Found {len(duplicates)} duplicate groups:[/bold green]\n")

    for group in duplicates[:10]:  # Show first 10 groups
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column(group["id"])
        for path in group["files"]:
            table.add_row(path)
        console.print(table)

    if len(duplicates) > 10:
        console.print(f"[dim]... and {len(duplicates) - 10} more groups[/dim]\n")


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
