"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskID, TextColumn

from voronoi_mosaic.config import MosaicConfig
from voronoi_mosaic.errors import MosaicError
from voronoi_mosaic.image_io import load_image, make_comparison_grid, save_image
from voronoi_mosaic.renderer import (
    MosaicResult,
    ProgressCallback,
    blur_image,
    generate_mosaic,
)
from voronoi_mosaic.sampling import resolve_seed

app = typer.Typer(
    name="voronoi-mosaic",
    help="Turn any image into a weighted Voronoi mosaic.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()

_STAGE_LABELS = {
    "index": "Indexing pixels",
    "sample": "Generating points",
    "render": "Calculating voronoi diagram",
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _make_progress() -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=False,
    )


def _progress_reporter(progress: Progress) -> ProgressCallback:
    tasks: dict[str, TaskID] = {}

    def report(stage: str, done: int, total: int) -> None:
        if stage not in tasks:
            tasks[stage] = progress.add_task(_STAGE_LABELS.get(stage, stage), total=total)
        progress.update(tasks[stage], completed=done)

    return report


def _run(image: np.ndarray, cfg: MosaicConfig) -> MosaicResult:
    with _make_progress() as progress:
        return generate_mosaic(image, cfg, progress=_progress_reporter(progress))


def _save_outputs(
    image: np.ndarray,
    result: MosaicResult,
    cfg: MosaicConfig,
    output: Path,
    comparison: Path | None,
) -> None:
    save_image(result.image, output)
    if comparison is not None:
        make_comparison_grid(
            image, blur_image(image, cfg.blur_amount), result.image, comparison,
        )


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


# -- single-image command ----------------------------------------------

@app.command()
def single(
    input_path: Path = typer.Argument(..., help="Input image file path"),
    output: Path = typer.Argument(..., help="Output image file path"),
    points: int = typer.Option(
        _DEFAULTS.points, "--points", "-p", help="Number of points to generate",
    ),
    seed: int | None = typer.Option(
        _DEFAULTS.seed, "--seed", help="Seed for random number generator",
    ),
    weight: float = typer.Option(
        _DEFAULTS.color_weight, "--weight", "-w",
        help="Color distance weight (0 = pure positional Voronoi)",
    ),
    blur: float = typer.Option(
        _DEFAULTS.blur_amount, "--blur", "-b", help="Blur amount before processing",
    ),
    point_radius: int | None = typer.Option(
        _DEFAULTS.point_radius, "--point-radius", help="Add circles at point locations",
    ),
    max_side: int | None = typer.Option(
        _DEFAULTS.max_side, "--max-side", "-m", help="Downscale longest side first",
    ),
    workers: int = typer.Option(
        _DEFAULTS.workers, "--workers", help="Threads used while rendering",
    ),
    comparison: Path | None = typer.Option(
        None, "--comparison", help="Also save an Original | Blurred | Mosaic grid",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Render a single image to OUTPUT."""
    _setup_logging(verbose)

    cfg = MosaicConfig(
        points=points,
        seed=seed,
        color_weight=weight,
        blur_amount=blur,
        point_radius=point_radius,
        max_side=max_side,
        workers=workers,
    )

    try:
        image = load_image(input_path, cfg.max_side)
        h, w = image.shape[:2]
        console.print(f"Image dimensions: {w}x{h}")

        cfg = replace(cfg, seed=resolve_seed(cfg.seed))
        console.print(f"Seed: {cfg.seed}")
        console.print(f"Points: {cfg.points}")
        console.print(f"Color weight: {cfg.color_weight}")

        result = _run(image, cfg)

        output.parent.mkdir(parents=True, exist_ok=True)
        _save_outputs(image, result, cfg, output, comparison)
    except MosaicError as err:
        console.print(f"[red]{err}[/red]")
        raise typer.Exit(1) from err

    console.print(f"[green]✓[/green] Saved voronoi diagram to {output}")


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    points: int = typer.Option(_DEFAULTS.points, "--points", "-p"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed"),
    weight: float = typer.Option(_DEFAULTS.color_weight, "--weight", "-w"),
    blur: float = typer.Option(_DEFAULTS.blur_amount, "--blur", "-b"),
    point_radius: int | None = typer.Option(_DEFAULTS.point_radius, "--point-radius"),
    max_side: int | None = typer.Option(_DEFAULTS.max_side, "--max-side", "-m"),
    workers: int = typer.Option(_DEFAULTS.workers, "--workers"),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Save comparison grids next to each mosaic",
    ),
    output_format: str = typer.Option(_DEFAULTS.output_format, "--format", "-f"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Process all images in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)

    cfg = MosaicConfig(
        points=points,
        seed=seed,
        color_weight=weight,
        blur_amount=blur,
        point_radius=point_radius,
        max_side=max_side,
        workers=workers,
        output_format=output_format,
        save_comparison=comparison,
        input_dir=input_dir,
        output_dir=output_dir,
    )

    images = _collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    try:
        cfg = replace(cfg, seed=resolve_seed(cfg.seed))
    except MosaicError as err:
        console.print(f"[red]{err}[/red]")
        raise typer.Exit(1) from err

    output_dir.mkdir(parents=True, exist_ok=True)

    console.print(Panel.fit(
        f"[bold]VORONOI MOSAIC[/bold]\n"
        f"Points: {cfg.points}  |  Colour weight: {cfg.color_weight}\n"
        f"Blur: {cfg.blur_amount}  |  Point radius: {cfg.point_radius}\n"
        f"Seed: {cfg.seed}  |  Images: {len(images)}",
        border_style="cyan",
    ))

    for idx, img_path in enumerate(images, 1):
        stem = img_path.stem
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        t_total = time.perf_counter()

        out_path = output_dir / f"{stem}_voronoi.{cfg.output_format}"
        comp_path = (
            output_dir / f"{stem}_comparison.{cfg.output_format}"
            if cfg.save_comparison else None
        )

        try:
            image = load_image(img_path, cfg.max_side)
            result = _run(image, cfg)
            _save_outputs(image, result, cfg, out_path, comp_path)
        except MosaicError as err:
            console.print(f"[red]{img_path.name}: {err}[/red]")
            raise typer.Exit(1) from err

        h, w = image.shape[:2]
        elapsed = time.perf_counter() - t_total
        console.print(
            f"  [green]✓[/green] {out_path.name}  "
            f"[dim]{w}x{h}  seed={result.seed}  time={elapsed:.1f}s[/dim]"
        )

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]",
        border_style="green",
    ))


if __name__ == "__main__":
    app()
