"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic run.

    Attributes:
        points:          Number of seeds sampled from the image.
        seed:            Random seed (None = drawn from OS entropy and reported).
        color_weight:    Colour term weight; 0 gives a plain positional Voronoi.
        blur_amount:     Gaussian sigma applied before scoring (0 = no blur).
        point_radius:    Invert colours within this radius of each winning seed.
        max_side:        Downscale inputs whose longest side exceeds this.
        workers:         Threads used to score row chunks.
        chunk_rows:      Image rows scored per batch (upper bound).
        batch_elements:  Pixel x seed pairs scored at once (controls peak RAM).
        output_format:   Image format for batch output files.
        save_comparison: Generate a side-by-side comparison grid.
        input_dir:       Folder to scan for source images.
        output_dir:      Folder for results.
    """

    # Sampling
    points: int = 100
    seed: int | None = None

    # Scoring / rendering
    color_weight: float = 3.5
    blur_amount: float = 1.0
    point_radius: int | None = None

    # Input scaling
    max_side: int | None = None  # downscale longest side before rendering

    # Execution
    workers: int = 1
    chunk_rows: int = 16
    batch_elements: int = 1 << 22  # pixel x seed pairs per scoring batch

    # Output
    output_format: str = "png"
    save_comparison: bool = False

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif"}
    )
