"""Nearest-seed rendering and the end-to-end mosaic pipeline."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageFilter

from voronoi_mosaic.config import MosaicConfig
from voronoi_mosaic.errors import InvalidInputError
from voronoi_mosaic.pixel_index import PixelSamples, index_pixels
from voronoi_mosaic.sampling import make_rng, resolve_seed, sample_seeds
from voronoi_mosaic.scoring import CHANNEL_MAX, max_distances, score_block

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass(frozen=True, eq=False)
class MosaicResult:
    """Output of :func:`generate_mosaic`.

    Attributes:
        image: (H, W, C) uint8 mosaic.
        seeds: The sampled seed set, in sampling order.
        seed:  Resolved random seed; passing it back reproduces the run.
    """

    image: np.ndarray
    seeds: PixelSamples
    seed: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MosaicResult):
            return NotImplemented
        return (
            self.seed == other.seed
            and self.seeds == other.seeds
            and np.array_equal(self.image, other.image)
        )

    __hash__ = None  # type: ignore[assignment]


def _notify(progress: ProgressCallback | None, stage: str, done: int, total: int) -> None:
    if progress is not None:
        progress(stage, done, total)


def blur_image(image: np.ndarray, amount: float) -> np.ndarray:
    """Gaussian-blur each channel with standard deviation *amount*.

    ``amount <= 0`` returns an unmodified copy.
    """
    if amount <= 0:
        return image.copy()
    blur = ImageFilter.GaussianBlur(radius=amount)
    channels = [
        np.asarray(Image.fromarray(np.ascontiguousarray(image[:, :, ch])).filter(blur))
        for ch in range(image.shape[2])
    ]
    return np.stack(channels, axis=2).astype(np.uint8)


def _render_rows(
    base: np.ndarray,
    out: np.ndarray,
    r0: int,
    r1: int,
    seeds: PixelSamples,
    seed_step: int,
    color_weight: float,
    point_radius: int | None,
    max_pos_dist: float,
    max_color_dist: float,
) -> int:
    w = base.shape[1]
    n_rows = r1 - r0
    xs = np.tile(np.arange(w, dtype=np.int64), n_rows)
    ys = np.repeat(np.arange(r0, r1, dtype=np.int64), w)
    colors = base[r0:r1].reshape(-1, base.shape[2])

    best = np.full(len(xs), np.inf)
    winners = np.zeros(len(xs), dtype=np.intp)
    for s0 in range(0, len(seeds), seed_step):
        s1 = min(s0 + seed_step, len(seeds))
        scores = score_block(
            xs, ys, colors, seeds.take(np.arange(s0, s1)),
            color_weight, max_pos_dist, max_color_dist,
        )
        # argmin returns the first minimum and later batches only replace on
        # a strictly lower score, so earlier seeds win exact ties
        local = np.argmin(scores, axis=1)
        local_best = scores[np.arange(len(xs)), local]
        better = local_best < best
        best[better] = local_best[better]
        winners[better] = local[better] + s0

    painted = seeds.colors[winners].copy()

    if point_radius is not None:
        dx = xs - seeds.xs[winners].astype(np.int64)
        dy = ys - seeds.ys[winners].astype(np.int64)
        inside = dx * dx + dy * dy <= point_radius * point_radius
        painted[inside] = CHANNEL_MAX - painted[inside]

    out[r0:r1] = painted.reshape(n_rows, w, -1)
    return n_rows


def batch_shape(width: int, n_seeds: int, chunk_rows: int, batch_elements: int) -> tuple[int, int]:
    """Rows and seeds per scoring batch so rows * width * seeds stays in budget.

    Images wider than *batch_elements* still score one row against one
    seed at a time.
    """
    budget = max(1, batch_elements)
    seed_step = max(1, min(n_seeds, budget // max(1, width)))
    rows = max(1, min(chunk_rows, budget // (max(1, width) * seed_step)))
    return rows, seed_step


def render_mosaic(
    base: np.ndarray,
    seeds: PixelSamples,
    color_weight: float = 3.5,
    point_radius: int | None = None,
    progress: ProgressCallback | None = None,
    chunk_rows: int = 16,
    workers: int = 1,
    batch_elements: int = 1 << 22,
) -> np.ndarray:
    """Paint every pixel with the colour of its best-scoring seed.

    Args:
        base:           (H, W, C) uint8 image whose colours are scored (the
                        blurred source).
        seeds:          Seed set; every pixel is compared against all of them.
        color_weight:   Colour term weight (0 = position only).
        point_radius:   If set, pixels within this radius of their winning
                        seed get that seed's inverted colour.
        progress:       Optional ``(stage, done, total)`` callback.
        chunk_rows:     Upper bound on rows scored per batch.
        workers:        Threads scoring row batches concurrently.
        batch_elements: Pixel x seed pairs scored at once per worker
                        (controls peak RAM).

    Returns:
        (H, W, C) uint8 mosaic.
    """
    h, w, c = base.shape
    max_pos_dist, max_color_dist = max_distances(w, h, c)
    out = np.empty_like(base)
    rows, seed_step = batch_shape(w, len(seeds), max(1, chunk_rows), batch_elements)
    bounds = [(r0, min(r0 + rows, h)) for r0 in range(0, h, rows)]
    args = (seeds, seed_step, color_weight, point_radius, max_pos_dist, max_color_dist)
    logger.debug("Scoring %d rows x %d seeds per batch", rows, seed_step)

    done = 0
    _notify(progress, "render", done, h)
    if workers <= 1:
        for r0, r1 in bounds:
            done += _render_rows(base, out, r0, r1, *args)
            _notify(progress, "render", done, h)
        return out

    # Each batch writes a disjoint slice of ``out``
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(_render_rows, base, out, r0, r1, *args)
            for r0, r1 in bounds
        ]
        for fut in as_completed(futures):
            done += fut.result()
            _notify(progress, "render", done, h)
    return out


def _validate(image: np.ndarray, config: MosaicConfig) -> None:
    if not isinstance(image, np.ndarray) or image.ndim != 3:
        msg = "Image must be an (H, W, C) array"
        raise InvalidInputError(msg)
    if image.dtype != np.uint8:
        msg = f"Image must be uint8, got {image.dtype}"
        raise InvalidInputError(msg)
    h, w, c = image.shape
    if h == 0 or w == 0 or c == 0:
        msg = f"Image has zero size ({w}x{h}x{c})"
        raise InvalidInputError(msg)
    if config.points < 1:
        msg = f"Point count must be positive, got {config.points}"
        raise InvalidInputError(msg)
    if not math.isfinite(config.color_weight):
        msg = f"Colour weight must be finite, got {config.color_weight}"
        raise InvalidInputError(msg)
    if not math.isfinite(config.blur_amount) or config.blur_amount < 0:
        msg = f"Blur amount must be finite and >= 0, got {config.blur_amount}"
        raise InvalidInputError(msg)
    if config.point_radius is not None and config.point_radius < 0:
        msg = f"Point radius must be >= 0, got {config.point_radius}"
        raise InvalidInputError(msg)


def generate_mosaic(
    image: np.ndarray,
    config: MosaicConfig | None = None,
    progress: ProgressCallback | None = None,
) -> MosaicResult:
    """Run the full pipeline: index, sample seeds, blur, render.

    Args:
        image:    (H, W, C) uint8 source image.
        config:   Run parameters (defaults to :class:`MosaicConfig`).
        progress: Optional ``(stage, done, total)`` callback with stages
                  ``"index"``, ``"sample"`` and ``"render"``.

    Returns:
        The mosaic, the seed set and the resolved random seed.

    Raises:
        InvalidInputError:   Zero-sized image or invalid parameters.
        InvalidWeightsError: No pixel has a positive sampling weight.
    """
    cfg = config or MosaicConfig()
    _validate(image, cfg)
    h, w = image.shape[:2]

    seed = resolve_seed(cfg.seed)
    rng = make_rng(seed)
    logger.info("Seed %d  |  %d points  |  colour weight %s", seed, cfg.points, cfg.color_weight)

    t0 = time.perf_counter()
    _notify(progress, "index", 0, h * w)
    index = index_pixels(image)
    _notify(progress, "index", len(index), h * w)
    logger.debug("Indexed %d pixels  (%.2f s)", len(index), time.perf_counter() - t0)

    t0 = time.perf_counter()
    _notify(progress, "sample", 0, cfg.points)
    seeds = sample_seeds(index, cfg.points, w, h, rng)
    _notify(progress, "sample", cfg.points, cfg.points)
    logger.debug("Sampled %d seeds  (%.2f s)", len(seeds), time.perf_counter() - t0)

    t0 = time.perf_counter()
    base = blur_image(image, cfg.blur_amount)
    mosaic = render_mosaic(
        base,
        seeds,
        color_weight=cfg.color_weight,
        point_radius=cfg.point_radius,
        progress=progress,
        chunk_rows=cfg.chunk_rows,
        workers=cfg.workers,
        batch_elements=cfg.batch_elements,
    )
    logger.info("Rendered %dx%d mosaic  (%.1f s)", w, h, time.perf_counter() - t0)

    return MosaicResult(image=mosaic, seeds=seeds, seed=seed)
