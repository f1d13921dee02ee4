"""Combined position + colour dissimilarity between pixels and seeds."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from voronoi_mosaic.pixel_index import PixelSamples

# Keeps a human-scale colour weight (e.g. 3.5) commensurate with the
# normalised position term.
COLOR_WEIGHT_SCALE = 10000.0

CHANNEL_MAX = 255


def max_distances(width: int, height: int, channels: int) -> tuple[float, float]:
    """Worst-case squared position distance and summed colour distance."""
    max_pos_dist = float(width ** 2) + float(height ** 2)
    max_color_dist = float(CHANNEL_MAX * channels)
    return max_pos_dist, max_color_dist


def score(
    pixel: tuple[int, int, Sequence[int]],
    seed: tuple[int, int, Sequence[int]],
    color_weight: float,
    max_pos_dist: float,
    max_color_dist: float,
) -> float:
    """Score a single pixel against a single seed; lower is closer.

    With ``color_weight == 0`` the raw squared distance is returned, which
    makes the mosaic a plain positional Voronoi diagram.
    """
    x, y, color = pixel
    px, py, pcolor = seed

    pos_dist = float(abs(int(x) - int(px)) ** 2 + abs(int(y) - int(py)) ** 2)
    if color_weight == 0:
        return pos_dist

    color_dist = sum(float(abs(int(a) - int(b))) for a, b in zip(color, pcolor, strict=True))
    return (
        pos_dist / max_pos_dist
        + color_dist / max_color_dist * color_weight / COLOR_WEIGHT_SCALE
    )


def score_block(
    xs: np.ndarray,
    ys: np.ndarray,
    colors: np.ndarray,
    seeds: PixelSamples,
    color_weight: float,
    max_pos_dist: float,
    max_color_dist: float,
) -> np.ndarray:
    """Vectorised :func:`score` for many pixels against every seed.

    Args:
        xs:     (P,) pixel columns.
        ys:     (P,) pixel rows.
        colors: (P, C) uint8 pixel colours.
        seeds:  Seed set of length S.

    Returns:
        (P, S) float64 score matrix, element-wise identical to :func:`score`.
    """
    dx = xs.astype(np.int64)[:, np.newaxis] - seeds.xs.astype(np.int64)[np.newaxis, :]
    dy = ys.astype(np.int64)[:, np.newaxis] - seeds.ys.astype(np.int64)[np.newaxis, :]
    pos_dist = (dx * dx + dy * dy).astype(np.float64)
    if color_weight == 0:
        return pos_dist

    # One channel at a time keeps peak memory at (P, S)
    c = colors.astype(np.int16)
    s = seeds.colors.astype(np.int16)
    color_sum = np.zeros(pos_dist.shape, dtype=np.int32)
    for ch in range(c.shape[1]):
        color_sum += np.abs(c[:, ch, np.newaxis] - s[np.newaxis, :, ch])
    color_dist = color_sum.astype(np.float64)
    return (
        pos_dist / max_pos_dist
        + color_dist / max_color_dist * color_weight / COLOR_WEIGHT_SCALE
    )
