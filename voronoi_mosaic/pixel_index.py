"""Row-major flattening of an image into (x, y, colour) samples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np


class PixelSample(NamedTuple):
    """A single pixel: position and channel values."""

    x: int
    y: int
    color: tuple[int, ...]


@dataclass(frozen=True, eq=False)
class PixelSamples:
    """Ordered collection of pixel samples stored column-wise.

    Attributes:
        xs:     (n,) uint32 column positions.
        ys:     (n,) uint32 row positions.
        colors: (n, C) uint8 channel values.
    """

    xs: np.ndarray
    ys: np.ndarray
    colors: np.ndarray

    def __len__(self) -> int:
        return len(self.xs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelSamples):
            return NotImplemented
        return (
            np.array_equal(self.xs, other.xs)
            and np.array_equal(self.ys, other.ys)
            and np.array_equal(self.colors, other.colors)
        )

    __hash__ = None  # type: ignore[assignment]

    def __getitem__(self, i: int) -> PixelSample:
        return PixelSample(
            int(self.xs[i]),
            int(self.ys[i]),
            tuple(int(c) for c in self.colors[i]),
        )

    def __iter__(self) -> Iterator[PixelSample]:
        for i in range(len(self)):
            yield self[i]

    @property
    def channels(self) -> int:
        return self.colors.shape[1]

    def take(self, indices: np.ndarray) -> PixelSamples:
        """Subset in the order given by *indices* (repeats allowed)."""
        indices = np.asarray(indices, dtype=np.intp)
        return PixelSamples(
            self.xs[indices], self.ys[indices], self.colors[indices],
        )

    def contains(self, sample: PixelSample) -> bool:
        mask = (self.xs == sample.x) & (self.ys == sample.y)
        if not mask.any():
            return False
        color = np.asarray(sample.color, dtype=self.colors.dtype)
        return bool(np.any(np.all(self.colors[mask] == color, axis=1)))


def index_pixels(image: np.ndarray) -> PixelSamples:
    """Flatten an (H, W, C) image in row-major scan order.

    All x for y=0 come first, then y=1, and so on; the result holds
    exactly W*H samples.
    """
    h, w, c = image.shape
    ys, xs = np.divmod(np.arange(h * w, dtype=np.uint32), np.uint32(w))
    colors = np.ascontiguousarray(image, dtype=np.uint8).reshape(-1, c)
    return PixelSamples(xs, ys, colors)
