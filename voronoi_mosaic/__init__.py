"""
Voronoi Mosaic Generator
========================

Recolour every pixel of an image with the colour of its nearest seed,
where seeds are sampled with a bias toward the image centre and
"nearest" blends position and colour:

- **Sampling**: weighted draws over all pixels, reproducible per seed
- **Rendering**: brute-force nearest seed, optional blur and seed markers
"""

__version__ = "1.0.0"

from voronoi_mosaic.config import MosaicConfig
from voronoi_mosaic.errors import (
    ImageIOError,
    InvalidInputError,
    InvalidWeightsError,
    MosaicError,
)
from voronoi_mosaic.image_io import (
    compute_target_size,
    load_image,
    make_comparison_grid,
    save_image,
)
from voronoi_mosaic.pixel_index import PixelSample, PixelSamples, index_pixels
from voronoi_mosaic.renderer import (
    MosaicResult,
    blur_image,
    generate_mosaic,
    render_mosaic,
)
from voronoi_mosaic.sampling import (
    WeightedIndex,
    center_weight,
    resolve_seed,
    sample_seeds,
)
from voronoi_mosaic.scoring import max_distances, score, score_block

__all__ = [
    "ImageIOError",
    "InvalidInputError",
    "InvalidWeightsError",
    "MosaicConfig",
    "MosaicError",
    "MosaicResult",
    "PixelSample",
    "PixelSamples",
    "WeightedIndex",
    "blur_image",
    "center_weight",
    "compute_target_size",
    "generate_mosaic",
    "index_pixels",
    "load_image",
    "make_comparison_grid",
    "max_distances",
    "render_mosaic",
    "resolve_seed",
    "sample_seeds",
    "save_image",
    "score",
    "score_block",
]
