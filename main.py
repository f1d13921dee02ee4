#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Drop images into ``images/`` and run:

    python main.py batch

Or use the full CLI:

    python -m voronoi_mosaic.cli batch --help
    python -m voronoi_mosaic.cli single my_photo.jpg mosaic.png --points 500
"""

from voronoi_mosaic.cli import app

if __name__ == "__main__":
    app()
