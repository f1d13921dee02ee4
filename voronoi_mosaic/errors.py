"""Exception hierarchy shared by the core and the CLI."""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for every failure raised by this package."""


class InvalidInputError(MosaicError, ValueError):
    """The image or a run parameter cannot be processed."""


class InvalidWeightsError(MosaicError, ValueError):
    """A weighted distribution was built from unusable weights."""


class ImageIOError(MosaicError, OSError):
    """An image could not be decoded or encoded."""
