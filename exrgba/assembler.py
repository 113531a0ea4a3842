"""
exrgba.assembler

Interleave selected planes into one R,G,B,A,R,G,B,A,... float32 buffer.

Values pass through untouched: no gamma, no clamping, no NaN scrubbing.
The only synthesized value is alpha, which defaults to fully opaque when the
layer has no A channel.
"""

from __future__ import annotations

import sys

import numpy as np

from .channels import RgbaIndices
from .errors import CodecError, MissingColorChannel
from .planes import PlaneSet

__all__ = ["DEFAULT_ALPHA", "assemble_rgba"]

DEFAULT_ALPHA = 1.0


def assemble_rgba(
    indices: RgbaIndices,
    planes: PlaneSet,
    width: int,
    height: int,
    *,
    layer: str = "",
) -> np.ndarray:
    """
    Build the interleaved RGBA buffer for one part.

    Parameters
    ----------
    indices : RgbaIndices
        Channel indices picked by select_rgba.
    planes : PlaneSet
        Decoded planes of the part.
    width, height : int
        Image size; must match the planes.
    layer : str, optional
        Only used in error messages.

    Returns
    -------
    np.ndarray
        1-D float32 array of width*height*4 values.

    Raises
    ------
    MissingColorChannel
        If R, G or B was not found. Alpha is the only channel with a default.
    CodecError
        If the planes do not match the image size or an index is out of range.
    """
    missing = indices.missing_color()
    if missing:
        raise MissingColorChannel(missing, layer=layer)

    pixel_count = int(width) * int(height)
    if pixel_count * 4 > sys.maxsize:
        raise CodecError(f"image too large: {width}x{height}")
    if pixel_count != planes.pixel_count:
        raise CodecError(
            f"image size {width}x{height} does not match decoded planes "
            f"{planes.width}x{planes.height}"
        )

    try:
        sources = [planes.plane(indices.r), planes.plane(indices.g), planes.plane(indices.b)]
        alpha = planes.plane(indices.a) if indices.has_alpha else None
    except IndexError as exc:
        raise CodecError(str(exc)) from exc

    out = np.empty((pixel_count, 4), dtype=np.float32)
    for c, src in enumerate(sources):
        out[:, c] = src
    if alpha is None:
        out[:, 3] = DEFAULT_ALPHA
    else:
        out[:, 3] = alpha
    return out.reshape(-1)
