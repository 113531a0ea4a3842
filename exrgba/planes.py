"""
exrgba.planes

Half-to-float decode requests and read-only float views over decoded planes.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .codec import DecodeOptions, Header, PixelType
from .errors import CodecError

__all__ = ["request_float_planes", "PlaneSet"]


def request_float_planes(header: Header) -> DecodeOptions:
    """
    Ask the codec to materialize every HALF channel as FLOAT.

    The header is left untouched; the request travels in the returned value.
    """
    return DecodeOptions(
        requested_pixel_types={
            idx: PixelType.FLOAT
            for idx, pixel_type in enumerate(header.pixel_types)
            if pixel_type == PixelType.HALF
        }
    )


class PlaneSet:
    """
    Per-channel float32 planes of one part, addressed as (channel, pixel).

    Every plane holds exactly width*height samples in the row order the
    codec produced.
    """

    def __init__(self, planes: Sequence[np.ndarray], width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.pixel_count = self.width * self.height

        views = []
        for idx, plane in enumerate(planes):
            # Exact for half samples; a codec that honored the request
            # already hands over float32 and nothing is copied.
            arr = np.asarray(plane, dtype=np.float32).reshape(-1).view()
            if arr.size != self.pixel_count:
                raise CodecError(
                    f"channel {idx} has {arr.size} samples, expected {self.pixel_count} "
                    f"({self.width}x{self.height})"
                )
            arr.flags.writeable = False
            views.append(arr)
        self._planes = tuple(views)

    def __len__(self) -> int:
        return len(self._planes)

    def plane(self, channel_index: int) -> np.ndarray:
        if not 0 <= channel_index < len(self._planes):
            raise IndexError(f"channel index {channel_index} out of range (0..{len(self._planes) - 1})")
        return self._planes[channel_index]

    def value(self, channel_index: int, pixel_index: int) -> float:
        return float(self.plane(channel_index)[pixel_index])

    def __getitem__(self, key) -> float:
        channel_index, pixel_index = key
        return self.value(channel_index, pixel_index)
