"""
exrgba.loader

Query-style front end over decode_container.

The loader decodes everything once at construction and then answers
lookups by part name. It never raises for decode failures: `ok` and
`error` tell what happened.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from .container import ContainerResult, decode_container
from .errors import ExrRgbaError
from .part import RgbaImage

logger = logging.getLogger(__name__)

__all__ = ["ExrLoader"]


class ExrLoader:
    """
    Decode an EXR container and look up its parts by name.

    Single-part files normally have one part named "" so the default
    arguments address it.
    """

    def __init__(self, data: bytes, *, codec=None, layer: str = "") -> None:
        self.layer = layer
        self._result = ContainerResult()
        self._error: Optional[ExrRgbaError] = None
        try:
            self._result = decode_container(data, codec=codec, layer=layer)
        except ExrRgbaError as exc:
            self._error = exc
            return

        if self._result.failures:
            # Report the first failing part; the others are in failures().
            self._error = next(iter(self._result.failures.values())).error

    @property
    def ok(self) -> bool:
        return self._error is None

    @property
    def error(self) -> str:
        return "" if self._error is None else str(self._error)

    @property
    def kind(self) -> Optional[str]:
        return None if self._error is None else self._error.kind

    @property
    def multipart(self) -> bool:
        return self._result.multipart

    def part_names(self) -> List[str]:
        return list(self._result.part_names)

    def failures(self) -> dict:
        return {name: res.message for name, res in self._result.failures.items()}

    def image(self, part_name: str = "") -> Optional[RgbaImage]:
        return self._result.images.get(part_name)

    def get_bytes(self, part_name: str = "") -> Optional[np.ndarray]:
        """Flat float32 RGBA buffer of a part, or None if it was not decoded."""
        img = self.image(part_name)
        return None if img is None else img.pixels

    def width(self, part_name: str = "") -> int:
        img = self.image(part_name)
        return -1 if img is None else img.width

    def height(self, part_name: str = "") -> int:
        img = self.image(part_name)
        return -1 if img is None else img.height

    def layers(self, part_name: str = "") -> List[str]:
        return list(self._result.layers.get(part_name, []))
