"""
exrgba.errors

Error kinds raised while turning an EXR container into RGBA images.

Container-level errors (InvalidContainer, ContainerError, PartNotFound) abort
a whole request. Part-level errors (CodecError, MissingColorChannel) only
affect the part they were raised for.
"""

from __future__ import annotations

__all__ = [
    "ExrRgbaError",
    "InvalidContainer",
    "ContainerError",
    "CodecError",
    "PartNotFound",
    "MissingColorChannel",
]


class ExrRgbaError(ValueError):
    """Base class for every decode failure. `kind` names the error kind."""

    kind = "ExrRgbaError"


class InvalidContainer(ExrRgbaError):
    """The version probe rejected the bytes."""

    kind = "InvalidContainer"


class ContainerError(ExrRgbaError):
    """Header parsing failed; carries the codec message."""

    kind = "ContainerError"


class CodecError(ExrRgbaError):
    """Pixel decoding failed for one part; carries the codec message."""

    kind = "CodecError"


class PartNotFound(ExrRgbaError):
    kind = "PartNotFound"

    def __init__(self, part_name: str) -> None:
        super().__init__(f"part not found: {part_name!r}")
        self.part_name = part_name


class MissingColorChannel(ExrRgbaError):
    kind = "MissingColorChannel"

    def __init__(self, missing, layer: str = "") -> None:
        self.missing = tuple(missing)
        self.layer = layer
        where = f"layer {layer!r}" if layer else "root layer"
        super().__init__(f"{', '.join(self.missing)} channel not found in {where}")
