"""
exrgba

Turn OpenEXR containers into canonical RGBA float32 images, one per part.

This package keeps a hard separation between:
- the codec adapter (exrgba.codec): version flags, headers, pixel planes
- channel logic (exrgba.channels): layers and R/G/B/A selection
- pixel assembly (exrgba.planes, exrgba.assembler)
- orchestration (exrgba.part, exrgba.container, exrgba.loader)

Typical usage:

    import exrgba

    with open("beauty.exr", "rb") as f:
        data = f.read()

    result = exrgba.decode_container(data)
    for name, image in result.images.items():
        rgba = image.as_array()  # (height, width, 4) float32

    left = exrgba.decode_container_part(data, "left")
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "decode_container",
    "decode_container_part",
    "read_headers",
    "ContainerResult",
    "decode_part",
    "PartDecoder",
    "PartState",
    "RgbaImage",
    "DecodeResult",
    "ExrLoader",
    "OpenExrCodec",
    "probe_version",
    "get_layers",
    "channels_in_layer",
    "select_rgba",
    "ExrRgbaError",
    "InvalidContainer",
    "ContainerError",
    "CodecError",
    "PartNotFound",
    "MissingColorChannel",
]

__version__ = "0.1.0"


from .channels import channels_in_layer, get_layers, select_rgba  # noqa: E402
from .codec import OpenExrCodec, probe_version  # noqa: E402
from .container import (  # noqa: E402
    ContainerResult,
    decode_container,
    decode_container_part,
    read_headers,
)
from .errors import (  # noqa: E402
    CodecError,
    ContainerError,
    ExrRgbaError,
    InvalidContainer,
    MissingColorChannel,
    PartNotFound,
)
from .loader import ExrLoader  # noqa: E402
from .part import DecodeResult, PartDecoder, PartState, RgbaImage, decode_part  # noqa: E402
