#!/usr/bin/env python3
"""
exrgba.codec

Codec layer: EXR version flags, part headers, decode options and the adapter
over the OpenEXR Python bindings that actually parses headers and
decompresses pixel planes.

This module is intentionally thin. It does NOT implement:
  - channel/layer selection (see channels.py)
  - RGBA assembly (see assembler.py)
  - per-part or per-container orchestration (see part.py, container.py)

Everything above this layer talks to a codec through five methods:

    probe_version(data)                  -> ExrVersion
    parse_headers(data, version)         -> [Header, ...]
    decode_part(header, data, options)   -> DecodedImage
    release_header(header)
    release_image(image)

so a different backend (or an in-memory double in tests) can be swapped in
by passing any object with those methods as `codec=`.

Typical usage at this level looks like:

    from exrgba.codec import OpenExrCodec, DecodeOptions

    codec = OpenExrCodec()
    version = codec.probe_version(data)
    headers = codec.parse_headers(data, version)
    image = codec.decode_part(headers[0], data, DecodeOptions())
"""

from __future__ import annotations

import enum
import logging
import os
import struct
import tempfile
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import OpenEXR


logger = logging.getLogger(__name__)


# ===================== Constants and basic types =====================

# First four bytes of every EXR file.
EXR_MAGIC = b"\x76\x2f\x31\x01"

# Only version 2 of the file layout exists.
EXR_VERSION = 2

# Preamble: magic[4], version+flags[u32 little endian]
# The low byte is the version number, the upper bytes are feature flags.
_PREAMBLE = struct.Struct("<4sI")

FLAG_TILED = 0x200
FLAG_LONG_NAMES = 0x400
FLAG_NON_IMAGE = 0x800  # deep data
FLAG_MULTIPART = 0x1000


class PixelType(enum.IntEnum):
    """Sample formats, numbered as in the EXR channel list."""

    UINT = 0
    HALF = 1
    FLOAT = 2


_DTYPE_PIXEL_TYPES = {
    np.dtype(np.uint32): PixelType.UINT,
    np.dtype(np.float16): PixelType.HALF,
    np.dtype(np.float32): PixelType.FLOAT,
}

_PIXEL_TYPE_DTYPES = {
    PixelType.UINT: np.dtype(np.uint32),
    PixelType.HALF: np.dtype(np.float16),
    PixelType.FLOAT: np.dtype(np.float32),
}


class ExrCodecError(ValueError):
    """Raised by a codec when the bytes cannot be probed, parsed or decoded."""


@dataclass(frozen=True)
class ExrVersion:
    version: int = EXR_VERSION
    tiled: bool = False
    long_name: bool = False
    non_image: bool = False
    multipart: bool = False


@dataclass(frozen=True)
class ChannelInfo:
    name: str
    pixel_type: PixelType = PixelType.HALF


@dataclass(frozen=True)
class Header:
    """
    Read-only description of one part.

    Headers are never mutated after parsing; per-decode requests travel in a
    separate DecodeOptions value.
    """

    index: int
    name: str
    width: int
    height: int
    channels: Tuple[ChannelInfo, ...] = ()

    @property
    def num_channels(self) -> int:
        return len(self.channels)

    @property
    def pixel_types(self) -> Tuple[PixelType, ...]:
        return tuple(ch.pixel_type for ch in self.channels)

    @property
    def channel_names(self) -> Tuple[str, ...]:
        return tuple(ch.name for ch in self.channels)


@dataclass(frozen=True)
class DecodeOptions:
    """
    Per-channel pixel type requests, keyed by channel index.

    A channel without an entry is materialized in its stored type.
    """

    requested_pixel_types: Mapping[int, PixelType] = field(default_factory=dict)

    def requested(self, channel_index: int, stored: PixelType) -> PixelType:
        return PixelType(self.requested_pixel_types.get(channel_index, stored))


@dataclass
class DecodedImage:
    """Per-channel planes of one part, each a flat row-major array."""

    planes: Tuple[np.ndarray, ...]
    width: int
    height: int

    @property
    def num_channels(self) -> int:
        return len(self.planes)


# ===================== Version probe =====================

def probe_version(data: bytes) -> ExrVersion:
    """
    Read the 8-byte preamble of an EXR file.

    Parameters
    ----------
    data : bytes
        The complete container, or at least its first 8 bytes.

    Returns
    -------
    ExrVersion
        Version number and feature flags.

    Raises
    ------
    ExrCodecError
        If the data is too short, the magic number is wrong or the version is
        not 2.
    """
    if len(data) < _PREAMBLE.size:
        raise ExrCodecError("Invalid EXR header: data too short")

    magic, word = _PREAMBLE.unpack_from(bytes(data[: _PREAMBLE.size]))
    if magic != EXR_MAGIC:
        raise ExrCodecError("Invalid EXR header: bad magic number")

    version = word & 0xFF
    if version != EXR_VERSION:
        raise ExrCodecError(f"Unsupported EXR version: {version}")

    return ExrVersion(
        version=version,
        tiled=bool(word & FLAG_TILED),
        long_name=bool(word & FLAG_LONG_NAMES),
        non_image=bool(word & FLAG_NON_IMAGE),
        multipart=bool(word & FLAG_MULTIPART),
    )


# ===================== OpenEXR adapter =====================

class OpenExrCodec:
    """
    Codec backed by the OpenEXR Python bindings.

    OpenEXR.File reads from a path, so the container bytes are spilled to a
    temporary directory that only lives for the duration of the load. The
    loaded parts stay cached on the codec until their header is released.
    """

    def __init__(self) -> None:
        self._parts: Dict[int, Tuple[Tuple[np.ndarray, ...], int, int]] = {}

    def probe_version(self, data: bytes) -> ExrVersion:
        return probe_version(data)

    def parse_headers(self, data: bytes, version: Optional[ExrVersion] = None) -> List[Header]:
        if version is None:
            version = probe_version(data)

        exr_file = _load_exr_file(data)
        parts = list(exr_file.parts)
        if not parts:
            raise ExrCodecError("EXR file has no parts")
        if not version.multipart and len(parts) > 1:
            logger.warning("single-part version flags but %d parts found", len(parts))

        headers: List[Header] = []
        self._parts.clear()
        for index, part in enumerate(parts):
            names, planes = _part_planes(part)
            width, height = _part_size(part, planes)
            channels = tuple(
                ChannelInfo(name=name, pixel_type=_pixel_type_of(plane, name))
                for name, plane in zip(names, planes)
            )
            headers.append(
                Header(
                    index=index,
                    name=_part_name(part, version),
                    width=width,
                    height=height,
                    channels=channels,
                )
            )
            self._parts[index] = (planes, width, height)
        return headers

    def decode_part(self, header: Header, data: bytes, options: Optional[DecodeOptions] = None) -> DecodedImage:
        if options is None:
            options = DecodeOptions()
        if header.index not in self._parts:
            # Header came from another codec instance or was released already.
            self.parse_headers(data)
            if header.index not in self._parts:
                raise ExrCodecError(f"part index {header.index} out of range")

        planes, width, height = self._parts[header.index]
        if len(planes) != header.num_channels:
            raise ExrCodecError(
                f"header lists {header.num_channels} channels but part has {len(planes)}"
            )

        out = []
        for idx, (plane, info) in enumerate(zip(planes, header.channels)):
            want = options.requested(idx, info.pixel_type)
            dtype = _PIXEL_TYPE_DTYPES[want]
            if plane.dtype != dtype:
                plane = plane.astype(dtype)
            out.append(np.ascontiguousarray(plane).reshape(-1))
        return DecodedImage(planes=tuple(out), width=width, height=height)

    def release_header(self, header: Header) -> None:
        self._parts.pop(header.index, None)

    def release_image(self, image: DecodedImage) -> None:
        image.planes = ()


def _load_exr_file(data: bytes):
    try:
        with tempfile.TemporaryDirectory(prefix="exrgba_") as td:
            path = os.path.join(td, "container.exr")
            with open(path, "wb") as f:
                f.write(data)
            return OpenEXR.File(path, separate_channels=True)
    except Exception as exc:
        # OpenEXR reports parse failures with several exception types.
        raise ExrCodecError(str(exc) or type(exc).__name__) from exc


def _part_planes(part) -> Tuple[List[str], Tuple[np.ndarray, ...]]:
    names: List[str] = []
    planes: List[np.ndarray] = []
    for name, channel in part.channels.items():
        pixels = channel.pixels
        if pixels is None:
            raise ExrCodecError(f"channel {name!r} has no pixel data")
        names.append(str(name))
        planes.append(np.asarray(pixels))
    return names, tuple(planes)


def _part_size(part, planes: Sequence[np.ndarray]) -> Tuple[int, int]:
    # Full-resolution channels are the largest planes; subsampled ones are
    # rejected later when their size does not match.
    if planes:
        largest = max(planes, key=lambda p: p.size)
        if largest.ndim == 2:
            h, w = largest.shape
            return int(w), int(h)

    window = part.header.get("dataWindow")
    if window is None:
        return 0, 0
    try:
        (x0, y0), (x1, y1) = window
    except (TypeError, ValueError):
        return 0, 0
    return int(x1) - int(x0) + 1, int(y1) - int(y0) + 1


def _part_name(part, version: ExrVersion) -> str:
    name = part.header.get("name")
    if name is None and version.multipart:
        name = part.name()
    if name is None:
        return ""
    if isinstance(name, bytes):
        return name.decode("utf-8", errors="replace")
    return str(name)


def _pixel_type_of(plane: np.ndarray, name: str) -> PixelType:
    try:
        return _DTYPE_PIXEL_TYPES[plane.dtype]
    except KeyError:
        raise ExrCodecError(f"channel {name!r} has unsupported sample type {plane.dtype}") from None
