"""In-memory codec double used by the core tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from exrgba.codec import (
    ChannelInfo,
    DecodedImage,
    DecodeOptions,
    ExrCodecError,
    ExrVersion,
    Header,
    PixelType,
)

_PIXEL_TYPES = {
    np.dtype(np.uint32): PixelType.UINT,
    np.dtype(np.float16): PixelType.HALF,
    np.dtype(np.float32): PixelType.FLOAT,
}

_DTYPES = {v: k for k, v in _PIXEL_TYPES.items()}


@dataclass
class FakePart:
    name: str
    width: int
    height: int
    channels: List[Tuple[str, np.ndarray]] = field(default_factory=list)
    decode_error: Optional[str] = None


def make_part(name: str, width: int, height: int, channels: Sequence[Tuple[str, Sequence[float]]], dtype=np.float32, **kw) -> FakePart:
    return FakePart(
        name=name,
        width=width,
        height=height,
        channels=[(ch, np.asarray(values, dtype=dtype)) for ch, values in channels],
        **kw,
    )


class FakeCodec:
    """
    Codec over FakePart descriptions.

    Records every decode request and release so tests can check resource
    handling.
    """

    def __init__(
        self,
        parts: Sequence[FakePart],
        *,
        multipart: Optional[bool] = None,
        non_image: bool = False,
        probe_error: Optional[str] = None,
        parse_error: Optional[str] = None,
        honor_requests: bool = True,
    ) -> None:
        self.parts = list(parts)
        self.multipart = len(self.parts) > 1 if multipart is None else multipart
        self.non_image = non_image
        self.probe_error = probe_error
        self.parse_error = parse_error
        self.honor_requests = honor_requests

        self.parsed: List[Header] = []
        self.decoded: List[str] = []
        self.options: List[DecodeOptions] = []
        self.released_headers: List[int] = []
        self.images_out = 0
        self.images_released = 0

    def probe_version(self, data: bytes) -> ExrVersion:
        if self.probe_error:
            raise ExrCodecError(self.probe_error)
        return ExrVersion(multipart=self.multipart, non_image=self.non_image)

    def parse_headers(self, data: bytes, version: ExrVersion) -> List[Header]:
        if self.parse_error:
            raise ExrCodecError(self.parse_error)
        self.parsed = [
            Header(
                index=i,
                name=part.name,
                width=part.width,
                height=part.height,
                channels=tuple(ChannelInfo(name, _PIXEL_TYPES[plane.dtype]) for name, plane in part.channels),
            )
            for i, part in enumerate(self.parts)
        ]
        return list(self.parsed)

    def decode_part(self, header: Header, data: bytes, options: DecodeOptions) -> DecodedImage:
        part = self.parts[header.index]
        self.decoded.append(header.name)
        self.options.append(options)
        if part.decode_error:
            raise ExrCodecError(part.decode_error)

        planes = []
        for idx, (_, plane) in enumerate(part.channels):
            if self.honor_requests:
                want = options.requested(idx, _PIXEL_TYPES[plane.dtype])
                plane = plane.astype(_DTYPES[want])
            planes.append(plane)
        self.images_out += 1
        return DecodedImage(planes=tuple(planes), width=part.width, height=part.height)

    def release_header(self, header: Header) -> None:
        self.released_headers.append(header.index)

    def release_image(self, image: DecodedImage) -> None:
        self.images_released += 1
        image.planes = ()

    @property
    def all_released(self) -> bool:
        return (
            sorted(self.released_headers) == [h.index for h in self.parsed]
            and self.images_out == self.images_released
        )


def rgb_part(name: str = "", alpha: Optional[Sequence[float]] = None, dtype=np.float32, **kw) -> FakePart:
    """The 2x1 image used throughout: R=[1, .5], G=[0, .5], B=[0, .5]."""
    channels = [("B", [0.0, 0.5]), ("G", [0.0, 0.5]), ("R", [1.0, 0.5])]
    if alpha is not None:
        channels.insert(0, ("A", list(alpha)))
    return make_part(name, 2, 1, channels, dtype=dtype, **kw)
