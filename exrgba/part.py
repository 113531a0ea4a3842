"""
exrgba.part

Decode one part end to end: request float planes, decode through the codec,
select R/G/B/A in the requested layer and assemble the RGBA buffer.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .assembler import assemble_rgba
from .channels import channels_in_layer, get_layers, select_rgba
from .codec import ExrCodecError, Header
from .errors import CodecError, ExrRgbaError
from .planes import PlaneSet, request_float_planes

logger = logging.getLogger(__name__)

__all__ = ["PartState", "RgbaImage", "DecodeResult", "PartDecoder", "decode_part"]


class PartState(enum.Enum):
    START = "start"
    HEADER_PARSED = "header_parsed"
    CHANNELS_UPGRADED = "channels_upgraded"
    DECODED = "decoded"
    ASSEMBLED = "assembled"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RgbaImage:
    """
    Interleaved float32 RGBA image of one part.

    `pixels` is a flat array of width*height*4 values owned by the caller.
    """

    name: str
    width: int
    height: int
    pixels: np.ndarray

    def as_array(self) -> np.ndarray:
        """View the buffer as (height, width, 4)."""
        return self.pixels.reshape(self.height, self.width, 4)


@dataclass
class DecodeResult:
    name: str
    image: Optional[RgbaImage] = None
    error: Optional[ExrRgbaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.image is not None

    @property
    def message(self) -> str:
        return "" if self.error is None else str(self.error)

    @property
    def kind(self) -> Optional[str]:
        return None if self.error is None else self.error.kind

    def unwrap(self) -> RgbaImage:
        if self.error is not None:
            raise self.error
        if self.image is None:
            raise CodecError(f"part {self.name!r} produced no image")
        return self.image


class PartDecoder:
    """
    Run one part through START -> HEADER_PARSED -> CHANNELS_UPGRADED ->
    DECODED -> ASSEMBLED -> DONE, or into FAILED from any step.

    `history` records every state entered, in order.
    """

    def __init__(self, header: Header, codec, data: bytes, *, layer: str = "") -> None:
        self.header = header
        self.codec = codec
        self.data = data
        self.layer = layer
        self.state = PartState.START
        self.history: List[PartState] = [PartState.START]

    def run(self) -> DecodeResult:
        try:
            image = self._run()
        except ExrRgbaError as exc:
            self._enter(PartState.FAILED)
            logger.warning("part %r failed: %s", self.header.name, exc)
            return DecodeResult(name=self.header.name, error=exc)
        return DecodeResult(name=self.header.name, image=image)

    def _enter(self, state: PartState) -> None:
        self.state = state
        self.history.append(state)

    def _run(self) -> RgbaImage:
        header = self.header
        self._enter(PartState.HEADER_PARSED)

        options = request_float_planes(header)
        self._enter(PartState.CHANNELS_UPGRADED)

        try:
            decoded = self.codec.decode_part(header, self.data, options)
        except ExrCodecError as exc:
            raise CodecError(str(exc)) from exc

        try:
            planes = PlaneSet(decoded.planes, decoded.width, decoded.height)
            self._enter(PartState.DECODED)

            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("part %r layers: %s", header.name, get_layers(header.channels))
                logger.debug("part %r channels: %s", header.name, list(header.channel_names))

            indices = select_rgba(channels_in_layer(header.channels, self.layer))
            pixels = assemble_rgba(indices, planes, decoded.width, decoded.height, layer=self.layer)
            self._enter(PartState.ASSEMBLED)
        finally:
            self.codec.release_image(decoded)

        image = RgbaImage(name=header.name, width=int(decoded.width), height=int(decoded.height), pixels=pixels)
        self._enter(PartState.DONE)
        return image


def decode_part(header: Header, codec, data: bytes, *, layer: str = "") -> DecodeResult:
    """Decode a single part; errors are reported in the result, not raised."""
    return PartDecoder(header, codec, data, layer=layer).run()
