"""
exrgba.container

Whole-container decoding for single-part and multipart EXR files.

Failures of the container itself (bad preamble, unparsable headers, unknown
part name) abort the request by raising. Failures of one part (codec error,
missing colour channel) are collected per part when decoding everything and
leave the other parts alone.

Headers are always handed back to the codec before returning, whichever way
the decode ends.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .channels import get_layers
from .codec import ExrCodecError, ExrVersion, Header, OpenExrCodec
from .errors import ContainerError, InvalidContainer, PartNotFound
from .part import DecodeResult, RgbaImage, decode_part

logger = logging.getLogger(__name__)

__all__ = ["ContainerResult", "decode_container", "decode_container_part", "read_headers"]


@dataclass
class ContainerResult:
    multipart: bool = False
    part_names: List[str] = field(default_factory=list)
    images: Dict[str, RgbaImage] = field(default_factory=dict)
    failures: Dict[str, DecodeResult] = field(default_factory=dict)
    layers: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def _open_container(data: bytes, codec) -> Tuple[ExrVersion, List[Header]]:
    try:
        version = codec.probe_version(data)
    except ExrCodecError as exc:
        logger.error("Invalid EXR file: %s", exc)
        raise InvalidContainer(str(exc)) from exc

    if version.non_image:
        raise InvalidContainer("deep (non-image) EXR data is not supported")

    try:
        headers = list(codec.parse_headers(data, version))
    except ExrCodecError as exc:
        logger.error("Parse EXR err: %s", exc)
        raise ContainerError(str(exc)) from exc

    logger.debug(
        "%s container with %d part(s): %s",
        "multipart" if version.multipart else "single-part",
        len(headers),
        [h.name for h in headers],
    )
    return version, headers


def _release_headers(codec, headers: List[Header]) -> None:
    for header in headers:
        codec.release_header(header)


def read_headers(data: bytes, *, codec=None) -> Tuple[ExrVersion, List[Header]]:
    """
    Probe and parse a container without decoding pixels.

    Headers are released on the codec before returning; the returned
    objects are plain read-only descriptions.
    """
    if codec is None:
        codec = OpenExrCodec()
    version, headers = _open_container(data, codec)
    _release_headers(codec, headers)
    return version, headers


def decode_container(data: bytes, *, codec=None, layer: str = "") -> ContainerResult:
    """
    Decode every part of a container into RGBA images.

    Parameters
    ----------
    data : bytes
        The complete EXR container.
    codec : optional
        Codec to use; defaults to a fresh OpenExrCodec.
    layer : str, optional
        Layer to take R/G/B/A from in every part; "" is the root layer.

    Returns
    -------
    ContainerResult
        Images keyed by part name. If two parts share a name the later one
        wins. Parts that failed are listed in `failures`.

    Raises
    ------
    InvalidContainer, ContainerError
        If the container cannot be probed or its headers cannot be parsed.
    """
    if codec is None:
        codec = OpenExrCodec()

    version, headers = _open_container(data, codec)
    result = ContainerResult(multipart=version.multipart)
    try:
        for header in headers:
            result.part_names.append(header.name)
            result.layers[header.name] = get_layers(header.channels)

            part = decode_part(header, codec, data, layer=layer)
            if part.ok:
                result.images[header.name] = part.image  # type: ignore[assignment]
                result.failures.pop(header.name, None)
            else:
                result.failures[header.name] = part
                result.images.pop(header.name, None)
    finally:
        _release_headers(codec, headers)
    return result


def decode_container_part(
    data: bytes,
    part_name: str,
    *,
    codec=None,
    layer: str = "",
) -> RgbaImage:
    """
    Decode only the part whose name equals `part_name` exactly.

    Only the selected part goes through channel selection and assembly.
    With OpenExrCodec the pixel data of every part is still decompressed
    while the headers are parsed, since the OpenEXR bindings load a file
    in one pass. A corrupt pixel chunk in any part therefore surfaces as a
    ContainerError, not as a CodecError of that part.

    Raises
    ------
    PartNotFound
        If no header carries that name; nothing is decoded in that case.
    InvalidContainer, ContainerError, CodecError, MissingColorChannel
        As for decode_container, but part errors are raised here.
    """
    if codec is None:
        codec = OpenExrCodec()

    _, headers = _open_container(data, codec)
    try:
        selected = next((h for h in headers if h.name == part_name), None)
        if selected is None:
            logger.error("part %r not found among %s", part_name, [h.name for h in headers])
            raise PartNotFound(part_name)
        return decode_part(selected, codec, data, layer=layer).unwrap()
    finally:
        _release_headers(codec, headers)
