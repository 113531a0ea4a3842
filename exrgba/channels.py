"""
exrgba.channels

Layer catalog and R/G/B/A channel selection for one part.

A layer is the prefix of a channel name before its last ".", so
"diffuse.R" belongs to layer "diffuse" and "R" to the root layer "".
Names like ".R" or "R." have no usable prefix and stay in the root layer
verbatim.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .codec import ChannelInfo

logger = logging.getLogger(__name__)

# Only this many channels of a layer are looked at when picking R/G/B/A.
MAX_SELECTED_CHANNELS = 4

LAYER_SEPARATOR = "."

__all__ = [
    "MAX_SELECTED_CHANNELS",
    "LayerChannel",
    "RgbaIndices",
    "split_channel_name",
    "get_layers",
    "channels_in_layer",
    "select_rgba",
]

ChannelLike = Union[ChannelInfo, str]


@dataclass(frozen=True)
class LayerChannel:
    name: str   # short name, relative to its layer
    index: int  # absolute index into the part's channel list


@dataclass(frozen=True)
class RgbaIndices:
    r: Optional[int] = None
    g: Optional[int] = None
    b: Optional[int] = None
    a: Optional[int] = None

    def missing_color(self) -> Tuple[str, ...]:
        return tuple(
            letter for letter, idx in (("R", self.r), ("G", self.g), ("B", self.b)) if idx is None
        )

    @property
    def has_alpha(self) -> bool:
        return self.a is not None


def _name_of(channel: ChannelLike) -> str:
    return channel if isinstance(channel, str) else channel.name


def split_channel_name(name: str) -> Tuple[str, str]:
    """
    Split a channel name into (layer, short_name).

    >>> split_channel_name("diffuse.R")
    ('diffuse', 'R')
    >>> split_channel_name("R")
    ('', 'R')
    """
    pos = name.rfind(LAYER_SEPARATOR)
    if pos <= 0 or pos + 1 >= len(name):
        return "", name
    return name[:pos], name[pos + 1:]


def get_layers(channels: Iterable[ChannelLike]) -> List[str]:
    """Distinct layer names in first-seen order. The root layer is not listed."""
    layers: List[str] = []
    for ch in channels:
        layer, _ = split_channel_name(_name_of(ch))
        if layer and layer not in layers:
            layers.append(layer)
    return layers


def channels_in_layer(channels: Iterable[ChannelLike], layer: str = "") -> List[LayerChannel]:
    """
    Channels whose layer is exactly `layer`, in channel-list order.

    When the root layer is requested but every channel is prefixed (e.g.
    "beauty.R", "beauty.G", "beauty.B"), all channels are returned with their
    prefixes stripped, so such files still decode by default.
    An unknown named layer yields an empty list.
    """
    split = [split_channel_name(_name_of(ch)) for ch in channels]
    out = [
        LayerChannel(name=short, index=index)
        for index, (ch_layer, short) in enumerate(split)
        if ch_layer == layer
    ]
    if not out and not layer:
        out = [LayerChannel(name=short, index=index) for index, (_, short) in enumerate(split)]
    return out


def select_rgba(layer_channels: Sequence[LayerChannel]) -> RgbaIndices:
    """
    Pick R, G, B and A among the first MAX_SELECTED_CHANNELS entries.

    Matching is by exact short name. If a name repeats, the first one wins;
    anything that is not R, G, B or A is ignored.
    """
    found = {}
    for ch in list(layer_channels)[:MAX_SELECTED_CHANNELS]:
        if ch.name in ("R", "G", "B", "A") and ch.name not in found:
            found[ch.name] = ch.index

    if len(layer_channels) > MAX_SELECTED_CHANNELS:
        logger.debug(
            "ignoring %d channel(s) beyond the first %d",
            len(layer_channels) - MAX_SELECTED_CHANNELS,
            MAX_SELECTED_CHANNELS,
        )

    return RgbaIndices(r=found.get("R"), g=found.get("G"), b=found.get("B"), a=found.get("A"))
