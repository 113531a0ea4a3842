#!/usr/bin/env python3
"""
Write a small two-part EXR (one part without alpha, one stored as half
floats), then decode it back to RGBA and print what each part became.
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
import OpenEXR

import exrgba


def _make_multipart(path: Path, size: int = 64) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        return
    y, x = np.mgrid[0:size, 0:size].astype(np.float32) / float(size - 1)
    header = {"compression": OpenEXR.ZIP_COMPRESSION, "type": OpenEXR.scanlineimage}

    gradient = {"R": x, "G": y, "B": np.zeros_like(x)}
    checker = ((np.floor(x * 8) + np.floor(y * 8)) % 2).astype(np.float16)
    matte = {"R": checker, "G": checker, "B": checker, "A": (1.0 - x).astype(np.float16)}

    parts = [
        OpenEXR.Part(dict(header), {k: OpenEXR.Channel(v) for k, v in gradient.items()}, "gradient"),
        OpenEXR.Part(dict(header), {k: OpenEXR.Channel(v) for k, v in matte.items()}, "matte"),
    ]
    OpenEXR.File(parts).write(str(path))


def main() -> None:
    out_dir = Path(__file__).parent / "out"
    exr_path = out_dir / "two_parts.exr"
    _make_multipart(exr_path)

    data = exr_path.read_bytes()
    loader = exrgba.ExrLoader(data)

    print("=== decode_multipart ===")
    print(f"file      : {exr_path} ({len(data)} bytes)")
    print(f"ok        : {loader.ok} {loader.error}")
    for name in loader.part_names():
        img = loader.image(name)
        if img is None:
            print(f"part {name!r:12}: failed")
            continue
        rgba = img.as_array()
        print(
            f"part {name!r:12}: {img.width}x{img.height}  "
            f"mean RGBA = {np.round(rgba.reshape(-1, 4).mean(axis=0), 3).tolist()}"
        )

    matte = exrgba.decode_container_part(data, "matte")
    print(f"matte alpha range : {float(matte.pixels[3::4].min()):.3f} .. {float(matte.pixels[3::4].max()):.3f}")


if __name__ == "__main__":
    main()
