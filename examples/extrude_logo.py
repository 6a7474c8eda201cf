#!/usr/bin/env python3
"""
Example: extrude a decoded RGBA image into an STL file.

The image is read from a NumPy file holding an (H, W, 4) or (H, W, 3) uint8
array, for instance one written with ``np.save`` after decoding a PNG in any
imaging library. Dark pixels are raised unless --invert is given.

Usage:
  python examples/extrude_logo.py logo.npy --extrude-height 4 --smoothing 1.5
  python examples/extrude_logo.py logo.npy --settings settings.json
"""

import argparse
import logging

import numpy as np

from logoextrude.geometry import LogoModel
from logoextrude.logging_config import setup_logging
from logoextrude.settings import DEFAULT_FILENAME, Settings


def parse_args():
    parser = argparse.ArgumentParser(description="Extrude an RGBA image into an STL.")
    parser.add_argument("image", help="Path to a .npy array of shape (H, W, 4) or (H, W, 3)")
    parser.add_argument("--settings", help="JSON file with extrusion settings")
    parser.add_argument("--threshold", type=float)
    parser.add_argument("--extrude-height", type=float)
    parser.add_argument("--base-height", type=float)
    parser.add_argument("--scale", type=float)
    parser.add_argument("--smoothing", type=float)
    parser.add_argument("--invert", action="store_true", default=None)
    parser.add_argument("--output-dir", default="output")
    parser.add_argument("--output", default=DEFAULT_FILENAME, help="STL file name")
    parser.add_argument("--progress", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


def main():
    args = parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    settings = Settings.from_json(args.settings) if args.settings else Settings()
    overrides = {
        "threshold": args.threshold,
        "extrude_height": args.extrude_height,
        "base_height": args.base_height,
        "scale": args.scale,
        "smoothing": args.smoothing,
        "invert": args.invert,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}

    image = np.load(args.image)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise SystemExit(f"Expected an (H, W, 3|4) array, got shape {image.shape}.")
    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        image = np.concatenate([image.astype(np.uint8), alpha], axis=2)

    model = LogoModel(settings, output_dir=args.output_dir, progress=args.progress, **overrides)
    model.load_pixels(image, image.shape[1], image.shape[0])
    model.generate_mesh()
    model.save_stl(args.output)

    stats = model.stats()
    print(f"Triangles:  {stats['triangles']:,}")
    print(f"Vertices:   {stats['vertices']:,}")
    print("Dimensions: {} x {} x {} mm".format(*stats["dimensions"]))
    print("Resolution: {} x {} px".format(*stats["resolution"]))


if __name__ == "__main__":
    main()
