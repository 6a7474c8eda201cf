"""
Helpers for already-decoded RGBA8 pixel buffers.

The core pipeline works on a flat RGBA buffer plus its width and height. The
functions here validate such buffers and perform the preparation the browser
front end applies before handing pixels to the pipeline: flattening
transparency onto a white canvas and capping the longer side of the image.
"""

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

# Longest image side fed to the pipeline by the reference front end
MAX_SIZE = 256


def _check_dimension(name, value):
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValueError(f"{name} must be an integer, got {value!r}.")
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}.")
    return int(value)


def as_pixel_array(pixels, width, height):
    """
    Validate a pixel buffer and view it as an (height, width, 4) uint8 array.

    Parameters:
    pixels: Flat RGBA buffer (bytes, bytearray, sequence or numpy array) of length
            width * height * 4, or an array already shaped (height, width, 4).
    width (int): Image width in pixels.
    height (int): Image height in pixels.

    Returns:
    numpy.ndarray: Read-only uint8 array of shape (height, width, 4).

    Raises:
    ValueError: If the dimensions are not positive integers or the buffer length
                does not match them.
    """
    width = _check_dimension("width", width)
    height = _check_dimension("height", height)

    if isinstance(pixels, (bytes, bytearray, memoryview)):
        array = np.frombuffer(pixels, dtype=np.uint8)
    else:
        array = np.asarray(pixels)
        if array.dtype != np.uint8:
            numeric = np.issubdtype(array.dtype, np.integer) or np.issubdtype(array.dtype, np.floating)
            if not numeric:
                raise ValueError(f"Pixel buffer of dtype {array.dtype} is not numeric.")
            if array.size and not np.all(np.isfinite(array)):
                raise ValueError("Pixel values must be finite.")
            if array.size and not np.all(array == np.round(array)):
                raise ValueError("Pixel values must be whole numbers.")
            if array.size and (array.min() < 0 or array.max() > 255):
                raise ValueError("Pixel values must lie in [0, 255].")
            array = array.astype(np.uint8)

    expected = width * height * 4
    if array.size != expected:
        raise ValueError(
            f"Pixel buffer holds {array.size} values, expected {expected} "
            f"for a {width}x{height} RGBA image."
        )
    if array.ndim not in (1, 3) or (array.ndim == 3 and array.shape != (height, width, 4)):
        raise ValueError(
            f"Pixel array of shape {array.shape} does not match {width}x{height} RGBA."
        )

    # Never hand a writable alias of the caller's buffer to the pipeline
    view = array.reshape(height, width, 4).view()
    view.flags.writeable = False
    return view


def composite_on_white(pixels):
    """
    Flatten an RGBA image onto an opaque white background.

    Transparent regions become white, so they read as background after
    thresholding. The returned array has alpha 255 everywhere.
    """
    pixels = np.asarray(pixels)
    rgb = pixels[..., :3].astype(np.float64)
    alpha = pixels[..., 3:4].astype(np.float64) / 255.0

    out = np.empty(pixels.shape, dtype=np.uint8)
    out[..., :3] = np.rint(rgb * alpha + 255.0 * (1.0 - alpha)).astype(np.uint8)
    out[..., 3] = 255
    return out


def fit_resolution(width, height, max_size=MAX_SIZE):
    """
    Shrink (width, height) so neither side exceeds max_size, keeping the aspect ratio.

    Sizes already within the cap are returned unchanged. Each side is floored
    after scaling and kept at least 1 pixel.
    """
    width = _check_dimension("width", width)
    height = _check_dimension("height", height)
    max_size = _check_dimension("max_size", max_size)

    if width <= max_size and height <= max_size:
        return width, height

    ratio = min(max_size / width, max_size / height)
    return max(1, math.floor(width * ratio)), max(1, math.floor(height * ratio))


def resample_nearest(pixels, width, height):
    """
    Resample an (H, W, C) image to (height, width, C) by nearest neighbour.

    Each output pixel samples the source pixel containing its centre.
    """
    pixels = np.asarray(pixels)
    width = _check_dimension("width", width)
    height = _check_dimension("height", height)
    src_h, src_w = pixels.shape[:2]

    if (src_h, src_w) == (height, width):
        return pixels.copy()

    rows = np.minimum(((np.arange(height) + 0.5) * src_h / height).astype(int), src_h - 1)
    cols = np.minimum(((np.arange(width) + 0.5) * src_w / width).astype(int), src_w - 1)
    logger.debug("Resampling %dx%d image to %dx%d", src_w, src_h, width, height)
    return pixels[rows[:, None], cols[None, :]]
