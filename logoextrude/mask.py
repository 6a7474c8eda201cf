import logging
import math

import numpy as np
from scipy.ndimage import convolve

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def threshold_mask(pixels, threshold, invert=False):
    """
    Convert an RGBA image into a binary occupancy mask.

    The luminance of each pixel is weighted by its alpha,
    L = (0.299 r + 0.587 g + 0.114 b) * (a / 255), and the pixel counts as
    white when L > threshold * 255. White pixels are flat (0) and everything
    else is raised (1); ``invert`` swaps the two.

    Parameters:
    pixels (numpy.ndarray): uint8 array of shape (H, W, 4).
    threshold (float): Cutoff as a fraction of full brightness.
    invert (bool): Raise white pixels instead of dark ones.

    Returns:
    numpy.ndarray: uint8 mask of shape (H, W) with values in {0, 1}.
    """
    pixels = np.asarray(pixels)
    r = pixels[..., 0].astype(np.float64)
    g = pixels[..., 1].astype(np.float64)
    b = pixels[..., 2].astype(np.float64)
    a = pixels[..., 3].astype(np.float64)

    wr, wg, wb = LUMA_WEIGHTS
    luminance = (wr * r + wg * g + wb * b) * (a / 255)
    is_white = luminance > threshold * 255

    mask = is_white if invert else ~is_white
    mask = mask.astype(np.uint8)
    logger.debug("Thresholded %s mask, %d raised pixels", mask.shape, int(mask.sum()))
    return mask


def _window_radius(smoothing):
    return int(math.ceil(smoothing))


def smooth_mask(mask, smoothing):
    """
    Apply a square majority filter to a binary mask.

    Every output pixel becomes 1 when more than half of the in-bounds pixels in
    the (2r + 1) x (2r + 1) window around it are 1, with r = ceil(smoothing).
    Pixels outside the image are left out of both the count and the sum. All
    outputs are computed from the input mask, never from partially filtered
    values.

    With ``smoothing <= 0`` the input mask is returned as is.

    Parameters:
    mask (numpy.ndarray): 2D array with values in {0, 1}.
    smoothing (float): Radius hint in pixels.

    Returns:
    numpy.ndarray: uint8 mask of the same shape.
    """
    if smoothing <= 0:
        return mask

    radius = _window_radius(smoothing)
    kernel = np.ones((2 * radius + 1, 2 * radius + 1), dtype=np.int64)

    # Zero padding leaves out-of-bounds cells out of the sum; the count of
    # in-bounds cells comes from the same convolution over ones.
    values = np.asarray(mask, dtype=np.int64)
    sums = convolve(values, kernel, mode="constant", cval=0)
    counts = convolve(np.ones_like(values), kernel, mode="constant", cval=0)

    # sum / count > 0.5 in exact integer arithmetic
    smoothed = (2 * sums > counts).astype(np.uint8)
    logger.debug(
        "Smoothed %s mask with radius %d, %d raised pixels",
        smoothed.shape,
        radius,
        int(smoothed.sum()),
    )
    return smoothed


def smooth_mask_naive(mask, smoothing):
    """
    Reference majority filter that walks every window explicitly.

    Produces the same result as ``smooth_mask`` at O(W * H * r^2) cost.
    """
    if smoothing <= 0:
        return mask

    mask = np.asarray(mask)
    height, width = mask.shape
    radius = _window_radius(smoothing)
    smoothed = np.zeros((height, width), dtype=np.uint8)

    for y in range(height):
        for x in range(width):
            total = 0
            count = 0
            for dy in range(-radius, radius + 1):
                for dx in range(-radius, radius + 1):
                    nx = x + dx
                    ny = y + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        total += int(mask[ny, nx])
                        count += 1
            smoothed[y, x] = 1 if total / count > 0.5 else 0

    return smoothed
