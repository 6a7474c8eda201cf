import logging
from dataclasses import dataclass

import numpy as np
import trimesh as trm
from tqdm import tqdm

from logoextrude.mask import smooth_mask, threshold_mask
from logoextrude.pixels import as_pixel_array

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Mesh:
    """
    Triangle soup in world millimetres.

    ``triangles`` has shape (n, 3, 3): triangle, corner, (x, y, z) with y the
    elevation. The order of the triangles is the emission order.
    """

    triangles: np.ndarray

    def __post_init__(self):
        triangles = np.array(self.triangles, dtype=np.float64).reshape(-1, 3, 3)
        triangles.flags.writeable = False
        object.__setattr__(self, "triangles", triangles)

    @classmethod
    def from_indexed(cls, vertices, indices=None):
        return cls(triangles_from_buffer(vertices, indices))

    @property
    def triangle_count(self):
        return int(self.triangles.shape[0])

    @property
    def vertex_count(self):
        # Unindexed soup: three vertices per triangle
        return 3 * self.triangle_count

    @property
    def vertices(self):
        return self.triangles.reshape(-1, 3)

    @property
    def bounds(self):
        """(2, 3) array of the minimum and maximum corner."""
        vertices = self.vertices
        return np.array([vertices.min(axis=0), vertices.max(axis=0)])

    def to_trimesh(self):
        """
        Convert to a trimesh.Trimesh.

        Processing is disabled so that no vertex is merged and no degenerate
        face is dropped; face i of the result is triangle i of this mesh.
        """
        vertices = np.array(self.vertices)
        faces = np.arange(len(vertices)).reshape(-1, 3)
        return trm.Trimesh(vertices=vertices, faces=faces, process=False)


def triangles_from_buffer(vertices, indices=None):
    """
    Assemble triangles from a vertex buffer and an optional index buffer.

    Parameters:
    vertices: Flat sequence of coordinates (x0, y0, z0, x1, ...) or an (N, 3) array.
    indices: Optional flat sequence of vertex indices. Every three consecutive
             indices form one triangle. Without indices, every three consecutive
             vertices form one triangle.

    Returns:
    numpy.ndarray: float64 array of shape (n, 3, 3).

    Raises:
    ValueError: If the buffers cannot be split into whole triangles or an index
                is out of range.
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    if vertices.size % 3 != 0:
        raise ValueError(f"Vertex buffer length {vertices.size} is not a multiple of 3.")
    vertices = vertices.reshape(-1, 3)

    if indices is None:
        if len(vertices) % 3 != 0:
            raise ValueError(f"{len(vertices)} vertices do not form whole triangles.")
        return vertices.reshape(-1, 3, 3)

    indices = np.asarray(indices)
    if indices.size % 3 != 0:
        raise ValueError(f"Index buffer length {indices.size} is not a multiple of 3.")
    if not np.issubdtype(indices.dtype, np.integer) and indices.size:
        raise ValueError("Index buffer must hold integers.")
    indices = indices.reshape(-1).astype(np.int64)
    if indices.size and (indices.min() < 0 or indices.max() >= len(vertices)):
        raise ValueError("Index buffer refers to vertices outside the vertex buffer.")
    return vertices[indices].reshape(-1, 3, 3)


def _points(x, elevation, z):
    """Stack planar x, elevation and planar z (scalars or arrays) into (n, 3)."""
    return np.stack(np.broadcast_arrays(x, elevation, z), axis=-1).astype(np.float64)


def _triangles(a, b, c):
    return np.stack([a, b, c], axis=1)


def _quad(a, b, c, d, e, f):
    """Two triangles (a, b, c) and (d, e, f) given as single points."""
    return np.array([[a, b, c], [d, e, f]], dtype=np.float64)


def _row_triangles(mask, heights, y, xs, ys):
    """
    Triangles of all cells in grid row y, in cell order.

    Each cell contributes its two top triangles, then a left wall where the
    mask changes from the cell to its left neighbour (always in column 0),
    then a front wall where it changes from the cell above (always in row 0).
    """
    x0 = xs[:-1]
    x1 = xs[1:]
    y0 = ys[y]
    y1 = ys[y + 1]

    h00 = heights[y, :-1]
    h10 = heights[y, 1:]
    h01 = heights[y + 1, :-1]
    h11 = heights[y + 1, 1:]

    top_left = _points(x0, h00, y0)
    top_right = _points(x1, h10, y0)
    bottom_left = _points(x0, h01, y1)
    bottom_right = _points(x1, h11, y1)
    ground_left = _points(x0, 0.0, y0)
    ground_right = _points(x1, 0.0, y0)
    ground_bottom_left = _points(x0, 0.0, y1)

    block = np.stack(
        [
            # top surface, split from top-right to bottom-left
            _triangles(top_left, top_right, bottom_left),
            _triangles(top_right, bottom_right, bottom_left),
            # left wall
            _triangles(ground_left, top_left, ground_bottom_left),
            _triangles(top_left, bottom_left, ground_bottom_left),
            # front wall
            _triangles(ground_left, ground_right, top_left),
            _triangles(ground_right, top_right, top_left),
        ],
        axis=1,
    )

    cells = len(x0)
    row = mask[y, :cells]

    left = np.ones(cells, dtype=bool)
    left[1:] = row[1:] != row[:-1]

    if y == 0:
        front = np.ones(cells, dtype=bool)
    else:
        front = row != mask[y - 1, :cells]

    keep = np.column_stack([np.ones(cells, dtype=bool)] * 2 + [left] * 2 + [front] * 2)
    return block[keep]


def build_heightmap_mesh(mask, extrude_height, base_height, scale, progress=False):
    """
    Extrude a binary mask into a triangle soup.

    The mask is centred on the origin of the XZ plane and its longer side spans
    ``scale`` millimetres. Raised pixels (1) sit at ``extrude_height`` and flat
    pixels (0) at ``base_height``; elevation is the Y coordinate.

    Per grid cell the top surface is two triangles. Walls down to Y = 0 are
    added on the left and front side of a cell only where the mask changes or
    at the left/front image border. After the grid, a bottom plate and full
    height right and back walls close the model on those sides.

    Parameters:
    mask (numpy.ndarray): 2D array (height, width) with values in {0, 1}.
    extrude_height (float): Elevation of raised pixels.
    base_height (float): Elevation of flat pixels.
    scale (float): Length of the longer planar side in mm.
    progress (bool, optional): Show a tqdm progress bar over the grid rows.

    Returns:
    Mesh: The generated triangle soup.
    """
    mask = np.asarray(mask)
    if mask.ndim != 2 or mask.size == 0:
        raise ValueError(f"Mask must be a non-empty 2D array, got shape {mask.shape}.")
    height, width = mask.shape

    scale_x = scale / max(width, height)
    scale_y = scale / max(width, height)
    offset_x = -width * scale_x / 2
    offset_y = -height * scale_y / 2

    heights = np.where(mask != 0, float(extrude_height), float(base_height))
    xs = np.arange(width) * scale_x + offset_x
    ys = np.arange(height) * scale_y + offset_y

    parts = []
    rows = range(height - 1)
    if progress:
        rows = tqdm(rows, total=height - 1, desc="Extruding rows")
    for y in rows:
        parts.append(_row_triangles(mask, heights, y, xs, ys))

    w = width * scale_x
    h = height * scale_y
    top = float(extrude_height)

    # Bottom plate
    parts.append(
        _quad(
            (offset_x, 0.0, offset_y),
            (offset_x + w, 0.0, offset_y),
            (offset_x, 0.0, offset_y + h),
            (offset_x + w, 0.0, offset_y),
            (offset_x + w, 0.0, offset_y + h),
            (offset_x, 0.0, offset_y + h),
        )
    )
    # Right wall
    parts.append(
        _quad(
            (offset_x + w, 0.0, offset_y),
            (offset_x + w, 0.0, offset_y + h),
            (offset_x + w, top, offset_y),
            (offset_x + w, 0.0, offset_y + h),
            (offset_x + w, top, offset_y + h),
            (offset_x + w, top, offset_y),
        )
    )
    # Back wall
    parts.append(
        _quad(
            (offset_x, 0.0, offset_y + h),
            (offset_x + w, 0.0, offset_y + h),
            (offset_x, top, offset_y + h),
            (offset_x + w, 0.0, offset_y + h),
            (offset_x + w, top, offset_y + h),
            (offset_x, top, offset_y + h),
        )
    )

    mesh = Mesh(np.concatenate(parts, axis=0))
    logger.debug(
        "Built %d triangles from a %dx%d mask", mesh.triangle_count, width, height
    )
    return mesh


def generate_mesh(pixels, width, height, settings, progress=False):
    """
    Run the full image-to-mesh pipeline.

    Parameters:
    pixels: RGBA8 buffer of length width * height * 4 (see ``as_pixel_array``).
    width (int): Image width in pixels.
    height (int): Image height in pixels.
    settings (Settings): Parameters of the run.
    progress (bool, optional): Show a progress bar while building the mesh.

    Returns:
    Mesh: The extruded mesh.

    Raises:
    ValueError: If the pixel buffer does not match width and height.
    """
    image = as_pixel_array(pixels, width, height)
    mask = threshold_mask(image, settings.threshold, invert=settings.invert)
    mask = smooth_mask(mask, settings.smoothing)
    return build_heightmap_mesh(
        mask,
        settings.extrude_height,
        settings.base_height,
        settings.scale,
        progress=progress,
    )
