"""
ASCII STL encoding of triangle meshes.

Facet normals are derived from the winding of each triangle,
normal = (v2 - v1) x (v3 - v1), normalised to unit length. Degenerate
triangles keep the zero vector, which the format accepts.
"""

import logging
import os

import numpy as np
import trimesh as trm

from logoextrude.mesher import Mesh, triangles_from_buffer

logger = logging.getLogger(__name__)

SOLID_NAME = "logo"


def compute_normals(triangles):
    """
    Unit facet normals of an (n, 3, 3) triangle array.

    Returns:
    numpy.ndarray: (n, 3) array; rows of zero-area triangles stay zero.
    """
    triangles = np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3)
    v1 = triangles[:, 0]
    edge1 = triangles[:, 1] - v1
    edge2 = triangles[:, 2] - v1

    normals = np.column_stack(
        [
            edge1[:, 1] * edge2[:, 2] - edge1[:, 2] * edge2[:, 1],
            edge1[:, 2] * edge2[:, 0] - edge1[:, 0] * edge2[:, 2],
            edge1[:, 0] * edge2[:, 1] - edge1[:, 1] * edge2[:, 0],
        ]
    )
    length = np.sqrt(normals[:, 0] ** 2 + normals[:, 1] ** 2 + normals[:, 2] ** 2)

    nonzero = length > 0
    normals[nonzero] /= length[nonzero, None]
    return normals


def compute_normal(v1, v2, v3):
    """Unit normal of the triangle (v1, v2, v3), or the zero vector if it has no area."""
    return compute_normals(np.array([[v1, v2, v3]], dtype=np.float64))[0]


def _as_triangles(mesh):
    if isinstance(mesh, Mesh):
        return mesh.triangles
    if isinstance(mesh, trm.Trimesh):
        return np.asarray(mesh.triangles, dtype=np.float64)
    return triangles_from_buffer(mesh)


def _facet(normal, a, b, c):
    return (
        f"  facet normal {normal[0]!r} {normal[1]!r} {normal[2]!r}\n"
        f"    outer loop\n"
        f"      vertex {a[0]!r} {a[1]!r} {a[2]!r}\n"
        f"      vertex {b[0]!r} {b[1]!r} {b[2]!r}\n"
        f"      vertex {c[0]!r} {c[1]!r} {c[2]!r}\n"
        f"    endloop\n"
        f"  endfacet\n"
    )


def serialize_stl(mesh, indices=None):
    """
    Encode a mesh as ASCII STL text.

    Parameters:
    mesh: A Mesh, a trimesh.Trimesh, an (n, 3, 3) triangle array or a vertex
          buffer. With ``indices`` given, ``mesh`` is read as a vertex buffer and
          every three indices form one triangle.
    indices: Optional index buffer.

    Returns:
    str: The text, one facet per triangle in iteration order, framed by
         ``solid logo`` and ``endsolid logo``.
    """
    if indices is not None:
        triangles = triangles_from_buffer(mesh, indices)
    else:
        triangles = _as_triangles(mesh)

    normals = compute_normals(triangles)

    # Python floats print as the shortest literal that round-trips
    chunks = [f"solid {SOLID_NAME}\n"]
    for normal, (a, b, c) in zip(normals.tolist(), triangles.tolist()):
        chunks.append(_facet(normal, a, b, c))
    chunks.append(f"endsolid {SOLID_NAME}\n")

    logger.debug("Serialized %d facets", len(normals))
    return "".join(chunks)


def write_stl(mesh, path):
    """
    Serialize a mesh and write it to ``path``, creating parent directories.

    Returns:
    str: The path written.
    """
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)

    text = serialize_stl(mesh)
    with open(path, "w", newline="\n") as file:
        file.write(text)
    return path
