import os
import logging

import numpy as np

from logoextrude.mesher import generate_mesh
from logoextrude.pixels import (
    MAX_SIZE,
    as_pixel_array,
    composite_on_white,
    fit_resolution,
    resample_nearest,
)
from logoextrude.settings import DEFAULT_FILENAME, Settings
from logoextrude.stl import serialize_stl, write_stl

logger = logging.getLogger(__name__)


class LogoModel:
    def __init__(self, settings=None, output_dir="output", progress=False, **kwargs):
        """
        Initialize the LogoModel class with the specified parameters.

        Parameters:
        settings (Settings, optional): Extrusion settings. Defaults to ``Settings()``.
        output_dir (str, optional): Directory where STL files will be stored. Default is 'output'.
        progress (bool, optional): Show a progress bar while building the mesh.
        **kwargs: Overrides of individual settings (e.g. ``extrude_height=3``),
                  applied on top of ``settings``.
        """
        if settings is None:
            settings = Settings()
        if kwargs:
            settings = settings.updated(**kwargs)

        self.settings = settings
        self.output_dir = output_dir
        self.progress = progress

        # Ensure output directory exists
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        self.pixels = None
        self.width = 0
        self.height = 0

        # Store the generated mesh as an attribute
        self.mesh = None

    @property
    def name_hash(self):
        return self.settings.name_hash

    def load_pixels(self, pixels, width, height, composite=True, max_size=MAX_SIZE):
        """
        Store a decoded RGBA image for extrusion.

        The buffer is validated and copied. Like the browser front end, the image
        is flattened onto white and shrunk so that its longer side is at most
        ``max_size`` pixels.

        Parameters:
        pixels: RGBA8 buffer of length width * height * 4.
        width (int): Image width in pixels.
        height (int): Image height in pixels.
        composite (bool, optional): Flatten transparency onto white. Default is True.
        max_size (int, optional): Resolution cap; None keeps the full size.
        """
        image = as_pixel_array(pixels, width, height)
        if composite:
            image = composite_on_white(image)

        if max_size is not None:
            new_width, new_height = fit_resolution(width, height, max_size)
            if (new_width, new_height) != (width, height):
                logger.info(
                    "Reducing image from %dx%d to %dx%d", width, height, new_width, new_height
                )
                image = resample_nearest(image, new_width, new_height)
                width, height = new_width, new_height

        self.pixels = np.array(image, dtype=np.uint8)
        self.width = width
        self.height = height
        self.mesh = None

    def generate_mesh(self):
        """
        Extrude the loaded image into a mesh.

        The mesh attribute is only replaced once the whole mesh is built.
        """
        if self.pixels is None:
            raise RuntimeError("No image loaded. Load one first using 'load_pixels'.")

        logger.info("Generating mesh for %dx%d image...", self.width, self.height)
        mesh = generate_mesh(
            self.pixels, self.width, self.height, self.settings, progress=self.progress
        )
        self.mesh = mesh
        logger.info("Mesh generation complete. Triangles: %d", mesh.triangle_count)
        return mesh

    def get_mesh(self):
        """
        Return the generated mesh.

        Returns:
        Mesh: The mesh, or None if nothing has been generated yet.
        """
        if self.mesh is None:
            logger.warning("No mesh available. Generate it first using 'generate_mesh'.")
        return self.mesh

    def _require_mesh(self):
        if self.mesh is None:
            raise RuntimeError("No mesh available. Generate it first using 'generate_mesh'.")
        return self.mesh

    def to_stl(self):
        """Return the mesh as ASCII STL text."""
        return serialize_stl(self._require_mesh())

    def save_stl(self, filename=None):
        """
        Save the mesh as an ASCII STL file in the output directory.

        Parameters:
        filename (str, optional): Name of the file. Default is 'logo-extruded.stl'.

        Returns:
        str: Path of the written file.
        """
        mesh = self._require_mesh()
        file_path = os.path.join(self.output_dir, filename or DEFAULT_FILENAME)
        write_stl(mesh, file_path)
        logger.info("STL saved to %s", file_path)
        return file_path

    def to_trimesh(self):
        return self._require_mesh().to_trimesh()

    def stats(self):
        """
        Summary of the generated model.

        Returns:
        dict: triangle and vertex counts, nominal dimensions in mm
              (scale, scale, extrude height) and the image resolution in pixels.
        """
        mesh = self._require_mesh()
        return {
            "triangles": mesh.triangle_count,
            "vertices": mesh.vertex_count,
            "dimensions": (
                self.settings.scale,
                self.settings.scale,
                self.settings.extrude_height,
            ),
            "resolution": (self.width, self.height),
        }
