from logoextrude.geometry import LogoModel
from logoextrude.mesher import Mesh, build_heightmap_mesh, generate_mesh
from logoextrude.settings import Settings
from logoextrude.stl import serialize_stl, write_stl
