"""Host-side triangle mesh data and transform helpers.

Meshes are assembled in NumPy before they are uploaded to the scene buffers.
This module holds the MeshData container, a few procedural shapes used by the
demo scene and the tests, and the matrix helpers that compute a mesh's
world-space bounding box and normal matrix from its model transform.

Example:
    >>> from palettetrace.geometry.mesh import make_box, translation
    >>> box = make_box((1.0, 2.0, 1.0))
    >>> box_min, box_max = compute_aabb(box, translation((0.0, 1.0, 0.0)))
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

FloatArray = npt.NDArray[np.float32]
IntArray = npt.NDArray[np.int32]


@dataclass
class MeshData:
    """Vertex and index data of one triangle mesh.

    Attributes:
        vertices: Vertex positions, shape (N, 3).
        indices: Triangle vertex indices, shape (M,), M a multiple of 3.
            Counter-clockwise triangles (seen from outside) face outward.
        normals: Optional per-vertex normals, shape (N, 3).
    """

    vertices: FloatArray
    indices: IntArray
    normals: FloatArray | None = None

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=np.float32).reshape(-1, 3)
        self.indices = np.asarray(self.indices, dtype=np.int32).reshape(-1)
        if self.normals is not None:
            self.normals = np.asarray(self.normals, dtype=np.float32).reshape(-1, 3)
        self.validate()

    @property
    def num_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def num_indices(self) -> int:
        return int(self.indices.shape[0])

    @property
    def num_triangles(self) -> int:
        return self.num_indices // 3

    def validate(self) -> None:
        """Check the mesh invariants.

        Raises:
            ValueError: If the index count is not a multiple of 3, an index is
                out of range, or the normals do not match the vertices.
        """
        if self.num_indices == 0:
            raise ValueError("Mesh has no indices")
        if self.num_indices % 3 != 0:
            raise ValueError(
                f"Mesh index count {self.num_indices} is not a multiple of 3"
            )
        if self.indices.min() < 0 or self.indices.max() >= self.num_vertices:
            raise ValueError(
                f"Mesh indices must be in [0, {self.num_vertices}), "
                f"got range [{self.indices.min()}, {self.indices.max()}]"
            )
        if self.normals is not None and self.normals.shape != self.vertices.shape:
            raise ValueError(
                f"Mesh normals shape {self.normals.shape} does not match "
                f"vertices shape {self.vertices.shape}"
            )


# =============================================================================
# Transforms
# =============================================================================


def identity() -> FloatArray:
    return np.eye(4, dtype=np.float32)


def translation(offset: tuple[float, float, float]) -> FloatArray:
    """Build a 4x4 translation matrix."""
    m = identity()
    m[:3, 3] = offset
    return m


def scaling(factors: tuple[float, float, float]) -> FloatArray:
    """Build a 4x4 non-uniform scale matrix."""
    m = identity()
    m[0, 0], m[1, 1], m[2, 2] = factors
    return m


def rotation_y(angle: float) -> FloatArray:
    """Build a 4x4 rotation about the world Y axis (radians)."""
    c, s = np.cos(angle), np.sin(angle)
    m = identity()
    m[0, 0], m[0, 2] = c, s
    m[2, 0], m[2, 2] = -s, c
    return m


def compose(*matrices: FloatArray) -> FloatArray:
    """Multiply transforms left to right (the last one is applied first)."""
    result = identity()
    for matrix in matrices:
        result = result @ np.asarray(matrix, dtype=np.float32)
    return result.astype(np.float32)


def transform_points(matrix: FloatArray, points: FloatArray) -> FloatArray:
    """Apply a 4x4 affine transform to an (N, 3) array of points."""
    homogeneous = np.hstack([points, np.ones((points.shape[0], 1), dtype=np.float32)])
    return (homogeneous @ np.asarray(matrix, dtype=np.float32).T)[:, :3]


def normal_matrix(matrix: FloatArray) -> FloatArray:
    """Inverse-transpose of the upper 3x3 block, used to transform normals.

    Raises:
        ValueError: If the transform is singular.
    """
    linear = np.asarray(matrix, dtype=np.float64)[:3, :3]
    if abs(np.linalg.det(linear)) < 1e-12:
        raise ValueError("Mesh transform is singular")
    return np.linalg.inv(linear).T.astype(np.float32)


def compute_aabb(mesh: MeshData, matrix: FloatArray) -> tuple[FloatArray, FloatArray]:
    """Bounding box of the transformed vertices referenced by the indices.

    Returns:
        Tuple (box_min, box_max), each of shape (3,).
    """
    used = mesh.vertices[np.unique(mesh.indices)]
    world = transform_points(matrix, used)
    return world.min(axis=0).astype(np.float32), world.max(axis=0).astype(np.float32)


# =============================================================================
# Procedural Shapes
# =============================================================================


def make_plane(size: tuple[float, float] = (1.0, 1.0)) -> MeshData:
    """A horizontal rectangle centered at the origin, facing +Y."""
    hx, hz = size[0] / 2.0, size[1] / 2.0
    vertices = [
        (-hx, 0.0, -hz),
        (hx, 0.0, -hz),
        (hx, 0.0, hz),
        (-hx, 0.0, hz),
    ]
    indices = [0, 2, 1, 0, 3, 2]
    normals = [(0.0, 1.0, 0.0)] * 4
    return MeshData(np.array(vertices), np.array(indices), np.array(normals))


def make_box(size: tuple[float, float, float] = (1.0, 1.0, 1.0)) -> MeshData:
    """An axis-aligned box resting on y = 0, centered in x and z.

    Each face has its own four vertices so face normals stay flat.
    """
    hx, hy, hz = size[0] / 2.0, size[1], size[2] / 2.0
    faces = [
        # (normal, four corners counter-clockwise seen from outside)
        ((1, 0, 0), [(hx, 0, hz), (hx, 0, -hz), (hx, hy, -hz), (hx, hy, hz)]),
        ((-1, 0, 0), [(-hx, 0, -hz), (-hx, 0, hz), (-hx, hy, hz), (-hx, hy, -hz)]),
        ((0, 1, 0), [(-hx, hy, hz), (hx, hy, hz), (hx, hy, -hz), (-hx, hy, -hz)]),
        ((0, -1, 0), [(-hx, 0, -hz), (hx, 0, -hz), (hx, 0, hz), (-hx, 0, hz)]),
        ((0, 0, 1), [(-hx, 0, hz), (hx, 0, hz), (hx, hy, hz), (-hx, hy, hz)]),
        ((0, 0, -1), [(hx, 0, -hz), (-hx, 0, -hz), (-hx, hy, -hz), (hx, hy, -hz)]),
    ]
    vertices: list[tuple[float, float, float]] = []
    normals: list[tuple[float, float, float]] = []
    indices: list[int] = []
    for normal, corners in faces:
        base = len(vertices)
        vertices.extend(corners)
        normals.extend([normal] * 4)
        indices.extend([base, base + 1, base + 2, base, base + 2, base + 3])
    return MeshData(np.array(vertices), np.array(indices), np.array(normals))


def make_pyramid(base: float = 1.0, height: float = 1.0, sides: int = 4) -> MeshData:
    """A pyramid (a cone for many sides) standing on y = 0.

    Used for the stylized trees of the demo scene. Normals are left to the
    face normals so the facets stay visible after quantization.

    Raises:
        ValueError: If sides < 3.
    """
    if sides < 3:
        raise ValueError(f"A pyramid needs at least 3 sides, got {sides}")
    radius = base / 2.0
    angles = np.linspace(0.0, 2.0 * np.pi, sides, endpoint=False)
    ring = [(radius * np.cos(a), 0.0, -radius * np.sin(a)) for a in angles]
    apex = (0.0, height, 0.0)
    center = (0.0, 0.0, 0.0)

    vertices = ring + [apex, center]
    apex_index = sides
    center_index = sides + 1
    indices: list[int] = []
    for i in range(sides):
        j = (i + 1) % sides
        indices.extend([i, j, apex_index])
        indices.extend([j, i, center_index])
    return MeshData(np.array(vertices), np.array(indices))
