"""Unit tests for host-side mesh data and transform helpers."""

import numpy as np
import pytest

from palettetrace.geometry.mesh import (
    MeshData,
    compose,
    compute_aabb,
    identity,
    make_box,
    make_plane,
    make_pyramid,
    normal_matrix,
    rotation_y,
    scaling,
    transform_points,
    translation,
)


class TestMeshData:
    def test_counts(self):
        mesh = make_box()
        assert mesh.num_vertices == 24
        assert mesh.num_indices == 36
        assert mesh.num_triangles == 12

    def test_arrays_are_coerced(self):
        mesh = MeshData([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [0, 1, 2])
        assert mesh.vertices.dtype == np.float32
        assert mesh.vertices.shape == (3, 3)
        assert mesh.indices.dtype == np.int32

    def test_index_count_must_be_multiple_of_three(self):
        with pytest.raises(ValueError, match="multiple of 3"):
            MeshData(np.zeros((3, 3)), np.array([0, 1]))

    def test_index_out_of_range(self):
        with pytest.raises(ValueError, match="indices must be in"):
            MeshData(np.zeros((3, 3)), np.array([0, 1, 3]))

    def test_empty_indices(self):
        with pytest.raises(ValueError, match="no indices"):
            MeshData(np.zeros((3, 3)), np.array([], dtype=np.int32))

    def test_normals_must_match_vertices(self):
        with pytest.raises(ValueError, match="normals shape"):
            MeshData(np.zeros((3, 3)), np.array([0, 1, 2]), np.zeros((2, 3)))


class TestTransforms:
    def test_translation_moves_points(self):
        points = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]], dtype=np.float32)
        moved = transform_points(translation((1.0, 2.0, 3.0)), points)
        assert np.allclose(moved, [[1.0, 2.0, 3.0], [2.0, 3.0, 4.0]])

    def test_compose_applies_last_first(self):
        m = compose(translation((1.0, 0.0, 0.0)), scaling((2.0, 2.0, 2.0)))
        moved = transform_points(m, np.array([[1.0, 0.0, 0.0]], dtype=np.float32))
        assert np.allclose(moved, [[3.0, 0.0, 0.0]])

    def test_rotation_y_quarter_turn(self):
        moved = transform_points(rotation_y(np.pi / 2.0), np.array([[0.0, 0.0, 1.0]]))
        assert np.allclose(moved, [[1.0, 0.0, 0.0]], atol=1e-6)

    def test_normal_matrix_of_rotation_is_rotation(self):
        m = rotation_y(0.3)
        assert np.allclose(normal_matrix(m), m[:3, :3], atol=1e-6)

    def test_normal_matrix_of_scale(self):
        nm = normal_matrix(scaling((2.0, 1.0, 1.0)))
        assert np.allclose(np.diag(nm), [0.5, 1.0, 1.0])

    def test_singular_transform(self):
        with pytest.raises(ValueError, match="singular"):
            normal_matrix(scaling((1.0, 0.0, 1.0)))


class TestShapes:
    def test_plane_faces_up(self):
        mesh = make_plane((2.0, 4.0))
        v = mesh.vertices
        for tri in mesh.indices.reshape(-1, 3):
            n = np.cross(v[tri[1]] - v[tri[0]], v[tri[2]] - v[tri[0]])
            assert n[1] > 0.0
        assert np.allclose(mesh.normals, [[0.0, 1.0, 0.0]] * 4)

    def test_box_faces_point_outward(self):
        mesh = make_box((1.0, 2.0, 1.0))
        v = mesh.vertices
        center = np.array([0.0, 1.0, 0.0])
        for tri in mesh.indices.reshape(-1, 3):
            n = np.cross(v[tri[1]] - v[tri[0]], v[tri[2]] - v[tri[0]])
            centroid = v[tri].mean(axis=0)
            assert np.dot(n, centroid - center) > 0.0

    def test_box_rests_on_ground(self):
        mesh = make_box((1.0, 2.0, 1.0))
        assert np.isclose(mesh.vertices[:, 1].min(), 0.0)
        assert np.isclose(mesh.vertices[:, 1].max(), 2.0)

    def test_pyramid_faces_point_outward(self):
        mesh = make_pyramid(base=2.0, height=3.0, sides=6)
        assert mesh.normals is None
        assert mesh.num_triangles == 12
        v = mesh.vertices
        center = np.array([0.0, 1.0, 0.0])
        for tri in mesh.indices.reshape(-1, 3):
            n = np.cross(v[tri[1]] - v[tri[0]], v[tri[2]] - v[tri[0]])
            centroid = v[tri].mean(axis=0)
            assert np.dot(n, centroid - center) > 0.0

    def test_pyramid_needs_three_sides(self):
        with pytest.raises(ValueError):
            make_pyramid(sides=2)


class TestAabb:
    def test_identity_box(self):
        box_min, box_max = compute_aabb(make_box((2.0, 1.0, 2.0)), identity())
        assert np.allclose(box_min, [-1.0, 0.0, -1.0])
        assert np.allclose(box_max, [1.0, 1.0, 1.0])

    def test_transformed_box_encloses_vertices(self):
        mesh = make_pyramid(base=1.4, height=1.8, sides=6)
        m = compose(translation((2.0, 0.8, -1.0)), rotation_y(0.7), scaling((1.0, 2.0, 1.0)))
        box_min, box_max = compute_aabb(mesh, m)
        world = transform_points(m, mesh.vertices)
        assert np.all(world >= box_min - 1e-6)
        assert np.all(world <= box_max + 1e-6)

    def test_only_referenced_vertices_count(self):
        vertices = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [100, 100, 100]])
        mesh = MeshData(vertices, np.array([0, 1, 2]))
        _, box_max = compute_aabb(mesh, identity())
        assert np.allclose(box_max, [1.0, 1.0, 0.0])
