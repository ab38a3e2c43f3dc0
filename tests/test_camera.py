"""Unit tests for the look-at camera.

Tests cover:
- Camera validation and defaults
- Basis orthonormality and the down-screen up vector
- Orthographic rays: parallel directions, shifted origins
- Perspective rays: shared origin, centre ray along forward
"""

import math

import numpy as np
import pytest
import taichi as ti


def _primary_rays(camera, pixels, width, height):
    from palettetrace.camera.look_at import get_primary_ray, setup_camera

    setup_camera(camera)
    n = len(pixels)
    px = ti.Vector.field(2, dtype=ti.f32, shape=n)
    px.from_numpy(np.asarray(pixels, dtype=np.float32))
    origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

    @ti.kernel
    def test_kernel(w: ti.i32, h: ti.i32):
        for i in range(n):
            ray = get_primary_ray(px[i][0], px[i][1], w, h)
            origins[i] = ray.origin
            directions[i] = ray.direction

    test_kernel(width, height)
    return origins.to_numpy(), directions.to_numpy()


class TestLookAtCamera:
    def test_default_is_isometric_orthographic(self):
        from palettetrace.camera.look_at import LookAtCamera, Projection

        camera = LookAtCamera()
        assert camera.projection == Projection.ORTHOGRAPHIC
        eye = np.array(camera.eye) - np.array(camera.target)
        elevation = math.degrees(math.atan2(camera.eye[1], camera.eye[2]))
        assert abs(elevation - 35.264) < 1e-3
        assert np.linalg.norm(eye) > 0.0

    def test_zoom_must_be_positive(self):
        from palettetrace.camera.look_at import LookAtCamera

        with pytest.raises(ValueError, match="zoom"):
            LookAtCamera(zoom=0.0)

    def test_eye_must_differ_from_target(self):
        from palettetrace.camera.look_at import LookAtCamera

        with pytest.raises(ValueError):
            LookAtCamera(eye=(1.0, 1.0, 1.0), target=(1.0, 1.0, 1.0))

    def test_zoom_for_fov(self):
        from palettetrace.camera.look_at import LookAtCamera

        assert abs(LookAtCamera.zoom_for_fov(90.0, 200) - 100.0) < 1e-6
        with pytest.raises(ValueError):
            LookAtCamera.zoom_for_fov(180.0, 200)


class TestBasis:
    def test_orthonormal(self):
        from palettetrace.camera.look_at import LookAtCamera, compute_basis

        forward, right, up = compute_basis(LookAtCamera(eye=(3.0, 4.0, 5.0), target=(0.0, 1.0, 0.0)))
        for v in (forward, right, up):
            assert abs(np.linalg.norm(v) - 1.0) < 1e-9
        assert abs(np.dot(forward, right)) < 1e-9
        assert abs(np.dot(forward, up)) < 1e-9
        assert abs(np.dot(right, up)) < 1e-9

    def test_up_points_down_screen(self):
        from palettetrace.camera.look_at import LookAtCamera, compute_basis

        forward, right, up = compute_basis(LookAtCamera(eye=(0.0, 0.0, 5.0), target=(0.0, 0.0, 0.0)))
        assert np.allclose(forward, [0.0, 0.0, -1.0])
        assert np.allclose(right, [1.0, 0.0, 0.0])
        assert np.allclose(up, [0.0, -1.0, 0.0])

    def test_straight_down_falls_back(self):
        from palettetrace.camera.look_at import LookAtCamera, compute_basis

        forward, right, up = compute_basis(LookAtCamera(eye=(0.0, 5.0, 0.0), target=(0.0, 0.0, 0.0)))
        assert np.all(np.isfinite(right))
        assert abs(np.dot(forward, right)) < 1e-9
        assert abs(np.linalg.norm(up) - 1.0) < 1e-9

    def test_setup_camera_uploads_basis(self):
        from palettetrace.camera.look_at import LookAtCamera, get_camera_info, setup_camera

        setup_camera(LookAtCamera(eye=(0.0, 0.0, 5.0), target=(0.0, 0.0, 0.0), zoom=40.0))
        info = get_camera_info()
        assert np.allclose(info["forward"], (0.0, 0.0, -1.0))
        assert info["zoom"] == 40.0
        assert info["projection"] == 0


class TestPrimaryRays:
    def test_orthographic_rays_are_parallel(self):
        from palettetrace.camera.look_at import LookAtCamera

        camera = LookAtCamera(eye=(0.0, 0.0, 5.0), target=(0.0, 0.0, 0.0), zoom=10.0)
        origins, directions = _primary_rays(camera, [(0.0, 0.0), (10.0, 10.0), (20.0, 5.0)], 20, 10)
        assert np.allclose(directions, [[0.0, 0.0, -1.0]] * 3, atol=1e-6)
        # Top-left pixel: one world unit left and half a unit up
        assert np.allclose(origins[0], [-1.0, 0.5, 5.0], atol=1e-5)
        assert np.allclose(origins[1], [0.0, -0.5, 5.0], atol=1e-5)
        assert np.allclose(origins[2], [1.0, 0.0, 5.0], atol=1e-5)

    def test_perspective_rays_share_origin(self):
        from palettetrace.camera.look_at import LookAtCamera, Projection

        camera = LookAtCamera(
            eye=(0.0, 0.0, 5.0),
            target=(0.0, 0.0, 0.0),
            zoom=LookAtCamera.zoom_for_fov(90.0, 100),
            projection=Projection.PERSPECTIVE,
        )
        origins, directions = _primary_rays(camera, [(50.0, 50.0), (0.0, 50.0), (50.0, 0.0)], 100, 100)
        assert np.allclose(origins, [[0.0, 0.0, 5.0]] * 3, atol=1e-6)
        assert np.allclose(directions[0], [0.0, 0.0, -1.0], atol=1e-6)
        s = 1.0 / math.sqrt(2.0)
        # The left edge is 45 degrees off axis for a 90 degree field of view
        assert np.allclose(directions[1], [-s, 0.0, -s], atol=1e-5)
        assert np.allclose(directions[2], [0.0, s, -s], atol=1e-5)
        assert np.allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)
