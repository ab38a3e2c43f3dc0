"""Unit tests for point light storage."""

import numpy as np
import pytest


class TestLights:
    def test_add_light(self):
        from palettetrace.scene.lights import add_light, get_light_count, light_colors, light_positions, light_strengths

        idx = add_light((1.0, 2.0, 3.0), 5.0, (1.0, 0.5, 0.0))
        assert idx == 0
        assert get_light_count() == 1
        assert np.allclose(light_positions[0].to_numpy(), [1.0, 2.0, 3.0])
        assert abs(light_strengths[0] - 5.0) < 1e-6
        assert np.allclose(light_colors[0].to_numpy(), [1.0, 0.5, 0.0])

    def test_default_color_is_white(self):
        from palettetrace.scene.lights import add_light, light_colors

        add_light((0.0, 1.0, 0.0), 1.0)
        assert np.allclose(light_colors[0].to_numpy(), [1.0, 1.0, 1.0])

    @pytest.mark.parametrize("strength", [0.0, -2.0])
    def test_strength_must_be_positive(self, strength):
        from palettetrace.scene.lights import add_light, get_light_count

        with pytest.raises(ValueError, match="positive"):
            add_light((0.0, 0.0, 0.0), strength)
        assert get_light_count() == 0

    def test_negative_color_rejected(self):
        from palettetrace.scene.lights import add_light

        with pytest.raises(ValueError, match="negative"):
            add_light((0.0, 0.0, 0.0), 1.0, (1.0, -0.1, 0.0))

    def test_capacity(self):
        from palettetrace.scene.lights import MAX_LIGHTS, add_light

        for i in range(MAX_LIGHTS):
            add_light((float(i), 0.0, 0.0), 1.0)
        with pytest.raises(RuntimeError, match="Maximum number of lights"):
            add_light((0.0, 0.0, 0.0), 1.0)

    def test_set_light_moves_existing_light(self):
        from palettetrace.scene.lights import add_light, light_positions, set_light

        add_light((0.0, 0.0, 0.0), 1.0)
        set_light(0, (4.0, 5.0, 6.0), 2.0)
        assert np.allclose(light_positions[0].to_numpy(), [4.0, 5.0, 6.0])

    def test_set_light_unknown_index(self):
        from palettetrace.scene.lights import set_light

        with pytest.raises(IndexError):
            set_light(0, (0.0, 0.0, 0.0), 1.0)

    def test_clear_lights(self):
        from palettetrace.scene.lights import add_light, clear_lights, get_light_count

        add_light((0.0, 0.0, 0.0), 1.0)
        clear_lights()
        assert get_light_count() == 0
