"""Unit tests for palettes and nearest-color quantization.

Tests cover:
- Palette construction and hex parsing
- Quantizing a palette entry returns it (Euclidean metric)
- Black maps to the black entry under both metrics
- Lowest-index tie-break
- Kernel and NumPy quantizers agree
- Perceptual distance values for both (k, bias) presets
- Hue weighting picks a different entry than Euclidean
"""

import numpy as np
import pytest


class TestPalette:
    def test_db32_has_32_entries(self):
        from palettetrace.palette.palettes import DB32, PALETTE_SIZE

        assert len(DB32) == PALETTE_SIZE == 32
        assert DB32[0] == (0.0, 0.0, 0.0)
        assert DB32[21] == (1.0, 1.0, 1.0)
        assert DB32.to_numpy().shape == (32, 3)

    def test_hex_to_rgb(self):
        from palettetrace.palette.palettes import hex_to_rgb

        assert hex_to_rgb("#ff0000") == (1.0, 0.0, 0.0)
        assert hex_to_rgb("00ff00") == (0.0, 1.0, 0.0)

    @pytest.mark.parametrize("value", ["#fff", "zzzzzz", "1234567"])
    def test_hex_to_rgb_invalid(self, value):
        from palettetrace.palette.palettes import hex_to_rgb

        with pytest.raises(ValueError):
            hex_to_rgb(value)

    def test_palette_size_enforced(self):
        from palettetrace.palette.palettes import Palette

        with pytest.raises(ValueError, match="exactly 32"):
            Palette("short", ((0.0, 0.0, 0.0),) * 31)

    def test_palette_range_enforced(self):
        from palettetrace.palette.palettes import Palette

        colors = [(0.0, 0.0, 0.0)] * 31 + [(1.5, 0.0, 0.0)]
        with pytest.raises(ValueError, match="outside"):
            Palette("bad", tuple(colors))


class TestKernelQuantizer:
    def test_palette_entries_are_fixed_points(self):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.palettes import DB32
        from palettetrace.palette.quantizer import quantize_color, set_metric, setup_palette

        setup_palette(DB32)
        set_metric(PaletteMetric.EUCLIDEAN)
        for i, color in enumerate(DB32.colors):
            index, snapped = quantize_color(color)
            assert index == i
            assert np.allclose(snapped, color, atol=1e-6)

    @pytest.mark.parametrize("metric", ["EUCLIDEAN", "PERCEPTUAL"])
    def test_black_maps_to_black(self, metric):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.quantizer import quantize_color, set_metric, setup_palette

        setup_palette()
        set_metric(PaletteMetric[metric])
        index, snapped = quantize_color((0.0, 0.0, 0.0))
        assert index == 0
        assert snapped == (0.0, 0.0, 0.0)

    def test_white_maps_to_white(self):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.quantizer import quantize_color, set_metric, setup_palette

        setup_palette()
        set_metric(PaletteMetric.PERCEPTUAL, 0.5, 0.5)
        index, _ = quantize_color((1.0, 1.0, 1.0))
        assert index == 21

    def test_tie_resolves_to_lowest_index(self):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.palettes import Palette
        from palettetrace.palette.quantizer import quantize_color, set_metric, setup_palette

        # Entries 3 and 7 are equally far from mid grey
        colors = [(1.0, 0.0, 0.0)] * 32
        colors[3] = (0.25, 0.25, 0.25)
        colors[7] = (0.75, 0.75, 0.75)
        setup_palette(Palette("tie", tuple(colors)))
        set_metric(PaletteMetric.EUCLIDEAN)
        index, _ = quantize_color((0.5, 0.5, 0.5))
        assert index == 3

    def test_duplicate_entries_pick_first(self):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.palettes import Palette
        from palettetrace.palette.quantizer import quantize_color, set_metric, setup_palette

        colors = [(0.0, 0.0, 1.0)] * 32
        colors[5] = (0.0, 1.0, 0.0)
        colors[9] = (0.0, 1.0, 0.0)
        setup_palette(Palette("dupes", tuple(colors)))
        set_metric(PaletteMetric.PERCEPTUAL)
        index, _ = quantize_color((0.1, 0.9, 0.1))
        assert index == 5


class TestArrayQuantizer:
    def test_kernel_and_numpy_agree(self):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.palettes import DB32
        from palettetrace.palette.quantizer import quantize_array, quantize_color, set_metric, setup_palette

        samples = np.array(
            [
                [0.9, 0.1, 0.1],
                [0.1, 0.8, 0.2],
                [0.2, 0.3, 0.9],
                [0.95, 0.95, 0.2],
                [0.05, 0.05, 0.1],
                [0.6, 0.6, 0.6],
            ],
            dtype=np.float32,
        )
        setup_palette(DB32)
        for metric in (PaletteMetric.EUCLIDEAN, PaletteMetric.PERCEPTUAL):
            set_metric(metric, 0.5, 0.5)
            indices, colors = quantize_array(samples, DB32, metric, 0.5, 0.5)
            for sample, index, color in zip(samples, indices, colors):
                kernel_index, kernel_color = quantize_color(tuple(float(c) for c in sample))
                assert kernel_index == index
                assert np.allclose(kernel_color, color, atol=1e-6)

    def test_preserves_image_shape(self):
        from palettetrace.palette.quantizer import quantize_array

        image = np.random.default_rng(0).random((4, 5, 3)).astype(np.float32)
        indices, colors = quantize_array(image)
        assert indices.shape == (4, 5)
        assert colors.shape == (4, 5, 3)
        assert indices.min() >= 0
        assert indices.max() < 32

    def test_quantized_image_is_fixed_point(self):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.quantizer import quantize_array

        image = np.random.default_rng(1).random((8, 8, 3)).astype(np.float32)
        first_indices, first = quantize_array(image, metric=PaletteMetric.EUCLIDEAN)
        second_indices, second = quantize_array(first, metric=PaletteMetric.EUCLIDEAN)
        assert np.array_equal(first, second)
        assert np.array_equal(first_indices, second_indices)

    def test_rejects_wrong_trailing_dimension(self):
        from palettetrace.palette.quantizer import quantize_array

        with pytest.raises(ValueError):
            quantize_array(np.zeros((4, 4)))


def _hue_palette():
    """Brighter same-hue red at 1, nearer grey at 2, far blue elsewhere."""
    from palettetrace.palette.palettes import Palette

    colors = [(0.0, 0.0, 1.0)] * 32
    colors[1] = (1.0, 0.0, 0.0)
    colors[2] = (0.2, 0.2, 0.2)
    return Palette("hue", tuple(colors))


class TestPerceptualDistance:
    @pytest.mark.parametrize(
        "a, b, k, bias, expected",
        [
            # Orthogonal hues: cosine 0
            ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0.5, 0.5, 2.0**0.5 * 0.75),
            ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0.95, 0.0, 2.0**0.5),
            # Same hue: cosine 1
            ((1.0, 0.0, 0.0), (0.5, 0.0, 0.0), 0.5, 0.5, 0.125),
            ((1.0, 0.0, 0.0), (0.5, 0.0, 0.0), 0.95, 0.0, 0.025),
            # cosine 0.6, distance sqrt(0.8)
            ((0.6, 0.8, 0.0), (1.0, 0.0, 0.0), 0.5, 0.5, 0.8**0.5 * 0.45),
            ((0.6, 0.8, 0.0), (1.0, 0.0, 0.0), 0.95, 0.0, 0.8**0.5 * 0.43),
            # Black is never normalized: cosine taken as 0
            ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 0.5, 0.5, 0.75),
            ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 0.95, 0.0, 1.0),
        ],
    )
    def test_weighted_distance(self, a, b, k, bias, expected):
        import taichi as ti

        from palettetrace.palette.quantizer import distance_perceptual

        vec3 = ti.math.vec3
        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(a: vec3, b: vec3, k: ti.f32, bias: ti.f32):
            result[None] = distance_perceptual(a, b, k, bias)

        test_kernel(vec3(*a), vec3(*b), k, bias)
        assert abs(result[None] - expected) < 1e-5

    @pytest.mark.parametrize("k, bias", [(0.5, 0.5), (0.95, 0.0)])
    def test_hue_match_beats_nearer_grey(self, k, bias):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.quantizer import quantize_color, set_metric, setup_palette

        palette = _hue_palette()
        setup_palette(palette)

        set_metric(PaletteMetric.EUCLIDEAN)
        assert quantize_color((0.5, 0.0, 0.0))[0] == 2

        set_metric(PaletteMetric.PERCEPTUAL, k, bias)
        index, snapped = quantize_color((0.5, 0.0, 0.0))
        assert index == 1
        assert snapped == (1.0, 0.0, 0.0)

    @pytest.mark.parametrize("k, bias", [(0.5, 0.5), (0.95, 0.0)])
    def test_array_metrics_diverge_the_same_way(self, k, bias):
        from palettetrace.core.settings import PaletteMetric
        from palettetrace.palette.quantizer import quantize_array

        palette = _hue_palette()
        image = np.array([[0.5, 0.0, 0.0]], dtype=np.float32)
        euclidean, _ = quantize_array(image, palette, PaletteMetric.EUCLIDEAN)
        perceptual, _ = quantize_array(image, palette, PaletteMetric.PERCEPTUAL, k, bias)
        assert euclidean[0] == 2
        assert perceptual[0] == 1
