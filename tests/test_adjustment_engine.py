"""
Tests for the adjustment engine and clarity filter.
"""

import numpy as np
import pytest

from editsight.errors import DecodeError
from editsight.io.image_io import encode_image
from editsight.processing.adjustment_engine import AdjustmentEngine, OPERATION_ORDER
from editsight.processing.clarity import ClarityFilter
from editsight.processing.color import channel_ops
from editsight.processing.models import AdjustmentVector, PixelBuffer, ADJUSTMENT_FIELDS

from conftest import pixel_buffer


@pytest.fixture
def engine():
    return AdjustmentEngine()


def random_vector(rng):
    values = rng.integers(-100, 101, size=len(ADJUSTMENT_FIELDS))
    return AdjustmentVector(**dict(zip(ADJUSTMENT_FIELDS, values.tolist())))


class TestEngineContract:

    def test_neutral_vector_is_identity(self, engine, random_buffer):
        """Test that an all-zero vector returns the source byte for byte."""
        result = engine.apply(random_buffer, AdjustmentVector())
        assert result == random_buffer
        assert result.to_bytes() == random_buffer.to_bytes()

    def test_sub_threshold_clarity_is_identity(self, engine, random_buffer):
        """Test that clarity below the minimum strength changes nothing."""
        result = engine.apply(random_buffer, AdjustmentVector(clarity=0.5))
        assert result == random_buffer

    def test_deterministic(self, engine, random_buffer, rng):
        """Test that identical inputs give identical output."""
        vector = random_vector(rng)
        assert engine.apply(random_buffer, vector) == engine.apply(random_buffer, vector)

    def test_source_unchanged(self, engine, random_buffer, rng):
        """Test that the source buffer is never written."""
        before = random_buffer.to_bytes()
        engine.apply(random_buffer, random_vector(rng))
        assert random_buffer.to_bytes() == before

    def test_alpha_and_dimensions_preserved(self, engine, random_buffer, rng):
        """Test that size and alpha survive any adjustment."""
        for _ in range(10):
            result = engine.apply(random_buffer, random_vector(rng))
            assert result.size == random_buffer.size
            np.testing.assert_array_equal(result.alpha, random_buffer.alpha)

    def test_output_stays_in_byte_range(self, engine, rng):
        """Test extreme vectors on extreme pixels stay 8-bit."""
        extreme = PixelBuffer(4, 4, rng.choice([0, 1, 254, 255], size=(4, 4, 4)).astype(np.uint8))
        for value in (-100, 100):
            vector = AdjustmentVector(**{name: value for name in ADJUSTMENT_FIELDS})
            result = engine.apply(extreme, vector)
            assert result.data.dtype == np.uint8
            assert result.data.shape == (4, 4, 4)

    def test_recomputing_same_value_is_idempotent(self, engine, random_buffer):
        """Rendering from the original twice gives the same image."""
        vector = AdjustmentVector(exposure=15, contrast=10)
        first = engine.apply(random_buffer, vector)
        second = engine.apply(random_buffer, vector)
        compounded = engine.apply(first, vector)
        assert first == second
        assert compounded != first

    def test_operation_order(self):
        """Test the fixed stage order with clarity last."""
        assert OPERATION_ORDER == (
            'temperature', 'tint', 'exposure', 'contrast', 'highlights', 'shadows',
            'whites', 'blacks', 'dehaze', 'vibrance', 'saturation', 'clarity',
        )


class TestStageSemantics:

    def test_clamps_between_stages(self, engine):
        """Temperature clips red at 255 before exposure halves it."""
        result = engine.apply(pixel_buffer((250, 100, 100)),
                              AdjustmentVector(temperature=100, exposure=-100))
        # 127.5 and 37.5 round half to even
        assert tuple(result.data[0, 0]) == (128, 50, 38, 255)

    def test_matches_sequential_operators(self, engine, random_buffer):
        """Test the engine against running each operator by hand."""
        vector = AdjustmentVector(temperature=-20, tint=35, exposure=10, contrast=25,
                                  highlights=-30, shadows=40, whites=15, blacks=-10,
                                  dehaze=20, vibrance=30, saturation=-15)

        rgb = random_buffer.rgb.astype(np.float64)
        for name in OPERATION_ORDER[:-1]:
            rgb = channel_ops.CHANNEL_OPERATORS[name](rgb, getattr(vector, name))
        expected = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)

        result = engine.apply(random_buffer, vector)
        np.testing.assert_array_equal(result.rgb, expected)

    def test_order_is_significant(self):
        """Test that swapping two stages changes the result."""
        pixel = np.array([[200.0, 60.0, 30.0]])
        forward = channel_ops.apply_saturation(channel_ops.apply_contrast(pixel, 60), 40)
        swapped = channel_ops.apply_contrast(channel_ops.apply_saturation(pixel, 40), 60)
        assert not np.array_equal(forward, swapped)

    def test_apply_encoded(self, engine):
        """Test decoding and adjusting encoded bytes in one call."""
        source = pixel_buffer((10, 20, 30), (40, 50, 60))
        result = engine.apply_encoded(encode_image(source), AdjustmentVector(exposure=100))
        np.testing.assert_array_equal(result.rgb[0], [[20, 40, 60], [80, 100, 120]])

    def test_apply_encoded_rejects_garbage(self, engine):
        """Test that undecodable input raises DecodeError."""
        with pytest.raises(DecodeError):
            engine.apply_encoded(b"definitely not an image", AdjustmentVector(exposure=10))


class TestClarityFilter:

    @pytest.fixture
    def strip(self):
        """3x4 gray image with two interior pixels (100 and 60)."""
        values = np.array([
            [0, 0, 0, 0],
            [0, 100, 60, 0],
            [0, 0, 0, 0],
        ], dtype=np.uint8)
        rgba = np.zeros((3, 4, 4), dtype=np.uint8)
        rgba[:, :, :3] = values[:, :, np.newaxis]
        rgba[:, :, 3] = 255
        return rgba

    def test_reads_pre_clarity_values(self, strip):
        """Test that neighbors are read from the unsharpened image."""
        result = ClarityFilter().apply(strip, 50)
        # 100 + (100 - 15) * 0.5 = 142.5 -> 142, 60 + (60 - 25) * 0.5 = 77.5 -> 78
        assert result[1, 1, 0] == 142
        assert result[1, 2, 0] == 78
        np.testing.assert_array_equal(result[1, 1, :3], [142, 142, 142])

    def test_border_untouched(self, strip):
        """Test that the 1-pixel border is left as is."""
        result = ClarityFilter().apply(strip, 100)
        np.testing.assert_array_equal(result[0], strip[0])
        np.testing.assert_array_equal(result[-1], strip[-1])
        np.testing.assert_array_equal(result[:, 0], strip[:, 0])
        np.testing.assert_array_equal(result[:, -1], strip[:, -1])

    def test_input_not_modified(self, strip):
        """Test that the input array is not modified."""
        before = strip.copy()
        ClarityFilter().apply(strip, 100)
        np.testing.assert_array_equal(strip, before)

    def test_negative_clarity_softens(self, strip):
        """Test that negative clarity pulls toward the neighbors."""
        result = ClarityFilter().apply(strip, -100)
        assert result[1, 1, 0] < 100

    def test_tiny_images_unchanged(self):
        """Test that images without interior pixels are unchanged."""
        rgba = np.full((2, 2, 4), 90, dtype=np.uint8)
        np.testing.assert_array_equal(ClarityFilter().apply(rgba, 100), rgba)

    def test_ignores_diagonals(self):
        """Test that diagonal neighbors do not contribute."""
        rgba = np.zeros((3, 3, 4), dtype=np.uint8)
        rgba[1, 1, :3] = 100
        rgba[0, 0, :3] = 255
        rgba[2, 2, :3] = 255
        result = ClarityFilter().apply(rgba, 100)
        # 4-neighbor average is 0 -> 100 + 100 clamps below 255
        assert result[1, 1, 0] == 200
