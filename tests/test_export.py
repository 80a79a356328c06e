"""Tests for PPM and PNG export.

Tests cover:
- Quantization: clamp, gamma 2 and the 255.99 scale
- PPM header and pixel line count
- Row order (top scanline first) and column order
- Writers to streams, strings and files
- PNG output orientation
- Shape validation
"""

import io

import numpy as np
import pytest
from PIL import Image as PILImage


def _gradient(height=3, width=2):
    """Framebuffer whose red encodes the row and green the column."""
    image = np.zeros((height, width, 3), dtype=np.float32)
    for j in range(height):
        for i in range(width):
            image[j, i] = ((j + 1) / (height + 1), (i + 1) / (width + 1), 0.0)
    return image


class TestQuantization:
    """Tests for to_rgb8."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0.0, 0),
            (1.0, 255),
            (0.25, 127),
            (0.5, 181),
            (2.0, 255),
            (-1.0, 0),
            (float("nan"), 0),
        ],
    )
    def test_channel_values(self, value, expected):
        """Test floor(255.99 * sqrt(clip(c, 0, 1)))."""
        from eyetrace.output.export import to_rgb8

        rgb = to_rgb8(np.full((1, 1, 3), value, dtype=np.float32))
        assert rgb.dtype == np.uint8
        assert rgb[0, 0].tolist() == [expected] * 3

    def test_rows_are_not_reordered(self):
        """Test to_rgb8 keeps the framebuffer layout."""
        from eyetrace.output.export import to_rgb8

        image = np.zeros((2, 1, 3), dtype=np.float32)
        image[1, 0] = 1.0
        rgb = to_rgb8(image)
        assert rgb[0, 0, 0] == 0
        assert rgb[1, 0, 0] == 255

    @pytest.mark.parametrize("shape", [(4, 4), (4, 4, 4), (2, 2, 3, 1)])
    def test_invalid_shape_raises(self, shape):
        """Test non-(H, W, 3) input is rejected."""
        from eyetrace.output.export import to_rgb8

        with pytest.raises(ValueError, match="shape"):
            to_rgb8(np.zeros(shape, dtype=np.float32))


class TestPpm:
    """Tests for the plain-text PPM writer."""

    def test_header(self):
        """Test the P3 header with width before height."""
        from eyetrace.output.export import ppm_lines

        lines = list(ppm_lines(np.zeros((3, 5, 3), dtype=np.float32)))
        assert lines[:3] == ["P3", "5 3", "255"]
        assert len(lines) == 3 + 15

    def test_top_row_first_columns_left_to_right(self):
        """Test rows are reversed and columns kept in order."""
        from eyetrace.output.export import ppm_lines, to_rgb8

        image = _gradient(height=3, width=2)
        rgb = to_rgb8(image)
        pixels = list(ppm_lines(image))[3:]

        expected = []
        for j in (2, 1, 0):
            for i in (0, 1):
                expected.append(" ".join(str(int(c)) for c in rgb[j, i]))
        assert pixels == expected

    def test_pixel_lines_are_three_integers(self):
        """Test every pixel line is 'R G B' with values in [0, 255]."""
        from eyetrace.output.export import ppm_lines

        rng = np.random.default_rng(0)
        image = rng.uniform(-0.5, 1.5, size=(4, 6, 3)).astype(np.float32)
        for line in list(ppm_lines(image))[3:]:
            values = [int(v) for v in line.split(" ")]
            assert len(values) == 3
            assert all(0 <= v <= 255 for v in values)

    def test_write_ppm_to_stream(self):
        """Test writing to a text stream returns the pixel count."""
        from eyetrace.output.export import format_ppm, write_ppm

        image = _gradient()
        stream = io.StringIO()
        count = write_ppm(image, stream)

        assert count == 6
        assert stream.getvalue() == format_ppm(image)
        assert stream.getvalue().endswith("\n")

    def test_save_ppm(self, tmp_path):
        """Test saving a PPM file."""
        from eyetrace.output.export import format_ppm, save_ppm

        image = _gradient()
        path = tmp_path / "image.ppm"
        save_ppm(image, str(path))

        assert path.read_text(encoding="ascii") == format_ppm(image)


class TestPng:
    """Tests for PNG export."""

    def test_png_is_upright(self, tmp_path):
        """Test the PNG's first row is the framebuffer's top row."""
        from eyetrace.output.export import save_png, to_rgb8

        image = _gradient(height=3, width=2)
        path = tmp_path / "image.png"
        save_png(image, str(path))

        with PILImage.open(path) as png:
            assert png.size == (2, 3)
            assert png.mode == "RGB"
            pixels = np.asarray(png)

        np.testing.assert_array_equal(pixels, to_rgb8(image)[::-1])
