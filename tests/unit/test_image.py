"""
Unit Tests for the Image Codec Adapter

Format normalization on decode, PNG output and atomic writes.
"""

import io
import logging

import numpy as np
import pytest
from PIL import Image

from veilpix.codec.image import decode_image, encode_png, load_carrier, write_png
from veilpix.codec.lsb import CarrierBuffer
from veilpix.errors import CarrierUnreadable


def png_bytes(img):
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


class TestDecode:
    """Test cases for decode_image and load_carrier."""

    def test_rgb_png(self, test_image):
        carrier = load_carrier(test_image)
        assert (carrier.width, carrier.height, carrier.channels) == (100, 100, 3)
        assert carrier.alpha is None
        assert np.array_equal(carrier.to_array(), np.asarray(Image.open(test_image)))

    def test_rgba_keeps_alpha_out_of_samples(self, rgba_test_image):
        carrier = load_carrier(rgba_test_image)
        source = np.asarray(Image.open(rgba_test_image))
        assert carrier.channels == 3
        assert carrier.bit_capacity == 64 * 64 * 3
        assert np.array_equal(carrier.alpha.reshape(64, 64), source[:, :, 3])

    def test_grayscale_stays_single_channel(self, grayscale_test_image):
        carrier = load_carrier(grayscale_test_image)
        assert (carrier.width, carrier.height, carrier.channels) == (50, 40, 1)

    def test_palette_converted_to_rgb(self):
        img = Image.new("P", (8, 8))
        img.putpalette([i % 256 for i in range(768)])
        carrier = decode_image(png_bytes(img))
        assert carrier.channels == 3
        assert carrier.alpha is None

    def test_bilevel_converted_to_rgb(self):
        carrier = decode_image(png_bytes(Image.new("1", (5, 5), 1)))
        assert carrier.channels == 3
        assert carrier.samples.max() == 255

    def test_jpeg_is_accepted_with_warning(self, jpeg_test_image, caplog):
        caplog.set_level(logging.WARNING, logger="veilpix")
        carrier = load_carrier(jpeg_test_image)
        assert carrier.channels == 3
        assert any("lossy" in r.getMessage() for r in caplog.records)

    def test_jpeg_warning_can_be_disabled(self, jpeg_test_image, caplog):
        caplog.set_level(logging.WARNING, logger="veilpix")
        load_carrier(jpeg_test_image, warn_on_lossy=False)
        assert not caplog.records

    def test_garbage_bytes(self):
        with pytest.raises(CarrierUnreadable):
            decode_image(b"definitely not an image")

    def test_missing_file(self, temp_directory):
        with pytest.raises(CarrierUnreadable) as exc:
            load_carrier(temp_directory / "missing.png")
        assert exc.value.details["path"].endswith("missing.png")


class TestEncode:
    """Test cases for encode_png and write_png."""

    def test_rgb_round_trip_is_lossless(self, test_image):
        carrier = load_carrier(test_image)
        again = decode_image(encode_png(carrier))
        assert np.array_equal(again.samples, carrier.samples)

    def test_rgba_round_trip_restores_alpha(self, rgba_test_image):
        carrier = load_carrier(rgba_test_image)
        with Image.open(io.BytesIO(encode_png(carrier))) as img:
            assert img.mode == "RGBA"
            assert np.array_equal(np.asarray(img), np.asarray(Image.open(rgba_test_image)))

    def test_grayscale_output_mode(self):
        carrier = CarrierBuffer(4, 3, 1, np.arange(12, dtype=np.uint8))
        with Image.open(io.BytesIO(encode_png(carrier))) as img:
            assert img.mode == "L"
            assert img.format == "PNG"

    def test_write_png_leaves_no_temp_files(self, test_image, temp_directory):
        out_dir = temp_directory / "out"
        written = write_png(load_carrier(test_image), out_dir / "carrier.png")
        assert written.exists()
        assert [p.name for p in out_dir.iterdir()] == ["carrier.png"]

    def test_non_png_suffix_still_writes_png(self, test_image, temp_directory, caplog):
        caplog.set_level(logging.WARNING, logger="veilpix")
        target = temp_directory / "carrier.jpg"
        write_png(load_carrier(test_image), target)
        assert target.read_bytes().startswith(b"\x89PNG\r\n\x1a\n")
        assert any(".png" in r.getMessage() for r in caplog.records)
