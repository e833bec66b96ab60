"""
Integration Tests for the Complete Hide / Unveil Workflow

These tests go through SteganoManager end to end: real image files on disk,
real PNG output, and real files restored into a directory.
"""

import numpy as np
import pytest
from PIL import Image

from veilpix import SteganoManager, StegoConfig
from veilpix.codec.container import Payload
from veilpix.errors import CapacityExceeded, ExtractionError, PayloadUnreadable


@pytest.fixture
def manager():
    return SteganoManager()


class TestHideUnveilWorkflow:
    """Round trips through image files."""

    def test_mixed_files_including_empty(self, manager, test_image, sample_files, temp_directory):
        carrier = temp_directory / "carrier.png"
        out_dir = temp_directory / "restored"

        result = manager.hide(test_image, carrier, files=sample_files)
        assert result.entries == 2
        assert carrier.exists()

        unveiled = manager.unveil(carrier, out_dir)
        assert sorted(p.name for p in unveiled.written) == ["a.txt", "b.txt"]
        assert (out_dir / "a.txt").read_bytes() == b"abc"
        assert (out_dir / "b.txt").read_bytes() == b""

    def test_message_round_trip(self, manager, test_image, temp_directory):
        carrier = temp_directory / "carrier.png"
        out_dir = temp_directory / "restored"

        manager.hide(test_image, carrier, message="hi")
        unveiled = manager.unveil(carrier, out_dir)

        assert unveiled.written == [out_dir / "message.txt"]
        assert list(out_dir.iterdir()) == [out_dir / "message.txt"]
        assert (out_dir / "message.txt").read_bytes() == b"hi"

    def test_custom_message_filename(self, test_image, temp_directory):
        manager = SteganoManager(StegoConfig(message_filename="secret.txt"))
        carrier = temp_directory / "carrier.png"
        manager.hide(test_image, carrier, message="psst")
        manager.unveil(carrier, temp_directory / "out")
        assert (temp_directory / "out" / "secret.txt").read_text() == "psst"

    def test_binary_payload_byte_exact(self, manager, test_image, temp_directory):
        data = bytes(range(256)) * 4
        source = temp_directory / "blob.bin"
        source.write_bytes(data)
        carrier = temp_directory / "carrier.png"

        manager.hide(test_image, carrier, files=[source])
        assert manager.read_payloads(carrier) == [Payload.file("blob.bin", data)]

    def test_jpeg_cover_produces_png_carrier(self, manager, jpeg_test_image, temp_directory):
        carrier = temp_directory / "carrier.png"
        manager.hide(jpeg_test_image, carrier, message="from a jpeg")
        with Image.open(carrier) as img:
            assert img.format == "PNG"
        assert manager.read_payloads(carrier) == [Payload.message(b"from a jpeg")]

    def test_rgba_cover_keeps_alpha(self, manager, rgba_test_image, temp_directory):
        carrier = temp_directory / "carrier.png"
        manager.hide(rgba_test_image, carrier, message="alpha")
        with Image.open(carrier) as out, Image.open(rgba_test_image) as src:
            assert out.mode == "RGBA"
            assert np.array_equal(np.asarray(out)[:, :, 3], np.asarray(src)[:, :, 3])
        assert manager.read_payloads(carrier) == [Payload.message(b"alpha")]

    def test_grayscale_cover(self, manager, grayscale_test_image, temp_directory):
        carrier = temp_directory / "carrier.png"
        manager.hide(grayscale_test_image, carrier, message="gray")
        with Image.open(carrier) as img:
            assert img.mode == "L"
        assert manager.read_payloads(carrier) == [Payload.message(b"gray")]

    def test_pixels_beyond_container_unchanged(self, manager, test_image, temp_directory):
        carrier = temp_directory / "carrier.png"
        result = manager.hide(test_image, carrier, message="x" * 50)

        before = np.asarray(Image.open(test_image)).reshape(-1)
        after = np.asarray(Image.open(carrier)).reshape(-1)
        used = result.container_bytes * 8
        assert np.array_equal(before[used:], after[used:])

    def test_re_hide_overwrites_previous_data(self, manager, test_image, temp_directory):
        first = temp_directory / "first.png"
        second = temp_directory / "second.png"
        manager.hide(test_image, first, message="old message that is longer")
        manager.hide(first, second, message="new")
        assert manager.read_payloads(second) == [Payload.message(b"new")]

    def test_unveil_raw_matches_container(self, manager, test_image, sample_files, temp_directory):
        carrier = temp_directory / "carrier.png"
        raw = temp_directory / "dump" / "container.bin"
        result = manager.hide(test_image, carrier, files=sample_files)

        unveiled = manager.unveil_raw(carrier, raw)
        assert unveiled.container_bytes == result.container_bytes
        assert raw.read_bytes() == manager.read_container(carrier)


class TestCapacityAndFailures:
    """Boundary and failure behavior through the manager."""

    def test_capacity_report(self, manager, test_image):
        report = manager.capacity(test_image)
        assert report.capacity_bits == 30000
        assert report.capacity_bytes == 3750
        assert report.max_message_bytes == 3750 - 11 - 5
        assert report.max_file_bytes("f.bin") == 3750 - 11 - 7 - 5
        assert "max_file_bytes" not in report.to_dict()
        assert report.to_dict(file_name="f.bin")["max_file_bytes"] == report.max_file_bytes("f.bin")

    def test_exact_fit_and_one_byte_over(self, manager, test_image, temp_directory):
        report = manager.capacity(test_image)
        size = report.max_file_bytes("f.bin")

        fits = temp_directory / "fits" / "f.bin"
        fits.parent.mkdir()
        fits.write_bytes(b"\x5a" * size)
        result = manager.hide(test_image, temp_directory / "ok.png", files=[fits])
        assert result.container_bytes == report.capacity_bytes

        over = temp_directory / "over" / "f.bin"
        over.parent.mkdir()
        over.write_bytes(b"\x5a" * (size + 1))
        target = temp_directory / "too_big.png"
        with pytest.raises(CapacityExceeded) as exc:
            manager.hide(test_image, target, files=[over])
        assert exc.value.available_bits == 30000
        assert not target.exists()

    def test_unreadable_payload_aborts(self, manager, test_image, sample_files, temp_directory):
        target = temp_directory / "carrier.png"
        with pytest.raises(PayloadUnreadable):
            manager.hide(test_image, target, files=sample_files + [temp_directory / "missing"])
        assert not target.exists()

    def test_plain_image_is_rejected(self, manager, test_image, temp_directory):
        with pytest.raises(ExtractionError):
            manager.unveil(test_image, temp_directory / "out")
        assert not (temp_directory / "out").exists()
