# Veilpix Test Configuration
# This file contains test settings and fixtures

import logging

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def reset_package_logger():
    """Undo log level changes made by CLI runs."""
    yield
    logging.getLogger('veilpix').setLevel(logging.NOTSET)


@pytest.fixture
def temp_directory(tmp_path):
    """Provide a temporary directory for test operations."""
    return tmp_path


def make_rgb_array(height=100, width=100, seed=7):
    """Noisy RGB pixels so every LSB value occurs."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


@pytest.fixture
def test_image(temp_directory):
    """Create a 100x100 RGB PNG (30000 bits of capacity)."""
    img_path = temp_directory / "cover.png"
    Image.fromarray(make_rgb_array()).save(str(img_path))
    return img_path


@pytest.fixture
def rgba_test_image(temp_directory):
    """Create a 64x64 RGBA PNG with a gradient alpha channel."""
    img_array = np.zeros((64, 64, 4), dtype=np.uint8)
    img_array[:, :, :3] = make_rgb_array(64, 64, seed=11)
    img_array[:, :, 3] = np.arange(64, dtype=np.uint8)[None, :] * 4
    img_path = temp_directory / "cover_rgba.png"
    Image.fromarray(img_array).save(str(img_path))
    return img_path


@pytest.fixture
def grayscale_test_image(temp_directory):
    """Create a 50x40 8-bit grayscale PNG."""
    img_array = make_rgb_array(40, 50, seed=3)[:, :, 0]
    img_path = temp_directory / "cover_gray.png"
    Image.fromarray(img_array).save(str(img_path))
    return img_path


@pytest.fixture
def jpeg_test_image(temp_directory):
    """Create a lossy JPEG cover image."""
    img_path = temp_directory / "cover.jpg"
    Image.fromarray(make_rgb_array(80, 80, seed=5)).save(str(img_path), format="JPEG", quality=85)
    return img_path


@pytest.fixture
def sample_files(temp_directory):
    """The a.txt (3 bytes) / b.txt (empty) pair."""
    src = temp_directory / "src"
    src.mkdir()
    a = src / "a.txt"
    a.write_bytes(b"abc")
    b = src / "b.txt"
    b.write_bytes(b"")
    return [a, b]


@pytest.fixture
def sample_binary_data(temp_directory):
    """Provide sample binary data for testing."""
    binary_file = temp_directory / "sample.bin"
    binary_file.write_bytes(b'\x00\x01\x02\x03\x04\x05\xff\xfe\xfd')
    return binary_file
