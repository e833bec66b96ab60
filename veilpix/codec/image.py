"""
Image Codec Adapter.

Turns image files into CarrierBuffers and CarrierBuffers back into PNG.

Any format Pillow can decode is accepted as a source, lossy ones included.
Output is always PNG, since LSB data does not survive lossy re-compression.

Normalization:
    - "L" (8-bit grayscale) stays single-channel
    - modes with transparency become RGB samples plus an alpha plane; the
      alpha plane is restored on output but never carries payload bits
    - everything else is converted to RGB
"""

import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..errors import CarrierUnreadable
from .lsb import CarrierBuffer


logger = logging.getLogger(__name__)


LOSSLESS_FORMATS = frozenset({"PNG", "BMP", "GIF", "TIFF", "PPM", "TGA", "ICO", "PCX", "SGI", "QOI"})

_ALPHA_MODES = frozenset({"RGBA", "LA", "PA", "La", "RGBa"})


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in _ALPHA_MODES or (img.mode == "P" and "transparency" in img.info)


def carrier_from_image(img: Image.Image) -> CarrierBuffer:
    """Normalize a Pillow image into a CarrierBuffer."""
    width, height = img.size

    if img.mode == "L":
        arr = np.asarray(img, dtype=np.uint8)
        return CarrierBuffer(width, height, 1, arr)

    if _has_alpha(img):
        arr = np.asarray(img.convert("RGBA"), dtype=np.uint8)
        return CarrierBuffer(width, height, 3, arr[:, :, :3], alpha=arr[:, :, 3])

    arr = np.asarray(img.convert("RGB"), dtype=np.uint8)
    return CarrierBuffer(width, height, 3, arr)


def image_from_carrier(carrier: CarrierBuffer) -> Image.Image:
    """Rebuild an L, RGB or RGBA Pillow image from a CarrierBuffer."""
    arr = carrier.to_array()
    if carrier.channels == 1:
        return Image.fromarray(arr[:, :, 0])
    if carrier.alpha is not None:
        alpha = carrier.alpha.reshape(carrier.height, carrier.width, 1)
        return Image.fromarray(np.concatenate((arr, alpha), axis=2))
    return Image.fromarray(arr)


def decode_image(data: bytes, warn_on_lossy: bool = True) -> CarrierBuffer:
    """
    Decode encoded image bytes into a CarrierBuffer.

    Args:
        data: Encoded image (PNG, JPEG, BMP, ...).
        warn_on_lossy: Log a warning when the source format is lossy.

    Raises:
        CarrierUnreadable: Pillow cannot identify or decode the data.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            source_format = img.format
            carrier = carrier_from_image(img)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise CarrierUnreadable(f"Cannot decode carrier image: {e}") from e

    if warn_on_lossy and source_format not in LOSSLESS_FORMATS:
        logger.warning(
            f"Carrier source format {source_format} may be lossy; output will be PNG regardless"
        )
    logger.debug(
        f"Decoded {source_format} carrier {carrier.width}x{carrier.height}, "
        f"{carrier.channels} channel(s), alpha={'yes' if carrier.alpha is not None else 'no'}"
    )
    return carrier


def load_carrier(path: Union[str, Path], warn_on_lossy: bool = True) -> CarrierBuffer:
    """Read an image file from disk and decode it into a CarrierBuffer."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise CarrierUnreadable(f"Cannot read carrier image {path}: {e}", details={"path": str(path)}) from e
    return decode_image(data, warn_on_lossy=warn_on_lossy)


def encode_png(carrier: CarrierBuffer) -> bytes:
    """Encode a CarrierBuffer as PNG bytes."""
    buffer = io.BytesIO()
    image_from_carrier(carrier).save(buffer, format="PNG")
    return buffer.getvalue()


def write_png(carrier: CarrierBuffer, path: Union[str, Path]) -> Path:
    """
    Write a CarrierBuffer to path as PNG.

    The image is fully encoded in memory, written to a temporary file next to
    the target and moved into place, so a failure leaves no partial output.
    """
    path = Path(path)
    if path.suffix.lower() != ".png":
        logger.warning(f"Output {path} does not end in .png; writing PNG data anyway")

    data = encode_png(carrier)
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path
