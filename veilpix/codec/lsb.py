"""
LSB Bit Codec Module.

This module maps container bytes onto the least significant bits of a
carrier's channel samples, and reads them back.

Wire contract:
    - Scan order: row-major over pixels, channel-interleaved within a pixel
      (C-order flattening of a height x width x channels array).
    - Bit order: most significant bit first. Bit j of container byte k
      (j = 0 is 0x80) goes into the LSB of sample 8 * k + j.
    - Samples past the last container bit are never modified.

One payload bit consumes exactly one sample, so a carrier of N samples holds
at most N bits.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from ..errors import CapacityExceeded, NotAStegoCarrier, TruncatedContainer
from .container import HEADER_SIZE, ContainerHeader


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CarrierBuffer:
    """
    Flat view of an image's channel samples.

    Attributes:
        width: Image width in pixels
        height: Image height in pixels
        channels: Samples per pixel (1 for grayscale, 3 for RGB)
        samples: 1-D uint8 array in scan order
        alpha: Optional 1-D uint8 alpha plane, carried through untouched
    """

    width: int
    height: int
    channels: int
    samples: np.ndarray
    alpha: Optional[np.ndarray] = None

    def __post_init__(self):
        samples = np.ascontiguousarray(self.samples, dtype=np.uint8).reshape(-1)
        expected = self.width * self.height * self.channels
        if samples.size != expected:
            raise ValueError(
                f"Carrier of {self.width}x{self.height}x{self.channels} needs {expected} samples, got {samples.size}"
            )
        object.__setattr__(self, "samples", samples)

        if self.alpha is not None:
            alpha = np.ascontiguousarray(self.alpha, dtype=np.uint8).reshape(-1)
            if alpha.size != self.width * self.height:
                raise ValueError(f"Alpha plane needs {self.width * self.height} samples, got {alpha.size}")
            object.__setattr__(self, "alpha", alpha)

    @property
    def bit_capacity(self) -> int:
        """Number of payload bits the carrier can hold."""
        return int(self.samples.size)

    @property
    def byte_capacity(self) -> int:
        return self.bit_capacity // 8

    def to_array(self) -> np.ndarray:
        """Samples shaped as (height, width, channels)."""
        return self.samples.reshape(self.height, self.width, self.channels)


def embed_container(carrier: CarrierBuffer, container: bytes) -> CarrierBuffer:
    """
    Substitute container bits into the carrier's sample LSBs.

    Args:
        carrier: Source carrier; it is not modified.
        container: Bytes to embed.

    Returns:
        A new CarrierBuffer of identical shape. Only the first
        8 * len(container) samples can differ from the source, and only in
        their least significant bit.

    Raises:
        CapacityExceeded: The container needs more bits than the carrier
            has. Raised before any copy is made.
    """
    required_bits = len(container) * 8
    if required_bits > carrier.bit_capacity:
        raise CapacityExceeded(required_bits, carrier.bit_capacity)

    bits = np.unpackbits(np.frombuffer(container, dtype=np.uint8), bitorder="big")
    samples = carrier.samples.copy()
    samples[:required_bits] = (samples[:required_bits] & 0xFE) | bits

    logger.debug(f"Embedded {required_bits} bits into {carrier.bit_capacity} available")
    return replace(carrier, samples=samples)


def extract_bytes(carrier: CarrierBuffer, offset: int, count: int) -> bytes:
    """
    Read count bytes starting at byte position offset of the embedded stream.

    Raises:
        TruncatedContainer: The carrier ends before the requested bytes.
    """
    start = offset * 8
    stop = start + count * 8
    if stop > carrier.bit_capacity:
        raise TruncatedContainer(
            f"Carrier holds {carrier.bit_capacity} bits, reading bytes {offset}..{offset + count} needs {stop}",
            details={"required_bits": stop, "available_bits": carrier.bit_capacity},
        )
    bits = carrier.samples[start:stop] & 1
    return np.packbits(bits, bitorder="big").tobytes()


def extract_container(carrier: CarrierBuffer) -> bytes:
    """
    Recover the embedded container from a carrier.

    Reads the fixed-size header first to learn the declared length, then
    reads exactly that many further bytes. The rest of the carrier is never
    touched.

    Returns:
        The raw container bytes (header included).

    Raises:
        NotAStegoCarrier: Carrier too small for a header, or no signature.
        UnsupportedVersion: Header names an unknown format version.
        TruncatedContainer: The declared body runs past the carrier's end.
    """
    if carrier.bit_capacity < HEADER_SIZE * 8:
        raise NotAStegoCarrier(
            f"Carrier holds {carrier.bit_capacity} bits, a header needs {HEADER_SIZE * 8}",
            details={"available_bits": carrier.bit_capacity},
        )

    head = extract_bytes(carrier, 0, HEADER_SIZE)
    header = ContainerHeader.from_bytes(head)
    body = extract_bytes(carrier, HEADER_SIZE, header.body_length)

    logger.debug(f"Extracted container of {header.container_length} bytes ({header.entry_count} entries)")
    return head + body
