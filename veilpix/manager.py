#!/usr/bin/env python3
"""
Veilpix Steganography Manager

This module ties the codec pieces into the three user-facing operations:

    hide        files or a message -> container -> carrier LSBs -> PNG
    unveil      PNG -> carrier LSBs -> container -> files in a directory
    unveil_raw  PNG -> carrier LSBs -> container bytes written verbatim

plus a capacity report for a given carrier image.

Every operation is a self-contained synchronous transform: inputs are read
fully, the result is built in memory and only then written. A failure at any
stage raises a StegoError subclass and leaves no output behind.

Embedding into an image that already carries data simply overwrites the old
container; no attempt is made to detect it.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .codec.container import HEADER_SIZE, EntryKind, Payload, container_size, encode_container, decode_container
from .codec.image import load_carrier, write_png
from .codec.lsb import embed_container, extract_container
from .config import StegoConfig
from .payload import collect, materialize


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class HideResult:
    """
    Outcome of a hide operation.

    Attributes:
        output_path: Written PNG carrier
        entries: Number of payload entries embedded
        container_bytes: Size of the embedded container
        capacity_bytes: Whole-byte capacity of the carrier
    """

    output_path: Path
    entries: int
    container_bytes: int
    capacity_bytes: int

    @property
    def utilization(self) -> float:
        if not self.capacity_bytes:
            return 0.0
        return self.container_bytes / self.capacity_bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            'output_path': str(self.output_path),
            'entries': self.entries,
            'container_bytes': self.container_bytes,
            'capacity_bytes': self.capacity_bytes,
            'utilization': round(self.utilization, 4),
        }


@dataclass
class UnveilResult:
    """Outcome of an unveil or unveil-raw operation."""

    written: List[Path] = field(default_factory=list)
    container_bytes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'written': [str(p) for p in self.written],
            'container_bytes': self.container_bytes,
        }


@dataclass
class CapacityReport:
    """
    Embedding capacity of a carrier image.

    Attributes:
        width, height, channels: Normalized carrier geometry
        capacity_bits: One bit per channel sample
        header_bytes: Fixed container header size
        max_message_bytes: Largest message that fits
    """

    width: int
    height: int
    channels: int
    capacity_bits: int
    header_bytes: int
    max_message_bytes: int

    @property
    def capacity_bytes(self) -> int:
        return self.capacity_bits // 8

    def max_file_bytes(self, name: str) -> int:
        """Largest single file, stored under name, that fits."""
        return max(0, self.capacity_bytes - container_size([Payload.file(name, b"")]))

    def to_dict(self, file_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Report as a dictionary. When file_name is given, the largest file
        that fits under that name is included as max_file_bytes.
        """
        report = {
            'width': self.width,
            'height': self.height,
            'channels': self.channels,
            'capacity_bits': self.capacity_bits,
            'capacity_bytes': self.capacity_bytes,
            'header_bytes': self.header_bytes,
            'max_message_bytes': self.max_message_bytes,
        }
        if file_name is not None:
            report['file_name'] = file_name
            report['max_file_bytes'] = self.max_file_bytes(file_name)
        return report


class SteganoManager:
    """
    Single entry point for hide, unveil and capacity operations.

    Example:
        >>> manager = SteganoManager()
        >>> manager.hide("cover.jpg", "carrier.png", files=["a.txt", "b.txt"])
        >>> manager.unveil("carrier.png", "restored/")
    """

    def __init__(self, config: Optional[StegoConfig] = None):
        self._config = config or StegoConfig.default()

    @property
    def config(self) -> StegoConfig:
        return self._config

    def hide_payloads(self, carrier_path: PathLike, output_path: PathLike, payloads: Sequence[Payload]) -> HideResult:
        """
        Embed an already collected payload list into a carrier image.

        Raises:
            CarrierUnreadable: The carrier image cannot be decoded.
            EncodingError: The payloads cannot be framed.
            CapacityExceeded: The container does not fit the carrier.
        """
        carrier = load_carrier(carrier_path, warn_on_lossy=self._config.warn_on_lossy_input)
        container = encode_container(payloads)
        stego = embed_container(carrier, container)
        output_path = write_png(stego, output_path)

        result = HideResult(
            output_path=output_path,
            entries=len(payloads),
            container_bytes=len(container),
            capacity_bytes=carrier.byte_capacity,
        )
        logger.info(
            f"Hid {result.entries} entr{'y' if result.entries == 1 else 'ies'} "
            f"({result.container_bytes} bytes, {result.utilization:.1%} of capacity) in {output_path}"
        )
        return result

    def hide(
        self,
        carrier_path: PathLike,
        output_path: PathLike,
        files: Optional[Sequence[PathLike]] = None,
        message: Optional[str] = None,
    ) -> HideResult:
        """
        Hide files or a message in carrier_path and write the PNG carrier.

        Args:
            carrier_path: Source image, any format Pillow decodes.
            output_path: Destination PNG.
            files: Files to hide, restored under their base names.
            message: Text message to hide instead of files.
        """
        payloads = collect(files=files, message=message)
        return self.hide_payloads(carrier_path, output_path, payloads)

    def read_container(self, carrier_path: PathLike) -> bytes:
        """Extract the raw container bytes from a carrier image."""
        carrier = load_carrier(carrier_path, warn_on_lossy=self._config.warn_on_lossy_input)
        return extract_container(carrier)

    def read_payloads(self, carrier_path: PathLike) -> List[Payload]:
        """Extract and decode the payloads embedded in a carrier image."""
        return decode_container(self.read_container(carrier_path))

    def unveil(self, carrier_path: PathLike, output_dir: PathLike) -> UnveilResult:
        """
        Restore every hidden entry of carrier_path into output_dir.

        Messages are written to the configured message file name.
        """
        container = self.read_container(carrier_path)
        payloads = decode_container(container)
        written = materialize(payloads, output_dir, self._config.message_filename)

        messages = sum(1 for p in payloads if p.kind is EntryKind.MESSAGE)
        logger.info(
            f"Unveiled {len(payloads) - messages} file(s) and {messages} message(s) from {carrier_path}"
        )
        return UnveilResult(written=written, container_bytes=len(container))

    def unveil_raw(self, carrier_path: PathLike, output_path: PathLike) -> UnveilResult:
        """Write the extracted container bytes to output_path without decoding them."""
        container = self.read_container(carrier_path)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(container)

        logger.info(f"Wrote {len(container)} raw container bytes to {output_path}")
        return UnveilResult(written=[output_path], container_bytes=len(container))

    def capacity(self, carrier_path: PathLike) -> CapacityReport:
        """Report how much data carrier_path can hold."""
        carrier = load_carrier(carrier_path, warn_on_lossy=False)
        # a message needs at least one content byte
        message_overhead = container_size([Payload.message(b"\x00")]) - 1
        return CapacityReport(
            width=carrier.width,
            height=carrier.height,
            channels=carrier.channels,
            capacity_bits=carrier.bit_capacity,
            header_bytes=HEADER_SIZE,
            max_message_bytes=max(0, carrier.byte_capacity - message_overhead),
        )
