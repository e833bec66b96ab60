"""
Container Format Module.

This module frames an ordered list of payloads into the single byte stream
that is embedded in a carrier image, and parses that stream back.

Wire format (version 1, all integers unsigned big-endian):

    Header (HEADER_SIZE = 11 bytes)
        magic        4 bytes   b"VPIX"
        version      1 byte    1
        entry_count  2 bytes
        body_length  4 bytes   number of bytes following the header

    Entry (entry_count times)
        kind         1 byte    1 = FILE, 2 = MESSAGE
        name_length  2 bytes   FILE only
        name         n bytes   FILE only, UTF-8
        content_len  4 bytes
        content      content_len bytes

Entries are written and read in the same order. body_length must equal the
total size of all entries; the decoder rejects any mismatch.
"""

import logging
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import (
    EntryTooLarge,
    MalformedContainer,
    NameTooLong,
    NotAStegoCarrier,
    TooManyEntries,
    TruncatedContainer,
    UnsupportedVersion,
)


logger = logging.getLogger(__name__)


MAGIC = b"VPIX"
FORMAT_VERSION = 1

_HEADER = struct.Struct(">4sBHI")
_KIND = struct.Struct(">B")
_NAME_LENGTH = struct.Struct(">H")
_CONTENT_LENGTH = struct.Struct(">I")

HEADER_SIZE = _HEADER.size
MAX_ENTRIES = 0xFFFF
MAX_NAME_BYTES = 0xFFFF
MAX_CONTENT_BYTES = 0xFFFFFFFF
MAX_BODY_BYTES = 0xFFFFFFFF


class EntryKind(Enum):
    """Entry discriminator. Values are the on-wire kind byte."""

    FILE = 1
    MESSAGE = 2


@dataclass(frozen=True)
class Payload:
    """
    One entry of a container.

    FILE payloads carry the name they are restored under. MESSAGE payloads
    carry no name; the output file name is chosen when they are materialized.

    Attributes:
        kind: Entry discriminator
        content: Raw payload bytes (may be empty for FILE entries only)
        name: File name for FILE entries, None for MESSAGE entries

    Example:
        >>> Payload.file("notes.txt", b"abc")
        >>> Payload.message("hi".encode("utf-8"))
    """

    kind: EntryKind
    content: bytes
    name: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.content, bytes):
            object.__setattr__(self, "content", bytes(self.content))
        if self.kind is EntryKind.FILE:
            if not isinstance(self.name, str) or not self.name:
                raise ValueError("FILE payloads need a non-empty name")
        else:
            if self.name is not None:
                raise ValueError("MESSAGE payloads do not carry a name")
            if not self.content:
                raise ValueError("MESSAGE payloads cannot be empty")

    @classmethod
    def file(cls, name: str, content: bytes) -> 'Payload':
        return cls(EntryKind.FILE, content, name)

    @classmethod
    def message(cls, content: bytes) -> 'Payload':
        return cls(EntryKind.MESSAGE, content)

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


@dataclass(frozen=True)
class ContainerHeader:
    """Fixed-size container header."""

    version: int
    entry_count: int
    body_length: int

    @property
    def container_length(self) -> int:
        """Total container size in bytes, header included."""
        return HEADER_SIZE + self.body_length

    def to_bytes(self) -> bytes:
        return _HEADER.pack(MAGIC, self.version, self.entry_count, self.body_length)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ContainerHeader':
        """
        Parse and validate a header from the first HEADER_SIZE bytes of data.

        Raises:
            NotAStegoCarrier: If data is shorter than a header or the magic
                does not match.
            UnsupportedVersion: If the version has no registered decoder.
        """
        if len(data) < HEADER_SIZE:
            raise NotAStegoCarrier(
                f"Need {HEADER_SIZE} header bytes, got {len(data)}",
                details={"available_bytes": len(data)},
            )
        magic, version, entry_count, body_length = _HEADER.unpack_from(data)
        if magic != MAGIC:
            raise NotAStegoCarrier("No container signature found", details={"magic": magic.hex()})
        if version not in _ENTRY_READERS:
            raise UnsupportedVersion(version)
        return cls(version, entry_count, body_length)


# =============================================================================
# ENCODING
# =============================================================================

def _encode_name(name: str) -> bytes:
    raw = name.encode("utf-8")
    if len(raw) > MAX_NAME_BYTES:
        raise NameTooLong(
            f"File name is {len(raw)} bytes, limit is {MAX_NAME_BYTES}",
            details={"name": name[:64], "length": len(raw)},
        )
    return raw


def _frame_entry(payload: Payload) -> bytes:
    if len(payload.content) > MAX_CONTENT_BYTES:
        raise EntryTooLarge(
            f"Entry is {len(payload.content)} bytes, limit is {MAX_CONTENT_BYTES}",
            details={"length": len(payload.content)},
        )
    parts = [_KIND.pack(payload.kind.value)]
    if payload.is_file:
        raw_name = _encode_name(payload.name)
        parts.append(_NAME_LENGTH.pack(len(raw_name)))
        parts.append(raw_name)
    parts.append(_CONTENT_LENGTH.pack(len(payload.content)))
    parts.append(payload.content)
    return b"".join(parts)


def entry_size(payload: Payload) -> int:
    """Encoded size of a single entry, framing included."""
    size = _KIND.size + _CONTENT_LENGTH.size + len(payload.content)
    if payload.is_file:
        size += _NAME_LENGTH.size + len(payload.name.encode("utf-8"))
    return size


def container_size(payloads: Iterable[Payload]) -> int:
    """Encoded container size in bytes without building the stream."""
    return HEADER_SIZE + sum(entry_size(p) for p in payloads)


def encode_container(payloads: Iterable[Payload]) -> bytes:
    """
    Frame payloads into a single container byte stream.

    Entries are written in the order given; the header's body_length is
    filled in once all entries are framed.

    Args:
        payloads: Ordered payloads to frame.

    Returns:
        The complete container (header followed by all entries).

    Raises:
        TooManyEntries: More than MAX_ENTRIES payloads.
        NameTooLong: A FILE name encodes to more than MAX_NAME_BYTES.
        EntryTooLarge: A content or the whole body overflows its length field.
    """
    payloads = list(payloads)
    if len(payloads) > MAX_ENTRIES:
        raise TooManyEntries(
            f"{len(payloads)} entries requested, limit is {MAX_ENTRIES}",
            details={"count": len(payloads)},
        )

    body = b"".join(_frame_entry(p) for p in payloads)
    if len(body) > MAX_BODY_BYTES:
        raise EntryTooLarge(
            f"Container body is {len(body)} bytes, limit is {MAX_BODY_BYTES}",
            details={"length": len(body)},
        )

    header = ContainerHeader(FORMAT_VERSION, len(payloads), len(body))
    logger.debug(f"Encoded container: {len(payloads)} entries, {header.container_length} bytes")
    return header.to_bytes() + body


# =============================================================================
# DECODING
# =============================================================================

class _Reader:
    """Bounds-checked sequential reader over the container body."""

    def __init__(self, data: bytes):
        self._data = data
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset

    def take(self, size: int, what: str) -> bytes:
        end = self.offset + size
        if end > len(self._data):
            raise TruncatedContainer(
                f"Container ends while reading {what}: need {size} bytes at offset "
                f"{HEADER_SIZE + self.offset}, {self.remaining} left",
                details={"offset": HEADER_SIZE + self.offset, "needed": size, "available": self.remaining},
            )
        chunk = self._data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, fmt: struct.Struct, what: str) -> int:
        return fmt.unpack(self.take(fmt.size, what))[0]


def _read_entries_v1(body: bytes, entry_count: int) -> List[Payload]:
    reader = _Reader(body)
    payloads = []
    for index in range(entry_count):
        kind_value = reader.unpack(_KIND, f"kind of entry {index}")
        try:
            kind = EntryKind(kind_value)
        except ValueError:
            raise MalformedContainer(
                f"Entry {index} has unknown kind {kind_value}",
                details={"entry": index, "kind": kind_value},
            ) from None

        name = None
        if kind is EntryKind.FILE:
            name_length = reader.unpack(_NAME_LENGTH, f"name length of entry {index}")
            raw_name = reader.take(name_length, f"name of entry {index}")
            try:
                name = raw_name.decode("utf-8")
            except UnicodeDecodeError:
                raise MalformedContainer(
                    f"Name of entry {index} is not valid UTF-8", details={"entry": index}
                ) from None
            if not name:
                raise MalformedContainer(f"Entry {index} has an empty name", details={"entry": index})

        content_length = reader.unpack(_CONTENT_LENGTH, f"content length of entry {index}")
        if kind is EntryKind.MESSAGE and content_length == 0:
            raise MalformedContainer(f"Message entry {index} is empty", details={"entry": index})
        content = reader.take(content_length, f"content of entry {index}")
        payloads.append(Payload(kind, content, name))

    if reader.remaining:
        raise MalformedContainer(
            f"{reader.remaining} bytes left after {entry_count} entries",
            details={"leftover": reader.remaining},
        )
    return payloads


_ENTRY_READERS: Dict[int, Callable[[bytes, int], List[Payload]]] = {
    1: _read_entries_v1,
}


def decode_container(data: bytes) -> List[Payload]:
    """
    Parse a container byte stream back into its payloads.

    Bytes past the declared container length are ignored.

    Args:
        data: Container bytes, typically the output of extract_container.

    Returns:
        Payloads in the order they were encoded.

    Raises:
        NotAStegoCarrier: Missing or foreign header.
        UnsupportedVersion: Header version has no decoder.
        TruncatedContainer: Stream ends before all declared bytes.
        MalformedContainer: Unknown entry kind, bad name, or entries that do
            not add up to the declared body length.
    """
    data = bytes(data)
    header = ContainerHeader.from_bytes(data)
    body = data[HEADER_SIZE:header.container_length]
    if len(body) < header.body_length:
        raise TruncatedContainer(
            f"Header declares {header.body_length} body bytes, only {len(body)} present",
            details={"declared": header.body_length, "available": len(body)},
        )

    payloads = _ENTRY_READERS[header.version](body, header.entry_count)
    logger.debug(f"Decoded container v{header.version}: {len(payloads)} entries")
    return payloads
