"""
Veilpix Codec Package.

Modules:
    container: Container framing (encode/decode of FILE and MESSAGE entries)
    lsb: Bit embedding and extraction over carrier samples
    image: Pillow adapter between image files and carrier buffers

Usage:
    >>> from veilpix.codec import Payload, encode_container, embed_container
    >>> stego = embed_container(carrier, encode_container([Payload.message(b"hi")]))
    >>> decode_container(extract_container(stego))
"""

from .container import (
    EntryKind,
    Payload,
    ContainerHeader,
    FORMAT_VERSION,
    HEADER_SIZE,
    MAX_ENTRIES,
    MAX_NAME_BYTES,
    container_size,
    encode_container,
    decode_container,
)
from .lsb import CarrierBuffer, embed_container, extract_bytes, extract_container
from .image import decode_image, encode_png, load_carrier, write_png

__all__ = [
    "EntryKind",
    "Payload",
    "ContainerHeader",
    "FORMAT_VERSION",
    "HEADER_SIZE",
    "MAX_ENTRIES",
    "MAX_NAME_BYTES",
    "container_size",
    "encode_container",
    "decode_container",
    "CarrierBuffer",
    "embed_container",
    "extract_bytes",
    "extract_container",
    "decode_image",
    "encode_png",
    "load_carrier",
    "write_png",
]
