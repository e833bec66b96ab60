"""
Veilpix Package

Hide files and short messages in the least significant bits of an image's
pixels, and recover them exactly. Output carriers are always PNG.

Subpackages:
    codec: Container framing, LSB bit codec and image adapter

Modules:
    payload: Reading inputs and writing unveiled entries
    manager: hide / unveil / unveil_raw / capacity operations
    config: Runtime configuration
    errors: Error hierarchy
    cli: Command line interface

Version: 1.0.0
"""

__version__ = "1.0.0"

from . import codec
from .config import StegoConfig
from .errors import (
    StegoError,
    EncodingError,
    TooManyEntries,
    NameTooLong,
    EntryTooLarge,
    CapacityExceeded,
    ExtractionError,
    NotAStegoCarrier,
    UnsupportedVersion,
    TruncatedContainer,
    MalformedContainer,
    PayloadError,
    PayloadUnreadable,
    WriteTargetConflict,
    UnsafeEntryName,
    CarrierUnreadable,
)
from .manager import SteganoManager, HideResult, UnveilResult, CapacityReport

__all__ = [
    'codec',
    'StegoConfig',
    'SteganoManager',
    'HideResult',
    'UnveilResult',
    'CapacityReport',
    'StegoError',
    'EncodingError',
    'TooManyEntries',
    'NameTooLong',
    'EntryTooLarge',
    'CapacityExceeded',
    'ExtractionError',
    'NotAStegoCarrier',
    'UnsupportedVersion',
    'TruncatedContainer',
    'MalformedContainer',
    'PayloadError',
    'PayloadUnreadable',
    'WriteTargetConflict',
    'UnsafeEntryName',
    'CarrierUnreadable',
]
