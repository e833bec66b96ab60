"""
Veilpix Error Types.

Every failure the codec can report is a subclass of StegoError. Errors carry a
human-readable message, a stable numeric code (used by the CLI and in logs)
and a details dictionary with the values that caused the failure.

Hierarchy:
    StegoError
        EncodingError       - container could not be framed
        CapacityExceeded    - container does not fit the carrier
        ExtractionError     - carrier is not (or no longer) a valid carrier
        PayloadError        - input files or output targets are unusable
        CarrierUnreadable   - carrier image could not be decoded
"""

from typing import Any, Dict, Optional


class StegoError(Exception):
    """Base exception for all veilpix errors."""

    code = 1

    def __init__(self, message: str, code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        base = f"{type(self).__name__}: {self.message}"
        if self.code:
            base += f" (Code: {self.code})"
        return base


# ============================================================================
# Encoding side
# ============================================================================

class EncodingError(StegoError):
    """The payload list cannot be represented in the container format."""


class TooManyEntries(EncodingError):
    code = 10


class NameTooLong(EncodingError):
    code = 11


class EntryTooLarge(EncodingError):
    code = 12


class CapacityExceeded(StegoError):
    """
    The container needs more bits than the carrier offers.

    Raised before any carrier byte is touched. ``required_bits`` and
    ``available_bits`` are exposed both as attributes and in ``details``.
    """

    code = 20

    def __init__(self, required_bits: int, available_bits: int):
        super().__init__(
            f"Container needs {required_bits} bits but the carrier only holds {available_bits}",
            details={"required_bits": required_bits, "available_bits": available_bits},
        )
        self.required_bits = required_bits
        self.available_bits = available_bits


# ============================================================================
# Extraction side
# ============================================================================

class ExtractionError(StegoError):
    """The carrier does not hold a readable container."""


class NotAStegoCarrier(ExtractionError):
    code = 30


class UnsupportedVersion(ExtractionError):
    code = 31

    def __init__(self, version: int):
        super().__init__(f"Unsupported container version {version}", details={"version": version})
        self.version = version


class TruncatedContainer(ExtractionError):
    code = 32


class MalformedContainer(ExtractionError):
    code = 33


# ============================================================================
# Payload I/O
# ============================================================================

class PayloadError(StegoError):
    """An input payload or an output target is unusable."""


class PayloadUnreadable(PayloadError):
    code = 40


class WriteTargetConflict(PayloadError):
    code = 41


class UnsafeEntryName(PayloadError):
    code = 42


class CarrierUnreadable(StegoError):
    code = 50
