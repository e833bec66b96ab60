"""
Veilpix Configuration.

Runtime settings shared by the manager and the CLI. Defaults cover normal
use; a JSON file can override any field.
"""

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Union


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class StegoConfig:
    """
    Configuration for hide and unveil operations.

    Attributes:
        message_filename: File name used when a MESSAGE entry is unveiled
        log_level: Logging level name applied by the CLI
        warn_on_lossy_input: Log a warning when the carrier was decoded
            from a lossy format such as JPEG
    """

    message_filename: str = "message.txt"
    log_level: str = "WARNING"
    warn_on_lossy_input: bool = True

    def __post_init__(self):
        if not isinstance(self.message_filename, str):
            raise ValueError(f"message_filename must be a string, got {self.message_filename!r}")
        if not isinstance(self.log_level, str):
            raise ValueError(f"log_level must be a string, got {self.log_level!r}")
        if not isinstance(self.warn_on_lossy_input, bool):
            raise ValueError(f"warn_on_lossy_input must be true or false, got {self.warn_on_lossy_input!r}")

        name = self.message_filename
        if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
            raise ValueError(f"message_filename must be a bare file name, got {name!r}")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def default(cls) -> 'StegoConfig':
        """Get default configuration."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StegoConfig':
        """Create configuration from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'StegoConfig':
        """Load configuration from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a JSON object")
        return cls.from_dict(data)
