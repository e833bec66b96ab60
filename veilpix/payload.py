"""
Payload Collection and Materialization.

The hide side turns file paths or a text message into the ordered payload
list the container encoder consumes. The unveil side writes decoded payloads
into an output directory.

A hide operation carries either one or more files, or exactly one message.
Every input is read before anything is encoded, and every output target is
resolved and checked before anything is written, so neither side leaves
partial results behind.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .codec.container import Payload
from .errors import PayloadUnreadable, UnsafeEntryName, WriteTargetConflict


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ============================================================================
# Collection (hide side)
# ============================================================================

def collect_files(paths: Iterable[PathLike]) -> List[Payload]:
    """
    Read each path into a FILE payload named after the file's base name.

    Raises:
        ValueError: If no paths are given.
        PayloadUnreadable: If any path is missing, not a regular file or
            cannot be read. No payloads are returned in that case.
    """
    paths = [Path(p) for p in paths]
    if not paths:
        raise ValueError("At least one file is required")

    payloads = []
    for path in paths:
        if not path.is_file():
            raise PayloadUnreadable(f"Not a readable file: {path}", details={"path": str(path)})
        try:
            content = path.read_bytes()
        except OSError as e:
            raise PayloadUnreadable(f"Cannot read {path}: {e}", details={"path": str(path)}) from e
        payloads.append(Payload.file(path.name, content))
        logger.debug(f"Collected {path} ({len(content)} bytes)")

    return payloads


def collect_message(text: str, encoding: str = "utf-8") -> List[Payload]:
    """Wrap a text message as a single MESSAGE payload."""
    if not text:
        raise ValueError("Message is empty")
    return [Payload.message(text.encode(encoding))]


def collect(files: Optional[Sequence[PathLike]] = None, message: Optional[str] = None) -> List[Payload]:
    """
    Build the payload list for one hide operation.

    Exactly one of files and message must be given.
    """
    if files and message is not None:
        raise ValueError("Provide either files or a message, not both")
    if files:
        return collect_files(files)
    if message is not None:
        return collect_message(message)
    raise ValueError("Nothing to hide: provide files or a message")


# ============================================================================
# Materialization (unveil side)
# ============================================================================

def _check_entry_name(name: str) -> None:
    if (
        name in (".", "..")
        or "/" in name
        or "\\" in name
        or "\x00" in name
        or os.path.isabs(name)
        or os.path.splitdrive(name)[0]
    ):
        raise UnsafeEntryName(f"Refusing to write entry named {name!r}", details={"name": name})


def resolve_targets(
    payloads: Sequence[Payload],
    output_dir: PathLike,
    message_filename: str,
) -> List[Tuple[Payload, Path]]:
    """
    Map each payload to the path it will be written to.

    FILE entries keep their stored name; MESSAGE entries use
    message_filename.

    Raises:
        UnsafeEntryName: A stored name would escape output_dir.
        WriteTargetConflict: Two entries resolve to the same path, or a
            target already exists and is not a regular file.
    """
    output_dir = Path(output_dir)
    seen = {}
    targets = []
    for index, payload in enumerate(payloads):
        name = payload.name if payload.is_file else message_filename
        _check_entry_name(name)

        key = os.path.normcase(name).casefold()
        if key in seen:
            raise WriteTargetConflict(
                f"Entries {seen[key]} and {index} would both be written to {name!r}",
                details={"name": name, "entries": [seen[key], index]},
            )
        seen[key] = index

        path = output_dir / name
        if path.exists() and not path.is_file():
            raise WriteTargetConflict(
                f"Entry {index} target {path} exists and is not a regular file",
                details={"name": name, "path": str(path)},
            )
        targets.append((payload, path))
    return targets


def materialize(
    payloads: Sequence[Payload],
    output_dir: PathLike,
    message_filename: str = "message.txt",
) -> List[Path]:
    """
    Write decoded payloads into output_dir, creating it if needed.

    All targets are validated first; nothing is written when any of them is
    unsafe or conflicting. If a write fails part way, the files already
    written by this call are removed before the error propagates.

    Returns:
        Written paths, in payload order.
    """
    targets = resolve_targets(payloads, output_dir, message_filename)
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    written = []
    try:
        for payload, path in targets:
            path.write_bytes(payload.content)
            written.append(path)
            logger.info(f"Wrote {path} ({len(payload.content)} bytes)")
    except OSError:
        for path in written:
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove partial output {path}: {e}")
        raise
    return written
