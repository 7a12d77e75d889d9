"""File I/O for the generation pipeline.

Reads are wrapped so that OS errors become FileAccessError naming the path.
Destinations are opened as scoped handles, either truncating in place or
through a temporary file that is renamed over the destination on success.
"""

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from codegen.errors import FileAccessError, Phase

logger = logging.getLogger(__name__)


def read_bytes(path: Path, phase: Phase = Phase.READ, kind: str = "file") -> bytes:
    """Read a file's raw content.

    Args:
        path: File to read
        phase: Phase reported on failure
        kind: What the file is, for the error message ("input file", ...)

    Raises:
        FileAccessError: If the file cannot be read
    """
    try:
        return path.read_bytes()
    except OSError as e:
        raise FileAccessError(
            f"failed to read {kind} '{path}': {e}", path=path, phase=phase
        ) from e


def read_text(path: Path, phase: Phase = Phase.READ, kind: str = "file") -> str:
    """Read a UTF-8 text file.

    Raises:
        FileAccessError: If the file cannot be read or decoded
    """
    content = read_bytes(path, phase, kind)
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FileAccessError(
            f"failed to read {kind} '{path}': {e}", path=path, phase=phase
        ) from e


def _create_error(path: Path, e: OSError) -> FileAccessError:
    return FileAccessError(
        f"failed to create output file '{path}': {e}",
        path=path,
        phase=Phase.CREATE_OUTPUT,
    )


def _close(handle: TextIO, path: Path, sync: bool = False) -> None:
    """Flush and close a destination handle.

    Buffered bytes reach the disk here, so a full disk or exceeded quota
    surfaces on close rather than on write.
    """
    try:
        try:
            if sync:
                handle.flush()
                os.fsync(handle.fileno())
        finally:
            handle.close()
    except OSError as e:
        raise FileAccessError(
            f"failed to write output file '{path}': {e}",
            path=path,
            phase=Phase.CREATE_OUTPUT,
        ) from e


@contextmanager
def open_destination(
    path: Path,
    atomic: bool = False,
    make_dirs: bool = False,
    file_mode: int = 0o644,
) -> Iterator[TextIO]:
    """Open a destination file for writing, closing it on every exit path.

    In the default mode the file is truncated or created up front and bytes
    written before a failure stay on disk. With atomic=True the content goes
    to a temporary file in the same directory and replaces the destination
    only when the block completes; on failure the destination is untouched.

    Args:
        path: Destination file
        atomic: Write through a temporary file and os.replace
        make_dirs: Create missing parent directories
        file_mode: Permissions of a destination written atomically

    Raises:
        FileAccessError: If the destination cannot be created, flushed or replaced
    """
    if make_dirs:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise _create_error(path, e) from e

    if not atomic:
        try:
            handle = open(path, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise _create_error(path, e) from e
        try:
            yield handle
        finally:
            _close(handle, path)
        return

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    except OSError as e:
        raise _create_error(path, e) from e

    try:
        tmp = os.fdopen(fd, "w", encoding="utf-8", newline="")
        completed = False
        try:
            yield tmp
            completed = True
        finally:
            _close(tmp, path, sync=completed)
        try:
            os.replace(tmp_name, path)
            os.chmod(path, file_mode)
        except OSError as e:
            raise _create_error(path, e) from e
    finally:
        if os.path.exists(tmp_name):
            try:
                os.remove(tmp_name)
            except OSError:
                logger.warning("Failed to remove temporary file %s", tmp_name)
