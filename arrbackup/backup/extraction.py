"""
Safe extraction of backup archives.

Entries are written one at a time in archive order. Every entry path is
composed component by component under the destination and rejected if it
would leave it. Permissions and symlinks stored in the archive are never
reproduced; files get the default creation mode.
"""

import errno
import logging
import os
import re
import shutil
import zipfile
import zlib
from pathlib import Path
from typing import List, Union

from arrbackup.utils.errors import (
    ArchiveIOError,
    PreconditionError,
    SymlinkEncounteredError,
    UnsafePathError,
    create_error_suggestions,
)

logger = logging.getLogger(__name__)

_DRIVE_RE = re.compile(r"^[A-Za-z]:")

_WRITE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_BINARY", 0)

# Corrupt or truncated member data surfaces as zlib.error or EOFError; encrypted
# members raise RuntimeError and unsupported compression NotImplementedError.
_READ_ERRORS = (OSError, zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError)


def _unsafe(name: str, reason: str) -> UnsafePathError:
    return UnsafePathError(
        f"Unsafe archive entry {name!r}: {reason}",
        suggestions=create_error_suggestions("unsafe_archive"),
    )


def _entry_parts(name: str) -> List[str]:
    """Split an entry name into normalized components.

    Raises:
        UnsafePathError: If the name is empty, absolute or climbs above the root
    """
    if not name or "\x00" in name:
        raise _unsafe(name, "missing or invalid path")

    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or _DRIVE_RE.match(normalized):
        raise _unsafe(name, "absolute path")

    parts: List[str] = []
    for part in normalized.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if not parts:
                raise _unsafe(name, "path escapes the destination")
            parts.pop()
        else:
            parts.append(part)
    return parts


def resolve_entry_path(destination: Union[str, Path], name: str) -> Path:
    """
    Compose the on-disk path for an archive entry.

    Args:
        destination: Extraction root
        name: Entry name as stored in the archive

    Returns:
        Path: Absolute path inside the destination

    Raises:
        UnsafePathError: If the entry would resolve outside the destination
    """
    root = Path(destination).resolve()
    target = root.joinpath(*_entry_parts(name))

    if target != root and root not in target.parents:
        raise _unsafe(name, "path escapes the destination")
    return target


def _check_no_symlinks(root: Path, target: Path) -> None:
    """Reject symlinks on the target or on any directory between it and root."""
    current = root
    for part in target.relative_to(root).parts:
        current = current / part
        if current.is_symlink():
            logger.error("Symlink encountered at %s", current)
            raise SymlinkEncounteredError(
                f"Symlink encountered: {current}",
                suggestions=create_error_suggestions("unsafe_archive"),
            )


def _is_directory_entry(info: zipfile.ZipInfo) -> bool:
    return info.is_dir() or info.filename.replace("\\", "/").endswith("/")


def _write_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path) -> None:
    """Stream one file entry to disk without following a symlink at target."""
    try:
        fd = os.open(target, _WRITE_FLAGS, 0o666)
    except OSError as e:
        if e.errno == errno.ELOOP:
            raise SymlinkEncounteredError(f"Symlink encountered: {target}") from e
        raise

    with os.fdopen(fd, "wb") as dst, archive.open(info) as src:
        shutil.copyfileobj(src, dst)


def extract_archive(archive: zipfile.ZipFile, destination: Union[str, Path]) -> List[Path]:
    """
    Extract every entry of a zip archive into destination.

    Args:
        archive: Open zip archive
        destination: Existing directory to extract into

    Returns:
        List[Path]: Files written, in archive order

    Raises:
        UnsafePathError: If an entry path would leave the destination
        SymlinkEncounteredError: If a target path is a symbolic link
        ArchiveIOError: On any filesystem or archive read failure
    """
    root = Path(destination).resolve()
    written: List[Path] = []

    for info in archive.infolist():
        target = resolve_entry_path(root, info.filename)
        _check_no_symlinks(root, target)

        try:
            if _is_directory_entry(info):
                target.mkdir(parents=True, exist_ok=True)
                continue

            if target == root:
                raise _unsafe(info.filename, "file entry has no name")

            target.parent.mkdir(parents=True, exist_ok=True)
            _write_entry(archive, info, target)
        except _READ_ERRORS as e:
            logger.error("Failed to extract %s: %s", info.filename, e)
            raise ArchiveIOError(f"Failed to extract {info.filename}", details=str(e)) from e

        logger.debug("Extracted %s", info.filename)
        written.append(target)

    logger.info("Extracted %d files into %s", len(written), root)
    return written


def open_archive(path: Union[str, Path]) -> zipfile.ZipFile:
    """
    Open a backup zip archive for reading.

    Raises:
        PreconditionError: If the archive does not exist
        ArchiveIOError: If the file is not a readable zip archive
    """
    try:
        return zipfile.ZipFile(path)
    except FileNotFoundError as e:
        raise PreconditionError(f"Backup file not found: {path}") from e
    except (OSError, zipfile.BadZipFile) as e:
        raise ArchiveIOError(f"Failed to read backup zip file: {path}", details=str(e)) from e
