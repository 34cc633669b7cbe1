"""
Extension filtering, destination naming and copy/remove operations.
"""

import os
import shutil
from datetime import datetime
from pathlib import Path

from .constants import SUPPORTED_EXTENSIONS, TIME_FORMAT, get_logger
from .errors import DestinationExistsError

BYTE_UNITS = ("", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi")


def file_extension(path: Path) -> str:
    """Get the lowercased extension from the last dot, so '.JPG' yields '.jpg'."""
    name = Path(path).name
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


def is_supported_extension(ext: str) -> bool:
    """Check whether an extension (e.g. '.JPG') is a supported image type."""
    return ext.lower() in SUPPORTED_EXTENSIONS


def build_destination_path(dest_dir: Path, timestamp: datetime, ext: str) -> Path:
    """Build '<dest_dir>/YYYY-MM-DD_HH.MM.SS<ext>' with a lowercased extension."""
    return Path(dest_dir) / f"{timestamp.strftime(TIME_FORMAT)}{ext.lower()}"


def format_byte_size(size: int) -> str:
    """Format a byte count with binary units, e.g. 1536 -> '1.5KiB'."""
    value = float(size)
    for unit in BYTE_UNITS:
        if abs(value) < 1024.0:
            return f"{value:.1f}{unit}B"
        value /= 1024.0
    return f"{value:.1f}YiB"


class FileOperations:
    """Copy and removal of image files, with overwrite protection and dry-run support."""

    def __init__(self, dry_run: bool = False, remove_originals: bool = False,
                 overwrite: bool = False):
        self.dry_run = dry_run
        self.remove_originals = remove_originals
        self.overwrite = overwrite
        self.logger = get_logger("heicsort.file_operations")

    def ensure_directory(self, directory: Path) -> None:
        """Create directory and parents if needed, with dry-run support."""
        if not self.dry_run:
            directory.mkdir(parents=True, exist_ok=True)

    def check_destination(self, source: Path, dest: Path) -> None:
        """Raise DestinationExistsError if dest may not be written."""
        if not dest.exists():
            return
        # Never copy a file onto itself, even when overwriting is allowed
        if not self.overwrite or os.path.samefile(source, dest):
            raise DestinationExistsError(dest)

    def copy_file(self, source: Path, dest: Path) -> int:
        """Copy source to dest and return the number of bytes copied.

        Bytes are written to a hidden '.part' sibling and renamed into place,
        so dest is either absent or complete.
        """
        self.check_destination(source, dest)

        if self.dry_run:
            size = source.stat().st_size
            self.logger.info(f"[dry run] {source} -> {dest}")
            return size

        self.ensure_directory(dest.parent)
        part_file = dest.with_name(f".{dest.name}.part")
        try:
            shutil.copy2(str(source), str(part_file))
            size = part_file.stat().st_size

            # Re-check right before the rename in case dest appeared meanwhile
            self.check_destination(source, dest)
            os.replace(part_file, dest)
        finally:
            if part_file.exists():
                part_file.unlink()

        self.logger.debug(f"copied {format_byte_size(size)} to {dest}")
        self.logger.info(f"{source} -> {dest}")
        return size

    def remove_original(self, source: Path) -> None:
        """Delete a source file after it has been copied."""
        if self.dry_run:
            self.logger.info(f"[dry run] delete {source}")
            return

        source.unlink()
        self.logger.info(f"deleted {source}")
