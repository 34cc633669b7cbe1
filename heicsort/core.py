"""
Core renaming pipeline: traverse, filter, extract, copy, remove.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from rich.table import Table

from .constants import get_console, get_logger
from .errors import DestinationExistsError, MetadataError, TraversalError
from .file_operations import (FileOperations, build_destination_path, file_extension,
                              format_byte_size, is_supported_extension)
from .stats import (COPY_ERROR, DECODE_ERROR, DELETE_ERROR, DESTINATION_EXISTS,
                    NO_TIMESTAMP, SKIP_LABELS, SKIP_REASONS, UNSUPPORTED, RunStats)
from .timestamps import get_capture_date

PROCESSED = "processed"


@dataclass
class FileTask:
    """One file under consideration by the pipeline."""
    source: Path
    extension: str
    timestamp: Optional[datetime] = None
    destination: Optional[Path] = None
    outcome: Optional[str] = None  # PROCESSED or a skip reason
    bytes_copied: int = 0

    @property
    def was_processed(self) -> bool:
        return self.outcome == PROCESSED


def _raise_traversal_error(error: OSError) -> None:
    raise TraversalError(f"cannot read {error.filename}: {error.strerror or error}") from error


class PhotoRenamer:
    """Renames HEIC/JPEG files by capture date into a destination folder."""

    def __init__(self, source: Path, dest: Path, remove_originals: bool = False,
                 overwrite: bool = False, dry_run: bool = False):
        self.source = Path(source)
        self.dest = Path(dest)
        self.remove_originals = remove_originals
        self.dry_run = dry_run
        self.stats = RunStats()
        self.console = get_console()
        self.logger = get_logger()
        self.file_ops = FileOperations(dry_run=dry_run, remove_originals=remove_originals,
                                       overwrite=overwrite)

    def iter_source_files(self) -> Iterator[Path]:
        """Yield every non-directory entry under the source, in sorted order.

        Symlinks to directories are yielded as entries, not followed. The
        destination tree is not descended into when it lies inside the
        source. Raises TraversalError if any directory cannot be read.
        """
        dest = self.dest.resolve()
        for dirpath, dirnames, filenames in os.walk(self.source, onerror=_raise_traversal_error):
            parent = Path(dirpath)
            linked = [d for d in dirnames if (parent / d).is_symlink()]
            dirnames[:] = sorted(d for d in dirnames
                                 if d not in linked and (parent / d).resolve() != dest)
            for filename in sorted(filenames + linked):
                yield parent / filename

    def run(self) -> RunStats:
        """Process the whole source tree and log a summary line."""
        mode = "DRY RUN" if self.dry_run else "MOVE" if self.remove_originals else "COPY"
        self.logger.debug(f"Starting run ({mode}): {self.source} -> {self.dest}")

        for file_path in self.iter_source_files():
            self.logger.debug(f"reading {file_path}")
            self.process_file(file_path)

        self.logger.info(self.stats.summary_line())
        return self.stats

    def process_file(self, file_path: Path) -> FileTask:
        """Run one file through the pipeline, recording the outcome in the run stats.

        Per-file failures are logged and counted as skips; nothing is raised.
        """
        self.stats.record_visit()
        task = FileTask(source=file_path, extension=file_extension(file_path))

        if not is_supported_extension(task.extension):
            self.logger.info(f"skipped {file_path} because it has a non-valid extension")
            return self._skip(task, UNSUPPORTED)

        self.logger.debug(f"processing {file_path}")
        try:
            task.timestamp = get_capture_date(file_path)
        except MetadataError as e:
            self.logger.error(f"skipped {file_path}: {e.cause}")
            return self._skip(task, DECODE_ERROR)

        if task.timestamp is None:
            self.logger.info(f"{file_path} metadata does not have a valid timestamp")
            return self._skip(task, NO_TIMESTAMP)

        task.destination = build_destination_path(self.dest, task.timestamp, task.extension)

        try:
            task.bytes_copied = self.file_ops.copy_file(file_path, task.destination)
        except DestinationExistsError as e:
            self.logger.warning(f"skipped {file_path}: {e}")
            return self._skip(task, DESTINATION_EXISTS)
        except OSError as e:
            self.logger.error(f"Failed to copy {file_path} -> {task.destination}: {e}")
            return self._skip(task, COPY_ERROR)

        if self.file_ops.remove_originals:
            try:
                self.file_ops.remove_original(file_path)
            except OSError as e:
                self.logger.error(f"Failed to delete {file_path} after copying: {e}")
                return self._skip(task, DELETE_ERROR)

        task.outcome = PROCESSED
        self.stats.record_processed(task.bytes_copied)
        return task

    def _skip(self, task: FileTask, reason: str) -> FileTask:
        task.outcome = reason
        self.stats.record_skipped(reason)
        return task

    def print_summary(self) -> None:
        """Print processing summary."""
        table = Table(title="Processing Summary")
        table.add_column("Category", style="cyan")
        table.add_column("Count", style="green")

        table.add_row("Processed", str(self.stats.processed))
        table.add_row("Skipped", str(self.stats.skipped))
        for reason in SKIP_REASONS:
            count = self.stats.get_skipped(reason)
            if count:
                table.add_row(f"  {SKIP_LABELS[reason]}", str(count))
        table.add_row("Total Files", str(self.stats.total))
        table.add_row("Bytes Copied", format_byte_size(self.stats.bytes_copied))

        self.console.print(table)

        if self.stats.has_errors():
            self.console.print(f"\n[red]{self.stats.get_failed()} file(s) could not be processed; "
                               f"see the log above[/red]")
