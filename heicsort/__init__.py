"""
heicsort - Rename HEIC/JPEG photos by their original capture date.

Walks a source tree, reads each photo's EXIF DateTimeOriginal and copies it
to a destination folder as YYYY-MM-DD_HH.MM.SS.<ext>, optionally removing
the original and serving the result over HTTP. MIT License.
"""

__version__ = "1.0.0"
__copyright__ = "Copyright (c) 2025 heicsort contributors"


# Public API
from .cli import main
from .core import FileTask, PhotoRenamer
from .file_operations import FileOperations, format_byte_size
from .stats import RunStats
from .timestamps import get_capture_date

__all__ = [ "main", "PhotoRenamer", "FileTask", "FileOperations", "RunStats",
            "format_byte_size", "get_capture_date" ]
