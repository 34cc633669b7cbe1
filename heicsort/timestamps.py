"""Capture timestamp extraction from image metadata."""

import re
import struct
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import ExifTags, Image
from pillow_heif import register_heif_opener

from .constants import get_logger
from .errors import MetadataError

# Teach Pillow to open .heic files
register_heif_opener()

logger = get_logger("heicsort.timestamps")

EXIF_DATE_PATTERN = re.compile(
    r'\s*(\d{4})[-:](\d{2})[-:](\d{2})[T ](\d{2}):(\d{2}):(\d{2})'
    r'(?:\.(\d+))?(Z|[+-]\d{2}:?\d{2})?\s*$'
)


def get_capture_date(image_path: Path) -> Optional[datetime]:
    """Get the original capture date-time of an image from its EXIF metadata.

    Returns None if the file decodes but carries no usable DateTimeOriginal.
    Raises MetadataError if the file cannot be opened or decoded.
    """
    try:
        with Image.open(image_path) as image:
            exif = image.getexif()
            exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
            value = exif_ifd.get(ExifTags.Base.DateTimeOriginal)
    except (OSError, RuntimeError, SyntaxError, ValueError, KeyError, struct.error,
            Image.DecompressionBombError) as e:
        # UnidentifiedImageError is an OSError
        raise MetadataError(image_path, e) from e

    if value is None:
        logger.debug(f"No DateTimeOriginal tag in {image_path}")
        return None

    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")

    capture_date = parse_exif_datetime(str(value))
    if capture_date is None:
        logger.debug(f"Unusable DateTimeOriginal in {image_path}: {value!r}")
    return capture_date


def parse_exif_datetime(timestamp_str: str) -> Optional[datetime]:
    """Parse an EXIF date-time string into a naive datetime.

    Handles raw EXIF (2023:05:01 10:00:00) and ISO 8601 style
    (2023-05-01T10:00:00.123-04:00) strings. A UTC offset, if present, is
    ignored: the recorded wall-clock time is what names the file. Zeroed
    (0000:00:00 00:00:00), blank or invalid values return None.
    """
    match = EXIF_DATE_PATTERN.match(timestamp_str.replace("\x00", ""))
    if not match:
        return None

    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    if year == 0:
        return None

    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None
