"""
pytest configuration and fixtures for heicsort tests.
"""

import struct
import zlib
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pytest
from PIL import ExifTags, Image


@dataclass
class CliResult:
    """Result from running CLI command."""
    exit_code: int
    output: str
    error: str


def write_jpeg(path: Path, capture_date: Optional[datetime] = None,
               raw_date: Optional[str] = None, size=(16, 16)) -> Path:
    """Write a small real JPEG, optionally tagged with EXIF DateTimeOriginal."""
    path.parent.mkdir(parents=True, exist_ok=True)
    image = Image.new("RGB", size, color=(200, 120, 40))

    if capture_date is not None:
        raw_date = capture_date.strftime("%Y:%m:%d %H:%M:%S")

    if raw_date is not None:
        exif = Image.Exif()
        exif[ExifTags.IFD.Exif] = {ExifTags.Base.DateTimeOriginal: raw_date}
        image.save(path, "JPEG", exif=exif)
    else:
        image.save(path, "JPEG")
    return path


def write_oversized_image(path: Path, width: int = 30000, height: int = 30000) -> Path:
    """Write a bare PNG header declaring far more pixels than Pillow allows."""
    path.parent.mkdir(parents=True, exist_ok=True)

    def chunk(cid: bytes, data: bytes) -> bytes:
        return (struct.pack(">I", len(data)) + cid + data +
                struct.pack(">I", zlib.crc32(cid + data) & 0xFFFFFFFF))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b""))
    return path


@pytest.fixture
def make_jpeg():
    """Factory fixture for tagged JPEG files."""
    return write_jpeg


@pytest.fixture
def make_oversized_image():
    """Factory fixture for images that exceed the decompression bomb limit."""
    return write_oversized_image


@pytest.fixture
def source_dir(tmp_path):
    source = tmp_path / "source"
    source.mkdir()
    return source


@pytest.fixture
def dest_dir(tmp_path):
    """Destination path (not created)."""
    return tmp_path / "output"


@pytest.fixture
def create_test_files(source_dir):
    """Helper to create a source tree from file specifications."""

    def create_files(file_specs: List[dict]) -> Path:
        """Create test files based on specifications.

        Args:
            file_specs: List of dicts with keys:
                - name: path relative to the source directory
                - date: capture datetime, writes a tagged JPEG (optional)
                - raw_date: raw EXIF date string, writes a tagged JPEG (optional)
                - content: raw file content, for non-image files (optional)
                - oversized: True writes an image header beyond Pillow's pixel limit

        Returns:
            Path to the source directory
        """
        for spec in file_specs:
            file_path = source_dir / spec['name']
            file_path.parent.mkdir(parents=True, exist_ok=True)

            if spec.get('oversized'):
                write_oversized_image(file_path)
                continue

            if 'date' in spec or 'raw_date' in spec:
                write_jpeg(file_path, capture_date=spec.get('date'),
                           raw_date=spec.get('raw_date'))
                continue

            content = spec.get('content', b'test file content')
            if isinstance(content, str):
                file_path.write_text(content)
            else:
                file_path.write_bytes(content)

        return source_dir

    return create_files


@pytest.fixture
def cli_runner(capsys):
    """Run the heicsort CLI in-process and capture its output."""

    def run_cli(*args):
        from heicsort.cli import main

        try:
            exit_code = main([str(a) for a in args])
        except SystemExit as e:
            exit_code = e.code if e.code is not None else 0

        captured = capsys.readouterr()
        return CliResult(exit_code=exit_code, output=captured.out, error=captured.err)

    return run_cli
