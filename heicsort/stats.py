"""
Run counters for a single heicsort batch.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict

# Reasons a file is counted as skipped
UNSUPPORTED = "unsupported"
NO_TIMESTAMP = "no_timestamp"
DECODE_ERROR = "decode_error"
DESTINATION_EXISTS = "destination_exists"
COPY_ERROR = "copy_error"
DELETE_ERROR = "delete_error"

SKIP_REASONS = (UNSUPPORTED, NO_TIMESTAMP, DECODE_ERROR, DESTINATION_EXISTS,
                COPY_ERROR, DELETE_ERROR)

SKIP_LABELS = {
    UNSUPPORTED: "Unsupported Extension",
    NO_TIMESTAMP: "No Timestamp",
    DECODE_ERROR: "Unreadable Metadata",
    DESTINATION_EXISTS: "Destination Exists",
    COPY_ERROR: "Copy Failed",
    DELETE_ERROR: "Delete Failed",
}


@dataclass
class RunStats:
    """Counters for one run, threaded through the pipeline.

    Every visited file ends up either processed or skipped, so
    ``total == processed + skipped`` once a file has been handled.
    """
    total: int = 0
    processed: int = 0
    skipped: int = 0
    bytes_copied: int = 0
    skip_reasons: Counter = field(default_factory=Counter)

    def record_visit(self) -> None:
        """Count a file visited by the traversal."""
        self.total += 1

    def record_processed(self, size: int) -> None:
        """Count a file that was relocated successfully."""
        self.processed += 1
        self.bytes_copied += size

    def record_skipped(self, reason: str) -> None:
        """Count a file that was filtered out or failed."""
        if reason not in SKIP_REASONS:
            raise ValueError(f"Unknown skip reason: {reason}")
        self.skipped += 1
        self.skip_reasons[reason] += 1

    def get_skipped(self, reason: str) -> int:
        return self.skip_reasons[reason]

    def get_failed(self) -> int:
        """Count of skips caused by errors rather than filtering."""
        return sum(self.skip_reasons[r] for r in
                   (DECODE_ERROR, DESTINATION_EXISTS, COPY_ERROR, DELETE_ERROR))

    def has_errors(self) -> bool:
        return self.get_failed() > 0

    def summary_line(self) -> str:
        return (f"{self.processed} file(s) processed, {self.skipped} file(s) skipped "
                f"({self.total} files in total)")

    def as_dict(self) -> Dict[str, int]:
        """Get a flat copy of the counters."""
        stats = {
            'total': self.total,
            'processed': self.processed,
            'skipped': self.skipped,
            'bytes_copied': self.bytes_copied,
        }
        for reason in SKIP_REASONS:
            stats[reason] = self.skip_reasons[reason]
        return stats
