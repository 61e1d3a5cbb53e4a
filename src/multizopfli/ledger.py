"""Per-file before/after size bookkeeping for one run."""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass
class SizeRecord:
    """Sizes of one file in bytes. after_size stays None until compression succeeds."""

    before_size: int
    after_size: int | None = None

    @property
    def completed(self) -> bool:
        return self.after_size is not None


class SizeLedger:
    """Insertion-ordered mapping of file path to SizeRecord.

    Keys are never removed. Each record is mutated at most once, when its
    file finishes compressing. All mutations happen on the thread driving
    the run; worker threads only report outcomes back to it.
    """

    def __init__(self):
        self._records: dict[str, SizeRecord] = {}

    def record(self, path: str, before_size: int) -> SizeRecord:
        """Add a new entry. Recording the same path twice is a programming error."""
        if path in self._records:
            raise ValueError(f'Path already recorded: {path}')
        if before_size < 0:
            raise ValueError(f'Negative size for {path}: {before_size}')
        rec = SizeRecord(before_size=before_size)
        self._records[path] = rec
        return rec

    def complete(self, path: str, after_size: int) -> SizeRecord:
        """Set the after-size of an existing entry."""
        rec = self._records[path]
        if rec.completed:
            raise ValueError(f'Path already completed: {path}')
        if after_size < 0:
            raise ValueError(f'Negative size for {path}: {after_size}')
        rec.after_size = after_size
        return rec

    def snapshot(self) -> Mapping[str, SizeRecord]:
        """Read-only view of all records. Only meaningful once the queue has drained."""
        return MappingProxyType(self._records)

    def total_before(self) -> int:
        return sum(rec.before_size for rec in self._records.values())

    def completed(self) -> dict[str, SizeRecord]:
        return {path: rec for path, rec in self._records.items() if rec.completed}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, path: object) -> bool:
        return path in self._records
