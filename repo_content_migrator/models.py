"""Data types shared by the migration components."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class FileDescriptor:
    """One entry of a repository contents listing."""
    path: str
    type: str
    sha: str = ""
    size: int = 0
    name: str = ""

    @classmethod
    def from_api(cls, entry: Dict[str, Any]) -> 'FileDescriptor':
        """Build a descriptor from a GitHub contents API entry."""
        path = entry["path"]
        return cls(
            path=path,
            type=entry.get("type", ""),
            sha=entry.get("sha", ""),
            size=entry.get("size", 0),
            name=entry.get("name") or path.rsplit("/", 1)[-1]
        )

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of copying a single file."""
    path: str
    success: bool
    error: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass
class MigrationSummary:
    """Totals for a whole migration run."""
    total_files: int
    success_count: int
    fail_count: int
    duration: float
    results: List[MigrationResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.fail_count == 0

    @property
    def failed_paths(self) -> List[str]:
        return [result.path for result in self.results if not result.success]


@dataclass
class BatchProgress:
    """Progress snapshot taken after each batch."""
    current_batch: int
    total_batches: int
    processed_files: int
    total_files: int
    start_time: datetime
    estimated_completion: Optional[datetime] = None

    @classmethod
    def snapshot(cls, current_batch: int, total_batches: int, processed_files: int,
                 total_files: int, start_time: datetime, now: datetime) -> 'BatchProgress':
        """Create a snapshot, extrapolating completion from the average time per file."""
        estimated_completion = None
        if processed_files > 0:
            per_file = (now - start_time) / processed_files
            estimated_completion = now + per_file * (total_files - processed_files)
        return cls(current_batch, total_batches, processed_files, total_files,
                   start_time, estimated_completion)

    @property
    def percent_complete(self) -> float:
        if self.total_files == 0:
            return 100.0
        return 100.0 * self.processed_files / self.total_files


def batch_files(files: List[T], batch_size: int) -> List[List[T]]:
    """Split files into contiguous batches of at most ``batch_size`` items."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return [files[i:i + batch_size] for i in range(0, len(files), batch_size)]
