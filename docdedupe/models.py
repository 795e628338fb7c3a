"""Core data models shared across docdedupe components."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class FileStatus(str, Enum):
    """Final outcome of processing one documentation file."""

    UNCHANGED = "unchanged"
    REWRITTEN = "rewritten"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass
class FileResult:
    """Outcome of repairing a single file."""

    path: Path
    status: FileStatus
    members_removed: int = 0
    content_removed: int = 0
    members_pruned: int = 0
    error: Optional[str] = None

    @property
    def dirty(self) -> bool:
        return bool(self.members_removed or self.content_removed or self.members_pruned)


@dataclass
class RunSummary:
    """Aggregated outcomes for a whole run."""

    root: Path
    identifiers: int
    results: List[FileResult] = field(default_factory=list)
    dry_run: bool = False

    def count(self, status: FileStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    def counts(self) -> Dict[str, int]:
        return {status.value: self.count(status) for status in FileStatus}

    @property
    def failed(self) -> List[FileResult]:
        return [result for result in self.results if result.status is FileStatus.FAILED]
