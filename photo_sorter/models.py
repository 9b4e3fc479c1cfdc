"""Data types flowing through the sorting pipeline."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

MIN_YEAR = 1900
MAX_YEAR = 2100


@dataclass(frozen=True)
class CaptureDate:
    """Calendar day a media file was captured."""
    year: int
    month: int
    day: int

    def __post_init__(self):
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise ValueError(f"Year out of range: {self.year}")
        # Rejects impossible days such as 2023-02-30
        date(self.year, self.month, self.day)

    def parts(self) -> List[str]:
        """Directory components: year, zero-padded month and day."""
        return [str(self.year), f"{self.month:02d}", f"{self.day:02d}"]

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class Candidate:
    """A discovered media file pending date resolution and placement.

    ``source_path`` points at the readable bytes, which for archive entries is
    a temporary extraction file. ``display_name`` is the name kept in the
    destination (the original entry name for archive members).
    ``temporary`` marks extraction files owned by the run.
    """
    source_path: Path
    display_name: str
    temporary: bool = False

    @property
    def extension(self) -> str:
        """Lower-case extension without the dot, taken from the display name."""
        return Path(self.display_name).suffix.lower().lstrip('.')


@dataclass(frozen=True)
class PlannedItem:
    """A candidate paired with its resolved destination path."""
    candidate: Candidate
    capture_date: CaptureDate
    destination_path: Path

    @property
    def source_path(self) -> Path:
        return self.candidate.source_path


class OutcomeStatus(Enum):
    SUCCEEDED = 'succeeded'
    SKIPPED = 'skipped'
    FAILED = 'failed'


@dataclass(frozen=True)
class RelocationOutcome:
    """Result of processing one candidate."""
    status: OutcomeStatus
    candidate: Candidate
    destination_path: Optional[Path] = None
    reason: str = ""
    size: int = 0

    @classmethod
    def succeeded(cls, item: PlannedItem, destination: Optional[Path] = None,
                  reason: str = "", size: int = 0) -> 'RelocationOutcome':
        return cls(OutcomeStatus.SUCCEEDED, item.candidate,
                   destination or item.destination_path, reason, size)

    @classmethod
    def skipped(cls, candidate: Candidate, reason: str,
                destination: Optional[Path] = None) -> 'RelocationOutcome':
        return cls(OutcomeStatus.SKIPPED, candidate, destination, reason)

    @classmethod
    def failed(cls, candidate: Candidate, reason: str,
               destination: Optional[Path] = None) -> 'RelocationOutcome':
        return cls(OutcomeStatus.FAILED, candidate, destination, reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'source': str(self.candidate.source_path),
            'name': self.candidate.display_name,
            'destination': str(self.destination_path) if self.destination_path else None,
            'reason': self.reason,
            'size': self.size,
        }


@dataclass
class RunSummary:
    """Aggregated counts for a finished run."""
    dry_run: bool = False
    copy: bool = False
    total_discovered: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    bytes_relocated: int = 0
    outcomes: List[RelocationOutcome] = field(default_factory=list)
    timestamp: str = ""

    def record(self, outcome: RelocationOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is OutcomeStatus.SUCCEEDED:
            self.succeeded += 1
            self.bytes_relocated += outcome.size
        elif outcome.status is OutcomeStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def processed(self) -> int:
        return self.succeeded + self.skipped + self.failed

    @property
    def errors(self) -> List[str]:
        return [
            f"{o.candidate.display_name}: {o.reason}"
            for o in self.outcomes if o.status is OutcomeStatus.FAILED
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dry_run': self.dry_run,
            'mode': 'copy' if self.copy else 'move',
            'timestamp': self.timestamp,
            'statistics': {
                'total_discovered': self.total_discovered,
                'succeeded': self.succeeded,
                'skipped': self.skipped,
                'failed': self.failed,
                'bytes_relocated': self.bytes_relocated,
            },
            'outcomes': [o.to_dict() for o in self.outcomes],
            'success': self.failed == 0,
        }
