"""Discovery -> planning -> relocation pipeline driver."""

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .archive import ArchiveExtractor
from .config import RunConfiguration
from .discovery import Discovery
from .errors import PhotoSorterError
from .metadata import DateResolver
from .models import Candidate, PlannedItem, RelocationOutcome, RunSummary
from .planner import PathPlanner
from .relocator import Relocator
from .utils import format_bytes, get_available_space, get_current_timestamp, get_file_size, is_inside

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class RunState(Enum):
    START = 'start'
    DISCOVERING = 'discovering'
    PLANNING = 'planning'
    RELOCATING = 'relocating'
    SUMMARIZED = 'summarized'


class PhotoSorter:
    """Runs one linear pass over the source and sorts it into dated folders.

    Collaborators are passed in explicitly: ``log`` is handed down to
    discovery, planning and relocation so it receives every pipeline log line,
    and ``progress`` is called once per processed candidate with
    ``(current, total)``. Per-item problems become outcomes in the summary;
    only a bad source location aborts the run.
    """

    def __init__(
        self,
        run_config: RunConfiguration,
        resolver: Optional[DateResolver] = None,
        log: Optional[logging.Logger] = None,
        progress: Optional[ProgressCallback] = None,
    ):
        self.run_config = run_config
        self.resolver = resolver or DateResolver(
            run_config.photo_extensions, run_config.video_extensions
        )
        self.log = log or logger
        self.progress = progress
        self.state = RunState.START
        self._total = 0
        self._done = 0

    def _advance(self, state: RunState) -> None:
        self.log.debug(f"Run state: {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> RunSummary:
        """
        Execute the full run.

        Returns:
            RunSummary with succeeded/skipped/failed counts

        Raises:
            DiscoveryError: if the source location cannot be read
        """
        cfg = self.run_config
        summary = RunSummary(dry_run=cfg.dry_run, copy=cfg.copy, timestamp=get_current_timestamp())
        media_filter = cfg.media_extensions if cfg.filter_extensions else None

        self.log.info(
            f"{'DRY RUN: ' if cfg.dry_run else ''}Sorting {cfg.source} -> {cfg.destination} "
            f"({'copy' if cfg.copy else 'move'}, collisions: {cfg.collision})"
        )
        if is_inside(cfg.destination, cfg.source):
            self.log.warning(
                f"Destination {cfg.destination} lies inside the source; "
                f"sorted files will be rediscovered on later runs"
            )

        with ArchiveExtractor(media_filter, log=self.log) as extractor:
            self._advance(RunState.DISCOVERING)
            discovery = Discovery(extractor, cfg.archive_extensions, media_filter, log=self.log)
            candidates = list(discovery.discover(cfg.source))
            summary.total_discovered = len(candidates)
            self._total, self._done = len(candidates), 0
            self.log.info(f"Discovered {len(candidates):,} candidate files")

            self._advance(RunState.PLANNING)
            planned = self._plan_all(candidates, summary)
            self.log.info(f"Planned {len(planned):,} of {len(candidates):,} files")

            self._advance(RunState.RELOCATING)
            self._check_free_space(planned)
            self._relocate_all(planned, summary)

        self._advance(RunState.SUMMARIZED)
        self.log.info(
            f"{'DRY RUN: ' if cfg.dry_run else ''}Run complete: "
            f"{summary.succeeded:,} succeeded, {summary.skipped:,} skipped, "
            f"{summary.failed:,} failed"
        )
        return summary

    def _plan_all(self, candidates: List[Candidate], summary: RunSummary) -> List[PlannedItem]:
        """Plan every candidate; unplannable ones are recorded and ticked off."""
        planner = PathPlanner(self.run_config.destination, self.resolver, log=self.log)
        planned: List[PlannedItem] = []

        for candidate in candidates:
            try:
                item = planner.plan(candidate)
            except (PhotoSorterError, OSError) as e:
                self.log.warning(f"Failed to plan {candidate.source_path}: {e}")
                self._finish(summary, RelocationOutcome.failed(candidate, str(e)))
                continue

            if item is None:
                self.log.warning(f"No valid date for {candidate.display_name}, skipping")
                self._finish(summary, RelocationOutcome.skipped(candidate, "no valid date"))
                continue
            planned.append(item)
        return planned

    def _relocate_all(self, planned: List[PlannedItem], summary: RunSummary) -> None:
        cfg = self.run_config
        relocator = Relocator(
            copy=cfg.copy, dry_run=cfg.dry_run,
            collision=cfg.collision, verify_copies=cfg.verify_copies, log=self.log,
        )
        for item in planned:
            try:
                outcome = relocator.relocate(item)
            except OSError as e:
                self.log.warning(f"Failed to relocate {item.source_path} -> {item.destination_path}: {e}")
                outcome = RelocationOutcome.failed(item.candidate, str(e), item.destination_path)
            self._finish(summary, outcome)

    def _finish(self, summary: RunSummary, outcome: RelocationOutcome) -> None:
        summary.record(outcome)
        self._done += 1
        if self.progress:
            self.progress(self._done, self._total)

    def _check_free_space(self, planned: List[PlannedItem]) -> Tuple[int, int]:
        """Warn when a copy run may not fit on the destination volume."""
        cfg = self.run_config
        if cfg.dry_run or not cfg.copy or not planned:
            return 0, 0

        needed = sum(get_file_size(item.source_path) for item in planned)
        needed += cfg.min_free_space_gb * 1024 * 1024 * 1024
        available = get_available_space(cfg.destination)
        if needed > available:
            self.log.warning(
                f"Destination may run out of space: need {format_bytes(needed)}, "
                f"have {format_bytes(available)}"
            )
        else:
            self.log.info(f"Space check OK: need {format_bytes(needed)}, have {format_bytes(available)}")
        return needed, available
