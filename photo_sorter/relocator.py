"""Copy/move execution for planned items."""

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Optional, Tuple

from .config import COLLISION_POLICIES
from .errors import DirectoryCreateError, PathError, RelocationError
from .models import PlannedItem, RelocationOutcome
from .utils import calculate_sha256, ensure_directory, files_identical, get_file_size, unique_path

logger = logging.getLogger(__name__)


class Relocator:
    """Moves or copies planned items into place, one item at a time.

    Every failure is converted into a ``Failed`` outcome so a single bad file
    never stops the remaining items from being processed.

    Destinations handed out during the run are remembered, so a dry run
    resolves same-name collisions exactly as a live run would even though
    nothing is written.
    """

    def __init__(self, copy: bool = False, dry_run: bool = False,
                 collision: str = 'rename', verify_copies: bool = True,
                 log: Optional[logging.Logger] = None):
        if collision not in COLLISION_POLICIES:
            raise ValueError(f"Unknown collision policy: {collision}")
        self.copy = copy
        self.dry_run = dry_run
        self.collision = collision
        self.verify_copies = verify_copies
        self.log = log or logger
        # destination -> source that took it in this run
        self._claimed: Dict[Path, Path] = {}

    @property
    def action(self) -> str:
        return 'copy' if self.copy else 'move'

    def relocate(self, item: PlannedItem) -> RelocationOutcome:
        """Relocate a single planned item and report the outcome."""
        source = item.source_path
        try:
            parent = self._parent_of(item.destination_path)

            destination, skip_reason = self._resolve_collision(source, item.destination_path)
            if skip_reason:
                self.log.info(f"Skipped {source}: {skip_reason} ({destination})")
                return RelocationOutcome.skipped(item.candidate, skip_reason, destination)

            size = get_file_size(source)
            if self.dry_run:
                self._claimed[destination] = source
                self.log.info(f"Dry-run, not really {self.action}ing {source} -> {destination}")
                return RelocationOutcome.succeeded(item, destination, reason='dry-run', size=size)

            ensure_directory(parent)
            self._perform(source, destination, item.candidate.temporary)

        except (PathError, DirectoryCreateError, RelocationError) as e:
            self.log.warning(f"Failed to {self.action} {source} -> {item.destination_path}: {e}")
            return RelocationOutcome.failed(item.candidate, str(e), item.destination_path)

        self._claimed[destination] = source
        self.log.info(f"{'Copied' if self.copy else 'Moved'} {source} -> {destination}")
        return RelocationOutcome.succeeded(item, destination, size=size)

    @staticmethod
    def _parent_of(destination: Path) -> Path:
        parent = destination.parent
        if not destination.name or parent == destination:
            raise PathError(f"No parent directory for {destination}")
        return parent

    def _occupant(self, destination: Path) -> Optional[Path]:
        """File whose content currently holds ``destination``, if any."""
        if destination.exists():
            return destination
        return self._claimed.get(destination)

    def _resolve_collision(self, source: Path, destination: Path) -> Tuple[Path, Optional[str]]:
        """Pick the final destination, or a reason to skip the item."""
        occupant = self._occupant(destination)
        if occupant is None:
            return destination, None
        if occupant.resolve() == source.resolve():
            return destination, "already in place"

        if self.collision == 'skip':
            return destination, "destination exists"
        if self.collision == 'overwrite':
            self.log.debug(f"Overwriting existing {destination}")
            return destination, None

        if files_identical(source, occupant):
            return destination, "identical file already at destination"
        renamed = unique_path(destination, taken=self._claimed)
        self.log.info(f"Name collision at {destination}, using {renamed.name}")
        return renamed, None

    def _perform(self, source: Path, destination: Path, temporary: bool = False) -> None:
        if self.copy:
            self._copy(source, destination)
        elif temporary:
            self._move_extracted(source, destination)
        else:
            self._move(source, destination)

    def _copy(self, source: Path, destination: Path) -> None:
        try:
            shutil.copy2(source, destination)
        except OSError as e:
            raise RelocationError(f"Failed to copy: {e}", source, destination) from e

        if self.verify_copies:
            source_hash = calculate_sha256(source)
            if not source_hash or source_hash != calculate_sha256(destination):
                raise RelocationError(
                    f"Hash verification failed for {source} -> {destination}", source, destination
                )

    def _move(self, source: Path, destination: Path) -> None:
        # Plain rename only; no copy-and-delete fallback across volumes
        try:
            os.replace(source, destination)
        except OSError as e:
            if e.errno == errno.EXDEV:
                raise RelocationError(
                    f"Cannot move across devices (use copy mode instead): {e}", source, destination
                ) from e
            raise RelocationError(f"Failed to move: {e}", source, destination) from e

    def _move_extracted(self, source: Path, destination: Path) -> None:
        # Extraction files usually sit on another volume; they belong to the
        # run, so moving them may fall back to copying
        try:
            shutil.move(str(source), str(destination))
        except OSError as e:
            raise RelocationError(f"Failed to move: {e}", source, destination) from e
