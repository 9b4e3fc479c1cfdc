"""Destination path assignment for discovered candidates."""

import logging
from pathlib import Path
from typing import Optional

from .errors import PathError
from .metadata import DateResolver
from .models import Candidate, CaptureDate, PlannedItem

logger = logging.getLogger(__name__)


def build_destination(destination_root: Path, capture_date: CaptureDate, display_name: str) -> Path:
    """
    Build ``<root>/<year>/<MM>/<DD>/<display_name>``.

    Raises:
        PathError: if ``display_name`` is not a plain file name
    """
    name = Path(display_name).name
    if not name or name != display_name or name in ('.', '..'):
        raise PathError(f"Not a valid file name: {display_name!r}")
    return destination_root.joinpath(*capture_date.parts(), name)


class PathPlanner:
    """Combines resolved capture dates with the destination root.

    Names are used as-is: two candidates sharing a name and capture date get
    the same destination, and the relocator's collision policy decides what
    happens.
    """

    def __init__(self, destination_root: Path, resolver: DateResolver,
                 log: Optional[logging.Logger] = None):
        self.destination_root = destination_root
        self.resolver = resolver
        self.log = log or logger

    def plan(self, candidate: Candidate) -> Optional[PlannedItem]:
        """Return the planned item, or ``None`` when no capture date is known."""
        capture_date = self.resolver.resolve_date(candidate)
        if capture_date is None:
            return None

        destination = build_destination(self.destination_root, capture_date, candidate.display_name)
        self.log.info(f"Assigned {candidate.display_name} ({capture_date}) -> {destination}")
        return PlannedItem(candidate=candidate, capture_date=capture_date, destination_path=destination)
