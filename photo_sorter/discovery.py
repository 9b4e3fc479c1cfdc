"""Candidate discovery from a source directory or archive."""

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional

from .archive import ArchiveExtractor, is_archive
from .errors import DiscoveryError
from .models import Candidate
from .utils import has_extension

logger = logging.getLogger(__name__)


class Discovery:
    """Produces the candidate set for a source location."""

    def __init__(
        self,
        extractor: ArchiveExtractor,
        archive_extensions: List[str],
        media_extensions: Optional[List[str]] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Args:
            extractor: Used when the source is an archive
            archive_extensions: Extensions treated as archives
            media_extensions: When given, limit directory candidates to these
                extensions. ``None`` makes every regular file a candidate.
            log: Logger for discovery events (module logger if None)
        """
        self.extractor = extractor
        self.archive_extensions = archive_extensions
        self.media_extensions = media_extensions
        self.log = log or logger

    def discover(self, source: Path) -> Iterator[Candidate]:
        """
        Return a single-pass iterator of candidates found under ``source``.

        Raises:
            DiscoveryError: if the source does not exist, is unreadable or is
                neither a directory nor a supported archive
        """
        if not source.exists():
            raise DiscoveryError(f"Source does not exist: {source}")
        if not os.access(source, os.R_OK):
            raise DiscoveryError(f"Source is not readable: {source}")

        if is_archive(source, self.archive_extensions):
            self.log.info(f"Discovering candidates in archive {source}")
            return self._from_archive(source)
        if source.is_dir():
            self.log.info(f"Discovering candidates in directory {source}")
            return self._from_directory(source)
        raise DiscoveryError(f"Source is neither a directory nor a supported archive: {source}")

    def _from_archive(self, source: Path) -> Iterator[Candidate]:
        for temp_path, original_name in self.extractor.extract(source):
            yield Candidate(source_path=temp_path, display_name=original_name, temporary=True)

    def _from_directory(self, source: Path) -> Iterator[Candidate]:
        def on_error(error: OSError) -> None:
            self.log.warning(f"Skipping unreadable entry {error.filename}: {error.strerror}")

        for dirpath, dirnames, filenames in os.walk(source, onerror=on_error):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                try:
                    is_regular = file_path.is_file()
                except OSError as e:
                    self.log.warning(f"Skipping unreadable entry {file_path}: {e.strerror or e}")
                    continue
                if not is_regular:
                    # Broken symlinks, sockets and the like
                    self.log.debug(f"Skipping non-regular file {file_path}")
                    continue
                if self.media_extensions is not None and not has_extension(filename, self.media_extensions):
                    self.log.debug(f"Skipping non-media file {file_path}")
                    continue
                yield Candidate(source_path=file_path.absolute(), display_name=filename)
