"""Extraction of media entries from zip archives into temporary files."""

import logging
import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Generator, Iterable, List, Optional, Tuple

from .errors import DiscoveryError
from .utils import has_extension

logger = logging.getLogger(__name__)


def is_archive(path: Path, archive_extensions: Iterable[str]) -> bool:
    """True when ``path`` is a regular file with an archive extension."""
    return path.is_file() and has_extension(path.name, archive_extensions)


class ArchiveExtractor:
    """Extracts archive entries into a private temporary directory.

    Extracted files stay on disk until :meth:`close` is called, so they can
    still be relocated after discovery has finished. Use as a context
    manager around the whole run.
    """

    def __init__(self, media_extensions: Optional[List[str]] = None,
                 log: Optional[logging.Logger] = None):
        """
        Args:
            media_extensions: When given, only entries with these extensions
                are extracted. ``None`` extracts every file entry.
            log: Logger for extraction events (module logger if None)
        """
        self.media_extensions = media_extensions
        self.log = log or logger
        self._temp_dir: Optional[Path] = None
        self._counter = 0

    def __enter__(self) -> 'ArchiveExtractor':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def temp_dir(self) -> Path:
        if self._temp_dir is None:
            self._temp_dir = Path(tempfile.mkdtemp(prefix='photosort-'))
            self.log.debug(f"Created extraction directory {self._temp_dir}")
        return self._temp_dir

    def close(self) -> None:
        """Remove all extracted files."""
        if self._temp_dir is not None:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            self.log.debug(f"Removed extraction directory {self._temp_dir}")
            self._temp_dir = None

    def _wanted(self, name: str) -> bool:
        return self.media_extensions is None or has_extension(name, self.media_extensions)

    def _temp_path_for(self, original_name: str) -> Path:
        # Generated names keep the suffix but never collide between entries
        self._counter += 1
        suffix = PurePosixPath(original_name).suffix
        return self.temp_dir / f"entry_{self._counter:06d}{suffix}"

    def extract(self, archive_path: Path) -> Generator[Tuple[Path, str], None, None]:
        """
        Yield ``(temporary_file, original_name)`` for each extracted entry.

        ``original_name`` is the entry's file name without its in-archive
        directory part.

        Raises:
            DiscoveryError: if the archive cannot be opened
        """
        try:
            archive = zipfile.ZipFile(archive_path, 'r')
        except (zipfile.BadZipFile, OSError) as e:
            raise DiscoveryError(f"Cannot open archive {archive_path}: {e}") from e

        with archive:
            members = [m for m in archive.infolist() if not m.is_dir()]
            self.log.info(f"Archive {archive_path.name} holds {len(members)} file entries")

            for member in members:
                original_name = PurePosixPath(member.filename.replace('\\', '/')).name
                if not original_name or not self._wanted(original_name):
                    self.log.debug(f"Skipping archive entry {member.filename}")
                    continue

                temp_path = self._temp_path_for(original_name)
                try:
                    with archive.open(member) as src, open(temp_path, 'wb') as dst:
                        shutil.copyfileobj(src, dst)
                except (zipfile.BadZipFile, OSError, RuntimeError) as e:
                    # RuntimeError covers encrypted entries
                    self.log.warning(f"Failed to extract {member.filename} from {archive_path}: {e}")
                    continue

                yield temp_path, original_name
