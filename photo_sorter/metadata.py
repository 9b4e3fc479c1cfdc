"""Capture date extraction from embedded photo and video metadata."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol

import exifread

from .models import Candidate, CaptureDate
from .utils import normalize_extensions

logger = logging.getLogger(__name__)

EXIF_DATE_TAGS = ('EXIF DateTimeOriginal', 'EXIF DateTimeDigitized', 'Image DateTime')


class DateReadable(Protocol):
    """Capability to read a capture date from a single media kind."""

    def read_date(self, file_path: Path) -> Optional[CaptureDate]:
        ...


def parse_exif_timestamp(value: str) -> Optional[CaptureDate]:
    """Parse an EXIF timestamp such as ``"2020:07:28 11:49:03"``."""
    date_str = value.strip()
    if len(date_str) < 10 or date_str[4] not in ':-' or date_str[7] not in ':-':
        return None
    try:
        return CaptureDate(int(date_str[:4]), int(date_str[5:7]), int(date_str[8:10]))
    except ValueError:
        return None


def parse_iso_timestamp(value: str) -> Optional[CaptureDate]:
    """Parse an ffprobe ``creation_time`` such as ``"2020-07-28T11:49:03.000000Z"``."""
    date_str = value.strip()
    if len(date_str) < 10 or date_str[4] != '-' or date_str[7] != '-':
        return None
    try:
        return CaptureDate(int(date_str[:4]), int(date_str[5:7]), int(date_str[8:10]))
    except ValueError:
        return None


class ExifDateReader:
    """Reads the capture date of still images from EXIF tags using exifread."""

    def read_date(self, file_path: Path) -> Optional[CaptureDate]:
        try:
            with open(file_path, 'rb') as f:
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            # exifread raises a wide range of errors on corrupt input
            logger.debug(f"Could not read EXIF from {file_path}: {e}")
            return None

        for tag_name in EXIF_DATE_TAGS:
            tag = tags.get(tag_name)
            if tag:
                capture_date = parse_exif_timestamp(str(tag))
                if capture_date:
                    return capture_date
        return None


class VideoDateReader:
    """Reads the creation date of videos with ffprobe."""

    def __init__(self, ffprobe: str = 'ffprobe', timeout: int = 10):
        self.ffprobe = ffprobe
        self.timeout = timeout

    def read_date(self, file_path: Path) -> Optional[CaptureDate]:
        try:
            result = subprocess.run(
                [self.ffprobe, '-v', 'quiet', '-print_format', 'json',
                 '-show_entries', 'format_tags=creation_time', str(file_path)],
                capture_output=True, text=True, timeout=self.timeout
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Could not run {self.ffprobe} on {file_path}: {e}")
            return None

        if result.returncode != 0:
            return None
        try:
            data = json.loads(result.stdout or '{}')
        except json.JSONDecodeError as e:
            logger.debug(f"Unexpected ffprobe output for {file_path}: {e}")
            return None

        creation_time = data.get('format', {}).get('tags', {}).get('creation_time', '')
        return parse_iso_timestamp(creation_time) if creation_time else None


class DateResolver:
    """Resolves the capture date of a candidate by dispatching on media kind.

    The kind is detected from the candidate's display name extension, which
    for archive entries is the original entry name rather than the
    temporary extraction name. Unsupported kinds resolve to ``None``.
    """

    def __init__(
        self,
        photo_extensions: Iterable[str],
        video_extensions: Iterable[str],
        readers: Optional[Dict[str, DateReadable]] = None,
    ):
        readers = readers or {}
        self.readers: Dict[str, DateReadable] = {
            'photo': readers.get('photo') or ExifDateReader(),
            'video': readers.get('video') or VideoDateReader(),
        }
        self.kinds: Dict[str, str] = {}
        for ext in normalize_extensions(photo_extensions):
            self.kinds[ext] = 'photo'
        for ext in normalize_extensions(video_extensions):
            self.kinds[ext] = 'video'

    def detect_kind(self, candidate: Candidate) -> Optional[str]:
        return self.kinds.get(candidate.extension)

    def resolve_date(self, candidate: Candidate) -> Optional[CaptureDate]:
        """Return the capture date or ``None`` when it cannot be determined."""
        kind = self.detect_kind(candidate)
        if kind is None:
            logger.debug(f"Unsupported media kind: {candidate.display_name}")
            return None
        return self.readers[kind].read_date(candidate.source_path)
