"""Shared fixtures for photo sorter tests."""

import zipfile
from pathlib import Path
from typing import Dict, Optional

import pytest
import yaml

from photo_sorter.config import (
    DEFAULT_PHOTO_EXTENSIONS,
    DEFAULT_VIDEO_EXTENSIONS,
    Config,
    RunConfiguration,
)
from photo_sorter.metadata import DateResolver
from photo_sorter.models import CaptureDate

DATE_MARKER = b'DATE:'


class ContentDateReader:
    """Test reader: the capture date is written at the start of the file.

    Files beginning with ``DATE:YYYY-MM-DD`` resolve to that date, anything
    else resolves to None. Works the same for extracted archive entries.
    """

    def __init__(self):
        self.calls = []

    def read_date(self, file_path: Path) -> Optional[CaptureDate]:
        self.calls.append(file_path)
        data = Path(file_path).read_bytes()
        if not data.startswith(DATE_MARKER):
            return None
        raw = data[len(DATE_MARKER):len(DATE_MARKER) + 10].decode()
        year, month, day = raw.split('-')
        return CaptureDate(int(year), int(month), int(day))


def media_bytes(date: Optional[str] = None, payload: bytes = b'pixels') -> bytes:
    """Build file content understood by ContentDateReader."""
    if date is None:
        return b'NODATE\n' + payload
    return DATE_MARKER + date.encode() + b'\n' + payload


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / 'source'
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path):
    return tmp_path / 'out'


@pytest.fixture
def make_media(source_dir):
    """Factory fixture: create a media file with an optional embedded date."""

    def _create(relative_path, date=None, payload=b'pixels', base=None):
        full_path = (base or source_dir) / relative_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(media_bytes(date, payload))
        return full_path

    return _create


@pytest.fixture
def make_zip(tmp_path):
    """Factory fixture: write a zip archive with the given entries."""

    def _create(entries: Dict[str, bytes], name='photos.zip'):
        archive_path = tmp_path / name
        with zipfile.ZipFile(archive_path, 'w') as archive:
            for entry_name, content in entries.items():
                archive.writestr(entry_name, content)
        return archive_path

    return _create


@pytest.fixture
def date_reader():
    return ContentDateReader()


@pytest.fixture
def stub_resolver(date_reader):
    """DateResolver whose photo and video readers use ContentDateReader."""
    return DateResolver(
        DEFAULT_PHOTO_EXTENSIONS,
        DEFAULT_VIDEO_EXTENSIONS,
        readers={'photo': date_reader, 'video': date_reader},
    )


@pytest.fixture
def run_config(source_dir, dest_dir):
    """Factory fixture: RunConfiguration for the temp source/destination."""

    def _build(**overrides):
        values = {'source': source_dir, 'destination': dest_dir, 'min_free_space_gb': 0}
        values.update(overrides)
        return RunConfiguration(**values)

    return _build


@pytest.fixture
def write_config(tmp_path):
    """Factory fixture: write a YAML config file and load it."""

    def _write(data, name='photo_sorter.yml'):
        config_path = tmp_path / name
        with open(config_path, 'w') as f:
            yaml.dump(data, f)
        return Config(str(config_path))

    return _write
