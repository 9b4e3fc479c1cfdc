"""Tests for the photosort command line."""

import json
import logging

import pytest
import yaml
from click.testing import CliRunner

import photosort
from conftest import media_bytes


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root_logger = logging.getLogger()
    for handler in photosort._handlers:
        root_logger.removeHandler(handler)
        handler.close()
    photosort._handlers.clear()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Factory fixture: YAML config for CLI runs, free-space margin disabled."""

    def _write(**photo_sorter):
        data = {
            'photo_sorter': dict({'safety': {'min_free_space_gb': 0}}, **photo_sorter),
            'logging': {'level': 'WARNING'},
        }
        path = tmp_path / 'cli.yml'
        with open(path, 'w') as f:
            yaml.dump(data, f)
        return str(path)

    return _write


@pytest.fixture
def content_dates(monkeypatch, stub_resolver):
    """Make the CLI resolve dates from file content instead of EXIF."""
    real_sorter = photosort.PhotoSorter

    def _sorter(run_config, **kwargs):
        return real_sorter(run_config, resolver=stub_resolver, **kwargs)

    monkeypatch.setattr(photosort, 'PhotoSorter', _sorter)


def test_help_lists_commands(runner):
    result = runner.invoke(photosort.cli, ['--help'])

    assert result.exit_code == 0
    assert 'Photo Sorter' in result.output
    assert 'sort' in result.output
    assert 'preview' in result.output


class TestSortCommand:

    def test_copy_run_creates_dated_tree(self, runner, config_file, content_dates, make_media,
                                         source_dir, dest_dir):
        original = make_media('a.jpg', '2023-05-04')

        result = runner.invoke(photosort.cli, [
            '--config', config_file(), 'sort',
            '--src', str(source_dir), '--dest', str(dest_dir), '--copy', '--no-progress',
        ])

        assert result.exit_code == 0, result.output
        assert (dest_dir / '2023' / '05' / '04' / 'a.jpg').read_bytes() == media_bytes('2023-05-04')
        assert original.exists()
        assert 'PHOTO SORT SUMMARY REPORT' in result.output

    def test_paths_from_config_file(self, runner, config_file, content_dates, make_media,
                                    source_dir, dest_dir):
        original = make_media('clip.mp4', '2019-07-20')
        config = config_file(source=str(source_dir), destination=str(dest_dir))

        result = runner.invoke(photosort.cli, ['--config', config, 'sort', '--move', '--no-progress'])

        assert result.exit_code == 0, result.output
        assert (dest_dir / '2019' / '07' / '20' / 'clip.mp4').exists()
        assert not original.exists()

    def test_dry_run_flag(self, runner, config_file, content_dates, make_media, source_dir, dest_dir):
        make_media('a.jpg', '2023-05-04')

        result = runner.invoke(photosort.cli, [
            '--config', config_file(), 'sort',
            '--src', str(source_dir), '--dest', str(dest_dir), '--dry-run', '--no-progress',
        ])

        assert result.exit_code == 0, result.output
        assert 'DRY RUN' in result.output
        assert not dest_dir.exists()

    def test_report_written_as_json(self, runner, config_file, content_dates, make_media,
                                    source_dir, dest_dir, tmp_path):
        make_media('a.jpg', '2023-05-04')
        make_media('b.jpg')
        report = tmp_path / 'report.json'

        result = runner.invoke(photosort.cli, [
            '--config', config_file(), 'sort',
            '--src', str(source_dir), '--dest', str(dest_dir), '--copy', '--no-progress',
            '--report', str(report),
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(report.read_text())
        assert data['statistics']['succeeded'] == 1
        assert data['statistics']['skipped'] == 1

    def test_missing_paths_exit_with_error(self, runner, config_file):
        result = runner.invoke(photosort.cli, ['--config', config_file(), 'sort', '--no-progress'])

        assert result.exit_code == 1
        assert 'Both source and destination must be provided' in result.output

    def test_missing_source_exits_with_error(self, runner, config_file, tmp_path, dest_dir):
        result = runner.invoke(photosort.cli, [
            '--config', config_file(), 'sort',
            '--src', str(tmp_path / 'nowhere'), '--dest', str(dest_dir), '--no-progress',
        ])

        assert result.exit_code == 1
        assert 'Cannot read source' in result.output
        assert not dest_dir.exists()

    def test_invalid_config_file_exits(self, runner, tmp_path):
        bad = tmp_path / 'bad.yml'
        bad.write_text("photo_sorter:\n  process:\n    collision: merge\n")

        result = runner.invoke(photosort.cli, ['--config', str(bad), 'sort'])

        assert result.exit_code == 1
        assert 'Invalid collision policy' in result.output

    def test_extensions_list_in_config_exits_cleanly(self, runner, tmp_path):
        bad = tmp_path / 'bad.yml'
        bad.write_text("photo_sorter:\n  extensions: [jpg, mp4]\n")

        result = runner.invoke(photosort.cli, ['--config', str(bad), 'sort'])

        assert result.exit_code == 1
        assert 'must be a mapping' in result.output


class TestPreviewCommand:

    def test_help_mentions_no_directories_created(self, runner, config_file):
        result = runner.invoke(photosort.cli, ['--config', config_file(), 'preview', '--help'])

        assert result.exit_code == 0
        assert 'No directories are created' in result.output

    def test_lists_planned_destinations(self, runner, config_file, content_dates, make_media,
                                        source_dir, dest_dir):
        original = make_media('a.jpg', '2023-05-04')
        make_media('b.jpg')

        result = runner.invoke(photosort.cli, [
            '--config', config_file(), 'preview', '--src', str(source_dir), '--dest', str(dest_dir),
        ])

        assert result.exit_code == 0, result.output
        assert f"a.jpg -> {dest_dir / '2023' / '05' / '04' / 'a.jpg'}" in result.output
        assert 'b.jpg: skipped (no valid date)' in result.output
        assert original.exists()
        assert not dest_dir.exists()
