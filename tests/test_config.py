"""Tests for configuration loading and run settings."""

from pathlib import Path

import pytest

from photo_sorter.config import DEFAULT_PHOTO_EXTENSIONS, Config, RunConfiguration
from photo_sorter.errors import ConfigurationError


class TestConfig:
    """Test YAML-backed configuration."""

    def test_dot_path_lookup(self, write_config):
        config = write_config({'photo_sorter': {'process': {'copy': True, 'dry_run': True}}})

        assert config.get('photo_sorter.process.copy') is True
        assert config.get('photo_sorter.process.missing', 'fallback') == 'fallback'
        assert config.get('not.there') is None
        assert config.should_copy()
        assert config.is_dry_run()

    def test_defaults_without_config_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(Config, 'CONFIG_FILE_NAMES', ('does-not-exist.yml',))

        config = Config()

        assert config.config_path is None
        assert not config.should_copy()
        assert not config.is_dry_run()
        assert config.get_collision_policy() == 'rename'
        assert config.should_verify_copies()
        assert 'jpg' in config.get_supported_extensions()['photos']
        assert 'mp4' in config.get_supported_extensions()['videos']
        assert config.get_supported_extensions()['archives'] == ['zip']
        assert config.validate_config() == []

    def test_finds_config_in_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / 'photo_sorter.yml').write_text("photo_sorter:\n  source: /from/cwd\n")
        monkeypatch.chdir(tmp_path)

        config = Config()

        assert config.get_source() == '/from/cwd'

    def test_invalid_yaml_raises_configuration_error(self, tmp_path):
        broken = tmp_path / 'broken.yml'
        broken.write_text("photo_sorter: [unclosed\n")

        with pytest.raises(ConfigurationError):
            Config(str(broken))

    def test_missing_explicit_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Config(str(tmp_path / 'nope.yml'))

    def test_validation_reports_bad_values(self, write_config):
        config = write_config({
            'photo_sorter': {
                'process': {'collision': 'explode'},
                'safety': {'min_free_space_gb': -5},
                'extensions': {'photos': [], 'videos': []},
            }
        })

        errors = config.validate_config()

        assert len(errors) == 3
        assert any('collision' in e for e in errors)
        assert any('min_free_space_gb' in e for e in errors)
        assert any('extensions' in e for e in errors)

    def test_extensions_given_as_list_is_reported(self, write_config):
        config = write_config({'photo_sorter': {'extensions': ['jpg', 'mp4']}})

        errors = config.validate_config()

        assert len(errors) == 1
        assert 'must be a mapping' in errors[0]
        assert config.get_supported_extensions()['photos'] == DEFAULT_PHOTO_EXTENSIONS


class TestRunConfiguration:
    """Test merging file settings with command-line overrides."""

    def test_values_come_from_file(self, write_config, tmp_path):
        config = write_config({
            'photo_sorter': {
                'source': str(tmp_path / 'in'),
                'destination': str(tmp_path / 'out'),
                'process': {'copy': True, 'collision': 'skip'},
            },
            'logging': {'file': str(tmp_path / 'sort.log')},
        })

        run_config = RunConfiguration.from_config(config)

        assert run_config.source == tmp_path / 'in'
        assert run_config.destination == tmp_path / 'out'
        assert run_config.copy is True
        assert run_config.dry_run is False
        assert run_config.collision == 'skip'
        assert run_config.logfile == tmp_path / 'sort.log'

    def test_overrides_win_and_none_keeps_file_value(self, write_config, tmp_path):
        config = write_config({
            'photo_sorter': {
                'source': str(tmp_path / 'in'),
                'destination': str(tmp_path / 'out'),
                'process': {'copy': True},
            }
        })

        run_config = RunConfiguration.from_config(
            config, destination=str(tmp_path / 'elsewhere'), copy=None, dry_run=True
        )

        assert run_config.destination == tmp_path / 'elsewhere'
        assert run_config.copy is True
        assert run_config.dry_run is True

    def test_missing_source_and_destination(self, write_config):
        config = write_config({})

        with pytest.raises(ConfigurationError, match="source, destination"):
            RunConfiguration.from_config(config)

    def test_relative_paths_made_absolute(self, write_config):
        config = write_config({})

        run_config = RunConfiguration.from_config(config, source='in', destination='out')

        assert run_config.source.is_absolute()
        assert run_config.source == Path('in').absolute()

    def test_same_source_and_destination_rejected(self, write_config, tmp_path):
        config = write_config({})

        with pytest.raises(ConfigurationError, match="same"):
            RunConfiguration.from_config(config, source=str(tmp_path), destination=str(tmp_path))

    def test_unknown_collision_override_rejected(self, write_config, tmp_path):
        config = write_config({})

        with pytest.raises(ConfigurationError, match="collision"):
            RunConfiguration.from_config(
                config, source=str(tmp_path / 'a'), destination=str(tmp_path / 'b'),
                collision='merge',
            )

    def test_run_configuration_is_immutable(self, run_config):
        settings = run_config()

        with pytest.raises(AttributeError):
            settings.copy = True

        preview = settings.with_overrides(dry_run=True)
        assert preview.dry_run is True
        assert settings.dry_run is False
