"""Configuration management for photo sorting."""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

COLLISION_POLICIES = ('rename', 'skip', 'overwrite')

DEFAULT_PHOTO_EXTENSIONS = [
    'jpg', 'jpeg', 'tiff', 'tif', 'png', 'heic', 'heif',
    'cr2', 'nef', 'arw', 'dng', 'raf', 'orf', 'rw2', 'pef', 'srw',
]
DEFAULT_VIDEO_EXTENSIONS = ['mp4', 'mov', 'avi', 'mkv', 'mts', '3gp', 'm4v']
DEFAULT_ARCHIVE_EXTENSIONS = ['zip']


class Config:
    """Manages photo sorter settings loaded from an optional YAML file."""

    CONFIG_FILE_NAMES = ("photo_sorter.local.yml", "photo_sorter.yml")

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, searches standard
                locations and falls back to built-in defaults.
        """
        self.config: Dict[str, Any] = {}
        self.config_path = config_path or self._find_config_file()
        if self.config_path:
            self._load_config()
        else:
            logger.debug("No configuration file found, using defaults")

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations."""
        search_dirs = [Path.cwd(), Path(__file__).parent.parent]
        for directory in search_dirs:
            for name in self.CONFIG_FILE_NAMES:
                config_file = directory / name
                if config_file.exists():
                    logger.info(f"Found config file: {config_file}")
                    return str(config_file.resolve())
        return None

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as f:
                self.config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise ConfigurationError(f"Cannot load config {self.config_path}: {e}") from e
        if not isinstance(self.config, dict):
            raise ConfigurationError(f"Config {self.config_path} must contain a mapping")
        logger.info(f"Loaded configuration from {self.config_path}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path like 'photo_sorter.process.dry_run'
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def get_source(self) -> Optional[str]:
        return self.get('photo_sorter.source')

    def get_destination(self) -> Optional[str]:
        return self.get('photo_sorter.destination')

    def get_supported_extensions(self) -> Dict[str, List[str]]:
        """Get file extensions per media kind."""
        extensions = self.get('photo_sorter.extensions', {}) or {}
        if not isinstance(extensions, dict):
            # Reported by validate_config
            extensions = {}
        return {
            'photos': extensions.get('photos', DEFAULT_PHOTO_EXTENSIONS),
            'videos': extensions.get('videos', DEFAULT_VIDEO_EXTENSIONS),
            'archives': extensions.get('archives', DEFAULT_ARCHIVE_EXTENSIONS),
        }

    def should_copy(self) -> bool:
        """Copy instead of move."""
        return bool(self.get('photo_sorter.process.copy', False))

    def is_dry_run(self) -> bool:
        return bool(self.get('photo_sorter.process.dry_run', False))

    def get_collision_policy(self) -> str:
        return self.get('photo_sorter.process.collision', 'rename')

    def should_verify_copies(self) -> bool:
        return bool(self.get('photo_sorter.process.verify_copies', True))

    def should_filter_extensions(self) -> bool:
        """Limit discovery to known media extensions."""
        return bool(self.get('photo_sorter.process.filter_extensions', False))

    def get_min_free_space_gb(self) -> int:
        """Get minimum free space requirement in GB."""
        return self.get('photo_sorter.safety.min_free_space_gb', 1)

    def get_log_level(self) -> str:
        return self.get('logging.level', 'INFO')

    def get_log_file(self) -> Optional[str]:
        return self.get('logging.file')

    def validate_config(self) -> List[str]:
        """
        Validate file-level settings and return list of errors.

        Returns:
            List of validation error messages
        """
        errors = []

        if self.get_collision_policy() not in COLLISION_POLICIES:
            errors.append(
                f"Invalid collision policy: {self.get_collision_policy()} "
                f"(must be one of {', '.join(COLLISION_POLICIES)})"
            )

        min_free = self.get_min_free_space_gb()
        if not isinstance(min_free, int) or min_free < 0:
            errors.append(f"Invalid min_free_space_gb value: {min_free}")

        raw_extensions = self.get('photo_sorter.extensions')
        if raw_extensions is not None and not isinstance(raw_extensions, dict):
            errors.append(
                "photo_sorter.extensions must be a mapping with photos, videos "
                f"and archives lists, got {type(raw_extensions).__name__}"
            )

        extensions = self.get_supported_extensions()
        if not extensions.get('photos') and not extensions.get('videos'):
            errors.append("No supported media extensions configured")

        return errors

    def __str__(self) -> str:
        return f"Config(path={self.config_path}, source={self.get_source()})"


@dataclass(frozen=True)
class RunConfiguration:
    """Resolved, immutable settings for a single sorting run."""
    source: Path
    destination: Path
    copy: bool = False
    dry_run: bool = False
    collision: str = 'rename'
    verify_copies: bool = True
    filter_extensions: bool = False
    min_free_space_gb: int = 1
    logfile: Optional[Path] = None
    photo_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_PHOTO_EXTENSIONS))
    video_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_VIDEO_EXTENSIONS))
    archive_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_ARCHIVE_EXTENSIONS))

    @property
    def media_extensions(self) -> List[str]:
        return self.photo_extensions + self.video_extensions

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> 'RunConfiguration':
        """
        Build run settings from a Config, applying non-None overrides.

        Raises:
            ConfigurationError: if source or destination is missing or
                the merged settings fail validation
        """
        extensions = config.get_supported_extensions()
        values: Dict[str, Any] = {
            'source': config.get_source(),
            'destination': config.get_destination(),
            'copy': config.should_copy(),
            'dry_run': config.is_dry_run(),
            'collision': config.get_collision_policy(),
            'verify_copies': config.should_verify_copies(),
            'filter_extensions': config.should_filter_extensions(),
            'min_free_space_gb': config.get_min_free_space_gb(),
            'logfile': config.get_log_file(),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})

        missing = [name for name in ('source', 'destination') if not values.get(name)]
        if missing:
            raise ConfigurationError(
                f"Both source and destination must be provided (missing: {', '.join(missing)})"
            )

        run_config = cls(
            source=Path(values['source']).expanduser().absolute(),
            destination=Path(values['destination']).expanduser().absolute(),
            copy=bool(values['copy']),
            dry_run=bool(values['dry_run']),
            collision=values['collision'],
            verify_copies=bool(values['verify_copies']),
            filter_extensions=bool(values['filter_extensions']),
            min_free_space_gb=values['min_free_space_gb'],
            logfile=Path(values['logfile']) if values.get('logfile') else None,
            photo_extensions=list(extensions['photos']),
            video_extensions=list(extensions['videos']),
            archive_extensions=list(extensions['archives']),
        )
        errors = run_config.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))
        return run_config

    def validate(self) -> List[str]:
        """Return a list of problems with these settings (empty when valid)."""
        errors = []
        if self.collision not in COLLISION_POLICIES:
            errors.append(
                f"Invalid collision policy: {self.collision} "
                f"(must be one of {', '.join(COLLISION_POLICIES)})"
            )
        if self.source == self.destination:
            errors.append(f"Source and destination are the same: {self.source}")
        if not isinstance(self.min_free_space_gb, int) or self.min_free_space_gb < 0:
            errors.append(f"Invalid min_free_space_gb value: {self.min_free_space_gb}")
        return errors

    def with_overrides(self, **changes: Any) -> 'RunConfiguration':
        return replace(self, **changes)
