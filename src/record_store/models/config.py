"""Configuration model for record store."""

from pathlib import Path
from typing import Any, Dict
import json
from dataclasses import dataclass, field

from ..exceptions import ConfigurationError


@dataclass
class CacheConfig:
    """Configuration for the catalog query cache."""
    ttl_seconds: float = 60.0
    max_entries: int = 100


@dataclass
class MusicBrainzConfig:
    """Configuration for tracklist enrichment."""
    enabled: bool = True
    base_url: str = "https://musicbrainz.org/ws/2"
    user_agent: str = "RecordStore/1.0 (https://github.com/nibzard/record-store)"
    timeout: float = 10.0  # seconds, whole request
    rate_limit: float = 1.0  # requests per second


@dataclass
class PaginationConfig:
    """Configuration for paginated listings."""
    default_page_size: int = 20
    max_page_size: int = 100


@dataclass
class StorageConfig:
    """Configuration for the JSON document store."""
    data_directory: Path = field(
        default_factory=lambda: Path.home() / ".local" / "share" / "record-store"
    )


@dataclass
class Config:
    """Main configuration model."""
    cache: CacheConfig = field(default_factory=CacheConfig)
    musicbrainz: MusicBrainzConfig = field(default_factory=MusicBrainzConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    @classmethod
    def default(cls) -> "Config":
        """Create a configuration with every default applied."""
        return cls()

    def validate(self) -> None:
        """Reject values the services cannot work with."""
        if self.cache.ttl_seconds <= 0:
            raise ConfigurationError("cache.ttl_seconds must be positive")
        if self.cache.max_entries < 1:
            raise ConfigurationError("cache.max_entries must be at least 1")
        if self.musicbrainz.timeout <= 0:
            raise ConfigurationError("musicbrainz.timeout must be positive")
        if self.musicbrainz.rate_limit <= 0:
            raise ConfigurationError("musicbrainz.rate_limit must be positive")
        if not 1 <= self.pagination.default_page_size <= self.pagination.max_page_size:
            raise ConfigurationError(
                "pagination.default_page_size must be between 1 and max_page_size"
            )


def _dataclass_to_dict(obj):
    """Convert dataclass to dict recursively."""
    from dataclasses import is_dataclass, asdict
    if is_dataclass(obj):
        result = {}
        for key, value in asdict(obj).items():
            result[key] = _dataclass_to_dict(value)
        return result
    elif isinstance(obj, Path):
        return str(obj)
    elif isinstance(obj, dict):
        return {key: _dataclass_to_dict(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_dataclass_to_dict(item) for item in obj]
    else:
        return obj


def _dict_to_dataclass(data, dataclass_type):
    """Convert dict to dataclass recursively."""
    from dataclasses import is_dataclass, fields
    if not is_dataclass(dataclass_type):
        return data
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected an object for {dataclass_type.__name__}, got {type(data).__name__}"
        )

    field_types = {f.name: f.type for f in fields(dataclass_type)}
    unknown = set(data) - set(field_types)
    if unknown:
        raise ConfigurationError(
            f"Unknown {dataclass_type.__name__} keys: {', '.join(sorted(unknown))}"
        )

    kwargs = {}
    for field_name, field_type in field_types.items():
        if field_name in data:
            if hasattr(field_type, '__dataclass_fields__'):
                kwargs[field_name] = _dict_to_dataclass(data[field_name], field_type)
            elif field_type is Path:
                kwargs[field_name] = Path(data[field_name]).expanduser()
            else:
                kwargs[field_name] = data[field_name]

    return dataclass_type(**kwargs)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """Build a validated Config from plain data."""
    config = _dict_to_dataclass(data, Config)
    config.validate()
    return config


def load_config(config_path: Path) -> Config:
    """Load configuration from JSON file."""
    try:
        with open(config_path, 'r') as f:
            config_data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file {config_path}: {e}") from e

    return config_from_dict(config_data)


def save_config(config: Config, config_path: Path) -> None:
    """Save configuration to JSON file."""
    config_dict = _dataclass_to_dict(config)

    try:
        with open(config_path, 'w') as f:
            json.dump(config_dict, f, indent=2)
    except OSError as e:
        raise ConfigurationError(f"Cannot write config file {config_path}: {e}") from e


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    save_config(Config.default(), config_path)
