"""
YAML configuration parser for storefinder.

A configuration file holds the keyword arguments of StorageConfig. The
parser looks for one in the working directory, the home directory and
~/.config/storefinder, lays its values over the built-in defaults and
builds the StorageConfig. Without a file, the defaults point at ./storage
but never create it.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple, Union
import logging
from dataclasses import dataclass

from ..models.config import StorageConfig, validate_config_dict


logger = logging.getLogger(__name__)


# Written above each key by save_config and the template, in this order
SETTING_COMMENTS = (
    ("base_path", "Directory every storage path is resolved against"),
    ("visibility", "Default visibility of written files (public or private)"),
    ("directory_visibility", "Default visibility of created directories (public or private)"),
    ("case_sensitive", "Compare extensions case-sensitively in only/except filters"),
    ("recursive", "List directories recursively unless a query says otherwise"),
    ("create_base_path", "Create the base directory when it does not exist"),
)


@dataclass
class ConfigParseResult:
    """
    Outcome of loading a configuration.

    Attributes:
        config: The validated storage configuration
        warnings: Problems that did not stop loading
        config_path: File the values came from, None when only defaults were used
        is_default: True when no configuration file was found
    """
    config: StorageConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be read, parsed or validated."""
    pass


def _write_text(path: Union[str, Path], content: str, failure: str) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
    except OSError as e:
        raise ConfigurationError(f"{failure} {path}: {e}") from e
    return path


class ConfigParser:
    """
    Loads StorageConfig objects from YAML files.

    In strict mode any warning produced while loading is raised as a
    ConfigurationError instead of being returned.
    """

    # Earlier names win inside a directory
    DEFAULT_CONFIG_NAMES = [
        '.storefinder.yaml',
        '.storefinder.yml',
        'storefinder.yaml',
        'storefinder.yml'
    ]

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def get_search_paths(self) -> List[Path]:
        """Directories searched for a configuration file, in order."""
        home = Path.home()
        return [Path.cwd(), home, home / '.config' / 'storefinder']

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Build a StorageConfig from a file, the first file found in the
        search paths, or the defaults alone.

        Raises:
            ConfigurationError: If the named file is missing or any file is invalid
        """
        if config_path:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            values = self._load_yaml_file(config_path)
        else:
            config_path, values = self._find_and_load_config()

        is_default = values is None
        settings = self._resolve_settings(values or {})
        if is_default:
            # Nothing asked for ./storage, so do not create it as a side effect
            settings['create_base_path'] = False

        config = StorageConfig.from_dict(settings)
        warnings = config.validate_configuration() + self._get_parser_warnings(config, is_default)

        if warnings and self.strict_mode:
            raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

        self.logger.info(f"Using configuration from {config_path or 'defaults'}")
        return ConfigParseResult(config, warnings, config_path, is_default)

    def _find_and_load_config(self) -> Tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Return the first readable configuration file in the search paths
        with its contents, or (None, None).
        """
        candidates = (directory / name
                      for directory in self.get_search_paths()
                      for name in self.DEFAULT_CONFIG_NAMES)

        for candidate in candidates:
            if not candidate.is_file():
                continue
            try:
                values = self._load_yaml_file(candidate)
            except ConfigurationError as e:
                self.logger.warning(f"Ignoring {candidate}: {e}")
                continue
            self.logger.info(f"Found configuration file: {candidate}")
            return candidate, values

        self.logger.info("No configuration file found, using defaults")
        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Read a YAML mapping from a file. An empty file reads as {}.

        Raises:
            ConfigurationError: If the file cannot be read, is not YAML or is not a mapping
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

        if data is None:
            self.logger.warning(f"Configuration file is empty: {file_path}")
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")
        return data

    def _resolve_settings(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Lay file values over the defaults and validate the result."""
        settings = {**self._get_default_config(), **values}
        try:
            return validate_config_dict(settings)
        except ValueError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def _get_default_config(self) -> Dict[str, Any]:
        return {
            'base_path': str(Path.cwd() / 'storage'),
            'visibility': 'public',
            'directory_visibility': 'public',
            'case_sensitive': True,
            'recursive': False,
            'create_base_path': True
        }

    def _get_parser_warnings(self, config: StorageConfig, is_default: bool) -> List[str]:
        warnings = []
        if is_default:
            warnings.append("No configuration file found, using default settings")
        if not config.case_sensitive:
            warnings.append("Case-insensitive extension matching enabled, 'TXT' and 'txt' are treated alike")
        return warnings

    def save_config(self, config: StorageConfig, output_path: Union[str, Path]) -> None:
        """
        Write a configuration as commented YAML.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        path = _write_text(output_path, self._render(config.to_dict()), "Cannot write configuration file")
        self.logger.info(f"Configuration saved to {path}")

    def _render(self, settings: Dict[str, Any]) -> str:
        blocks = ["# storefinder configuration\n# Storage root, visibility defaults and listing behaviour\n"]
        for key, comment in SETTING_COMMENTS:
            if key not in settings:
                continue
            value = yaml.safe_dump({key: settings[key]}, default_flow_style=False).rstrip()
            blocks.append(f"# {comment}\n{value}\n")
        return "\n".join(blocks)

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """Check a configuration file and return its errors, empty when valid."""
        config_path = Path(config_path)
        if not config_path.exists():
            return [f"Configuration file not found: {config_path}"]

        try:
            self._resolve_settings(self._load_yaml_file(config_path))
        except ConfigurationError as e:
            return [str(e)]
        return []

    def get_config_template(self) -> str:
        """Commented YAML listing every setting with a sample value."""
        settings = self._get_default_config()
        settings['base_path'] = './storage'
        return self._render(settings)


def load_config(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> ConfigParseResult:
    """Load a configuration with a new ConfigParser."""
    return ConfigParser(strict_mode=strict_mode).load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    return ConfigParser().validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Write the configuration template to a file.

    Raises:
        ConfigurationError: If the file cannot be written
    """
    _write_text(output_path, ConfigParser().get_config_template(), "Cannot create template file")
