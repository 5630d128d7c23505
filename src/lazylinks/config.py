"""Configuration management for lazylinks.

Matching behavior is controlled by a `LinkerConfig`. Values come from, in
order of precedence:

1. An explicit path passed to `load_config()` (the CLI's --config option)
2. The LAZYLINKS_CONFIG environment variable
3. A `.lazylinks.yaml` file at the vault root
4. Built-in defaults

Keys may be written in snake_case or in the camelCase used by the editor
plugin's own `data.json`, so that file can be pointed at directly:

    matchStart: true
    matchEnd: true
    matchMiddle: false
    minMatchLength: 3
    includeHeaders: true
    headerLevels: {h1: true, h2: true, h3: false}
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)

# Config file looked up at the vault root
CONFIG_FILENAME = ".lazylinks.yaml"

# Environment variable naming an explicit config file
CONFIG_ENV_VAR = "LAZYLINKS_CONFIG"

# Shortest substring the partial matcher will consider (and shortest
# heading text that gets indexed)
DEFAULT_MIN_MATCH_LENGTH = 3

# Quiet period before a filesystem change triggers an index rebuild
DEFAULT_DEBOUNCE_SECONDS = 2.0

# Span classes handed to text surfaces
LINK_CLASS = "cm-virtual-link"
MUTED_LINK_CLASS = "cm-virtual-link-muted"

# Directories never scanned for documents
IGNORED_DIRS = frozenset({".obsidian", ".git", ".trash"})


class ConfigurationError(Exception):
    """Raised when a config file cannot be read or is invalid."""

    pass


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class HeaderLevels(_ConfigModel):
    """Which heading levels are indexed when header indexing is on."""

    h1: bool = True
    h2: bool = True
    h3: bool = True
    h4: bool = False
    h5: bool = False
    h6: bool = False

    def is_enabled(self, level: int) -> bool:
        return bool(getattr(self, f"h{level}", False))


class LinkerConfig(_ConfigModel):
    """Matching and indexing options. Read-only to the engine."""

    match_start: bool = True
    match_end: bool = True
    match_middle: bool = False
    min_match_length: int = Field(default=DEFAULT_MIN_MATCH_LENGTH, ge=1)
    include_headers: bool = False
    header_levels: HeaderLevels = Field(default_factory=HeaderLevels)
    debug_mode: bool = False
    enable_reading_mode: bool = False

    @property
    def partial_matching(self) -> bool:
        """True when at least one of start/end/middle matching is on."""
        return self.match_start or self.match_end or self.match_middle


def find_config_file(vault_root: Path | None = None) -> Path | None:
    """Locate the config file to use, without reading it.

    Args:
        vault_root: Vault directory searched for `.lazylinks.yaml`.

    Returns:
        Path to the config file, or None when defaults apply.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    if vault_root is not None:
        candidate = Path(vault_root) / CONFIG_FILENAME
        if candidate.is_file():
            return candidate

    return None


def load_config(path: Path | None = None, vault_root: Path | None = None) -> LinkerConfig:
    """Load matching configuration.

    Args:
        path: Explicit config file. Takes precedence over discovery.
        vault_root: Vault directory used for discovery when no path is given.

    Returns:
        The effective LinkerConfig. Missing keys take their defaults.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid.
    """
    config_path = Path(path) if path is not None else find_config_file(vault_root)
    if config_path is None:
        return LinkerConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"{config_path}: cannot read config: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{config_path}: invalid YAML: {e}") from e

    # Empty or all-comments file
    if data is None:
        return LinkerConfig()

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path}: expected a mapping at top level")

    try:
        config = LinkerConfig.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc}: {error['msg']}")
        raise ConfigurationError(f"{config_path}: invalid config:\n" + "\n".join(errors)) from e

    log.debug("Loaded config from %s", config_path)
    return config


def save_config(config: LinkerConfig, path: Path) -> Path:
    """Write configuration as YAML (snake_case keys).

    Args:
        config: Configuration to persist.
        path: Destination file.

    Returns:
        The path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return path
