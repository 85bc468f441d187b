"""Hook configuration and service account key loading.

Settings are layered: command-line values win over the environment, which
wins over the optional YAML config file, which wins over built-in defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from .certificate import DEFAULT_CHAIN_FILENAMES
from .errors import ConfigError
from .reconcile import DEFAULT_PORT, DEFAULT_PROTOCOL, DEFAULT_TTL

LOGGER = logging.getLogger(__name__)

CONFIG_DIR_NAME = "dane-hook"
CONFIG_FILENAME = "config.yaml"

ENV_LINEAGE = "RENEWED_LINEAGE"
ENV_DOMAINS = "RENEWED_DOMAINS"
ENV_KEY_FILE = "DANE_HOOK_KEY_FILE"
ENV_ZONE = "DANE_HOOK_ZONE"

SYSTEM_CONFIG_DIRS = [
    Path("/etc") / CONFIG_DIR_NAME,
    Path("/usr/local/etc") / CONFIG_DIR_NAME,
]

_SCHEMA_PACKAGE = "dane_hook.resources"
_SCHEMA_FILENAME = "config.schema.json"


@dataclass(frozen=True)
class HookConfig:
    """Settings for one hook invocation.

    Attributes:
        key_file (Path): Service account JSON key file.
        zone (str): Cloud DNS managed zone name.
        lineage (Path): Certificate lineage directory.
        domains (Tuple[str, ...]): Renewed domains reported by certbot.
        port (int): Port label for new TLSA owner names.
        protocol (str): Protocol label for new TLSA owner names.
        ttl (int): TTL for new TLSA records.
        chain_filenames (Tuple[str, ...]): Chain file names tried in order.
        dry_run (bool): Compute the change set without applying it.
    """

    key_file: Path
    zone: str
    lineage: Path
    domains: Tuple[str, ...] = ()
    port: int = DEFAULT_PORT
    protocol: str = DEFAULT_PROTOCOL
    ttl: int = DEFAULT_TTL
    chain_filenames: Tuple[str, ...] = field(default=DEFAULT_CHAIN_FILENAMES)
    dry_run: bool = False


@dataclass(frozen=True)
class ServiceAccountKey:
    """A parsed service account key file.

    Attributes:
        project_id (str): Cloud project the key belongs to.
        info (Dict[str, object]): Full key mapping used to build credentials.
    """

    project_id: str
    info: Dict[str, object]


def external_config_dirs(environ: Optional[Mapping[str, str]] = None) -> List[Path]:
    """Return directories that may contain a config file.

    Args:
        environ (Optional[Mapping[str, str]]): Environment, defaults to ``os.environ``.

    Returns:
        List[Path]: Ordered list of user and system config directories.
    """
    env = os.environ if environ is None else environ
    xdg_home = env.get("XDG_CONFIG_HOME")
    if xdg_home:
        user_dir = Path(xdg_home) / CONFIG_DIR_NAME
    else:
        user_dir = Path.home() / ".config" / CONFIG_DIR_NAME
    return [user_dir, *SYSTEM_CONFIG_DIRS]


def find_config_file(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Return the first config file found in the search directories.

    Args:
        environ (Optional[Mapping[str, str]]): Environment, defaults to ``os.environ``.

    Returns:
        Optional[Path]: Config file path, or None when none exists.
    """
    for directory in external_config_dirs(environ):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


@lru_cache(maxsize=1)
def _load_schema_validator() -> Draft202012Validator:
    """Load and cache the config file JSON Schema validator.

    Returns:
        Draft202012Validator: Validator for config payloads.
    """
    schema_text = (
        resources.files(_SCHEMA_PACKAGE).joinpath(_SCHEMA_FILENAME).read_text(encoding="utf-8")
    )
    return Draft202012Validator(json.loads(schema_text))


def _schema_error_text(err: ValidationError) -> str:
    """Render one schema validation error as ``location: message``."""
    location = ".".join(str(part) for part in err.absolute_path) or "<root>"
    return f"{location}: {err.message}"


def collect_config_schema_errors(payload: object) -> List[str]:
    """Collect sorted schema validation errors for a config payload.

    Args:
        payload (object): Decoded config file contents.

    Returns:
        List[str]: Error descriptions, empty when the payload is valid.
    """
    validator = _load_schema_validator()
    return sorted(_schema_error_text(err) for err in validator.iter_errors(payload))


def load_config_file(path: Path | str) -> dict:
    """Load and validate a YAML config file.

    Args:
        path (Path | str): Config file path.

    Returns:
        dict: Validated settings.

    Raises:
        ConfigError: If the file is unreadable, not YAML, or fails validation.
    """
    path = Path(path).expanduser()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as err:
        raise ConfigError(f"Cannot read config file {path}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigError(f"Config file {path} is not valid YAML: {err}") from err
    if data is None:
        return {}
    errors = collect_config_schema_errors(data)
    if errors:
        raise ConfigError(f"Config file {path} is invalid: " + "; ".join(errors))
    LOGGER.debug("Loaded config file %s", path)
    return dict(data)


def _first_set(*values: object) -> object:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def _parse_domains(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a space-separated ``RENEWED_DOMAINS`` value.

    Args:
        raw (Optional[str]): Environment value.

    Returns:
        Tuple[str, ...]: Domain names, empty when unset.
    """
    if not raw:
        return ()
    return tuple(raw.split())


def build_config(
    overrides: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path | str] = None,
) -> HookConfig:
    """Merge command-line values, environment and config file into a HookConfig.

    Args:
        overrides (Optional[Mapping[str, object]]): Command-line values; None means unset.
        environ (Optional[Mapping[str, str]]): Environment, defaults to ``os.environ``.
        config_path (Optional[Path | str]): Explicit config file. When omitted the
            search directories are used and a missing file is not an error.

    Returns:
        HookConfig: Resolved configuration.

    Raises:
        ConfigError: If the config file is invalid or a required value is missing.
    """
    overrides = overrides or {}
    env = os.environ if environ is None else environ
    path = Path(config_path) if config_path is not None else find_config_file(env)
    file_data = load_config_file(path) if path is not None else {}

    key_file = _first_set(
        overrides.get("key_file"), env.get(ENV_KEY_FILE), file_data.get("key_file")
    )
    zone = _first_set(overrides.get("zone"), env.get(ENV_ZONE), file_data.get("zone"))
    lineage = _first_set(overrides.get("lineage"), env.get(ENV_LINEAGE))

    missing = [
        label
        for label, value in (("key file", key_file), ("zone", zone), ("lineage", lineage))
        if not value
    ]
    if missing:
        raise ConfigError("Missing required setting(s): " + ", ".join(missing))

    domains = overrides.get("domains")
    if domains is None:
        domains = _parse_domains(env.get(ENV_DOMAINS))

    chain_filenames = file_data.get("chain_filenames") or DEFAULT_CHAIN_FILENAMES

    return HookConfig(
        key_file=Path(str(key_file)).expanduser(),
        zone=str(zone),
        lineage=Path(str(lineage)).expanduser(),
        domains=tuple(domains),
        port=int(_first_set(overrides.get("port"), file_data.get("port"), DEFAULT_PORT)),
        protocol=str(_first_set(file_data.get("protocol"), DEFAULT_PROTOCOL)),
        ttl=int(_first_set(overrides.get("ttl"), file_data.get("ttl"), DEFAULT_TTL)),
        chain_filenames=tuple(chain_filenames),
        dry_run=bool(overrides.get("dry_run", False)),
    )


def load_service_account_key(path: Path | str) -> ServiceAccountKey:
    """Read a service account JSON key file.

    Args:
        path (Path | str): Key file path.

    Returns:
        ServiceAccountKey: Project identifier and key mapping.

    Raises:
        ConfigError: If the file is unreadable, not a JSON object, or lacks ``project_id``.
    """
    path = Path(path).expanduser()
    try:
        info = json.loads(path.read_text(encoding="utf-8"))
    except OSError as err:
        raise ConfigError(f"Cannot read key file {path}: {err}") from err
    except ValueError as err:
        raise ConfigError(f"Key file {path} is not valid JSON: {err}") from err
    if not isinstance(info, dict):
        raise ConfigError(f"Key file {path} must contain a JSON object")
    project_id = info.get("project_id")
    if not isinstance(project_id, str) or not project_id:
        raise ConfigError(f"Key file {path} has no project_id")
    return ServiceAccountKey(project_id=project_id, info=info)


__all__ = [
    "ENV_DOMAINS",
    "ENV_KEY_FILE",
    "ENV_LINEAGE",
    "ENV_ZONE",
    "HookConfig",
    "ServiceAccountKey",
    "build_config",
    "collect_config_schema_errors",
    "external_config_dirs",
    "find_config_file",
    "load_config_file",
    "load_service_account_key",
]
