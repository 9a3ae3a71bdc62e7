"""Configuration loading from CLI args, env vars, and optional YAML file.

Precedence, lowest to highest: dataclass defaults, YAML file, environment
variables, command-line flags.
"""

import logging
import os
from dataclasses import dataclass, fields

import yaml

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = "/var/log/apache2"

_ENV_VARS = {
    "log_dir": "HTTPD_REPORT_LOG_DIR",
    "access_glob": "HTTPD_REPORT_ACCESS_GLOB",
    "error_glob": "HTTPD_REPORT_ERROR_GLOB",
    "output_file": "HTTPD_REPORT_OUTPUT",
    "recurse": "HTTPD_REPORT_RECURSE",
    "follow_symlinks": "HTTPD_REPORT_FOLLOW_SYMLINKS",
}

_BOOL_FIELDS = ("follow_symlinks", "read_from_stdin", "read_gzipped_files", "recurse", "details")


class ConfigError(ValueError):
    pass


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    follow_symlinks: bool = False
    read_from_stdin: bool = False
    read_gzipped_files: bool = False
    recurse: bool = False
    details: bool = False
    access_glob: str = "*.access.log*"
    error_glob: str = "*.error.log*"
    log_dir: str = DEFAULT_LOG_DIR
    output_file: str | None = None
    input_files: tuple[str, ...] = ()


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path.

    Raises ConfigError if the file is missing, unreadable, or not a mapping.
    """
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc.strerror or exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    logger.debug("Loaded YAML config from %s", path)
    return data


def _settings_from_yaml(yaml_data: dict) -> dict:
    known = {f.name for f in fields(Config)}
    settings = {}
    for key, value in yaml_data.items():
        name = key.replace("-", "_")
        if name not in known:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        settings[name] = value
    return settings


def _settings_from_env() -> dict:
    settings = {}
    for name, var in _ENV_VARS.items():
        value = os.environ.get(var)
        if value is not None:
            settings[name] = value
    return settings


def _settings_from_cli(cli_args) -> dict:
    settings = {}
    # Flags only switch things on; an unset flag must not undo a YAML/env value
    for name in _BOOL_FIELDS:
        if getattr(cli_args, name, False):
            settings[name] = True
    for name in ("access_glob", "error_glob", "log_dir", "output_file"):
        value = getattr(cli_args, name, None)
        if value is not None:
            settings[name] = value
    files = getattr(cli_args, "files", None)
    if files:
        settings["input_files"] = files
    return settings


def load_config(cli_args=None, yaml_data: dict | None = None) -> Config:
    """Build the Config for one run from all layers."""
    settings = {}
    settings.update(_settings_from_yaml(yaml_data or {}))
    settings.update(_settings_from_env())
    if cli_args is not None:
        settings.update(_settings_from_cli(cli_args))

    for name in _BOOL_FIELDS:
        if name in settings:
            settings[name] = _parse_bool(settings[name])
    if "input_files" in settings:
        files = settings["input_files"]
        settings["input_files"] = (files,) if isinstance(files, str) else tuple(files)
    if settings.get("output_file") == "":
        settings["output_file"] = None

    return Config(**settings)
