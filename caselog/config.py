"""Configuration loading: bundled defaults, optional YAML file, then env vars.

Each layer overrides the previous one. Keys whose final value differs from
the bundled default are recorded so the harness can show what a consumer
changed.
"""

import copy
import logging
import os
from dataclasses import dataclass, field

import yaml

from caselog.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = "execution-output/test-logs/Logs.log"
DEFAULT_CAPTURE_BUDGET = 500

DEFAULTS = {
    "log": {
        "default_path": DEFAULT_LOG_PATH,
        "encoding": "utf-8",
    },
    "markers": {
        "start": "Test case started",
        "end_success": "Test case pass",
        "end_failure": "Test case fail",
    },
    "extraction": {
        "capture_budget": DEFAULT_CAPTURE_BUDGET,
        "case_sensitive": True,
    },
    "show_overrides": False,
}

# env var -> (section, key, converter name)
ENV_OVERRIDES = {
    "CASELOG_DEFAULT_LOG_PATH": ("log", "default_path", "str"),
    "CASELOG_LOG_ENCODING": ("log", "encoding", "str"),
    "CASELOG_CAPTURE_BUDGET": ("extraction", "capture_budget", "int"),
    "CASELOG_CASE_SENSITIVE": ("extraction", "case_sensitive", "bool"),
}


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_int(value, name: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}") from e


@dataclass(frozen=True)
class MarkerSet:
    start: str = DEFAULTS["markers"]["start"]
    end_success: str = DEFAULTS["markers"]["end_success"]
    end_failure: str = DEFAULTS["markers"]["end_failure"]


@dataclass(frozen=True)
class ExtractorConfig:
    markers: MarkerSet = field(default_factory=MarkerSet)
    capture_budget: int = DEFAULT_CAPTURE_BUDGET
    case_sensitive: bool = True
    default_log_path: str = DEFAULT_LOG_PATH
    encoding: str = "utf-8"
    overrides: tuple[tuple[str, str, str], ...] = ()   # (key, new, old)

    def validate(self) -> "ExtractorConfig":
        """Raise InvalidConfiguration unless budget and markers are usable."""
        validate_budget(self.capture_budget)
        validate_markers(self.markers)
        return self


def validate_budget(budget) -> None:
    if isinstance(budget, bool) or not isinstance(budget, int):
        raise InvalidConfiguration(f"capture_budget must be an integer, got {budget!r}")
    if budget < 1:
        raise InvalidConfiguration(f"capture_budget must be >= 1, got {budget}")


def validate_markers(markers: MarkerSet) -> None:
    for name in ("start", "end_success", "end_failure"):
        value = getattr(markers, name)
        if not isinstance(value, str) or not value:
            raise InvalidConfiguration(f"marker '{name}' must be a non-empty string")


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override dict into a copy of base."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def load_yaml_config(path: str | None) -> dict:
    """Load a YAML config file. Returns empty dict if there is nothing usable."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML in %s, using defaults: %s", path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring it", path)
        return {}
    logger.info("Loaded YAML config from %s", path)
    return data


def _section(data: dict, name: str) -> dict:
    """Return a config section, which must be a mapping when present."""
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidConfiguration(f"config section '{name}' must be a mapping")
    return value


def apply_env_overrides(data: dict, environ=None) -> dict:
    """Return a copy of data with CASELOG_* environment variables applied."""
    environ = os.environ if environ is None else environ
    result = copy.deepcopy(data)
    for env_name, (section, key, kind) in ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None:
            continue
        if kind == "int":
            value = _parse_int(raw, env_name)
        elif kind == "bool":
            value = _parse_bool(raw)
        else:
            value = raw
        if result.get(section) is None:
            result[section] = {}
        _section(result, section)[key] = value
    return result


def _flatten(data: dict, prefix: str = "") -> dict:
    flat = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, dotted + "."))
        else:
            flat[dotted] = value
    return flat


def find_overrides(merged: dict, defaults: dict = DEFAULTS) -> list[tuple[str, str, str]]:
    """List (key, new value, old value) for every key that differs from defaults."""
    base = _flatten(defaults)
    found = []
    for key, value in sorted(_flatten(merged).items()):
        if key in base and base[key] != value:
            found.append((key, str(value), str(base[key])))
    return found


def format_overrides(overrides) -> str:
    """Render the override list as a fixed-width table."""
    if not overrides:
        return "No configuration values differ from the defaults."
    row = "{:<30} | {:<40} | {:<40}"
    rule = "-" * 116
    lines = ["Configuration overrides:", rule, row.format("Key", "New value", "Old value"), rule]
    for key, new, old in overrides:
        lines.append(row.format(key, new, old))
    lines.append(rule)
    return "\n".join(lines)


def build_config(data: dict) -> ExtractorConfig:
    """Build and validate an ExtractorConfig from a fully merged dict."""
    log_section = _section(data, "log")
    markers_section = _section(data, "markers")
    extraction = _section(data, "extraction")

    markers = MarkerSet(
        start=markers_section.get("start", MarkerSet.start),
        end_success=markers_section.get("end_success", MarkerSet.end_success),
        end_failure=markers_section.get("end_failure", MarkerSet.end_failure),
    )
    config = ExtractorConfig(
        markers=markers,
        capture_budget=_parse_int(
            extraction.get("capture_budget", DEFAULT_CAPTURE_BUDGET), "capture_budget"
        ),
        case_sensitive=_parse_bool(extraction.get("case_sensitive", True)),
        default_log_path=str(log_section.get("default_path", DEFAULT_LOG_PATH)),
        encoding=str(log_section.get("encoding", "utf-8")),
        overrides=tuple(find_overrides(data)),
    )
    return config.validate()


def load_config(path: str | None = None, environ=None) -> ExtractorConfig:
    """Load the extractor configuration once, for injection into the extractor.

    ``path`` falls back to the ``CASELOG_CONFIG_PATH`` environment variable.
    """
    environ = os.environ if environ is None else environ
    path = path or environ.get("CASELOG_CONFIG_PATH")

    merged = deep_merge(DEFAULTS, load_yaml_config(path))
    merged = apply_env_overrides(merged, environ)
    config = build_config(merged)

    logger.info("Config: budget=%d, case_sensitive=%s, default_path=%s",
                config.capture_budget, config.case_sensitive, config.default_log_path)
    if _parse_bool(merged.get("show_overrides", False)):
        logger.info("%s", format_overrides(config.overrides))
    return config
