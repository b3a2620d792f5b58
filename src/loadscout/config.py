"""
Configuration for loadscout runs.

Settings come from, in increasing order of precedence:
1. built-in defaults
2. a YAML file: ``--config``, else LOADSCOUT_CONFIG, else ./loadscout.yaml if present
3. environment variables (LOADSCOUT_ENGINE, LOADSCOUT_LOG_LEVEL, LOADSCOUT_TRACE,
   LOADSCOUT_TRACE_FILE, LOADSCOUT_OTLP_ENDPOINT)
4. command-line flags (applied by the CLI)

Example loadscout.yaml:

    modules:
      - scenarios/checkout.py
      - build/lib/payments_scenarios.cpython-312-x86_64-linux-gnu.so
    engine: my_engine.adapter:Engine
    log_level: INFO
    tracing:
      exporter: otlp
      endpoint: http://localhost:4318
      service_name: loadscout

Relative module paths are resolved against the directory of the config file.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .telemetry import TRACE_EXPORTERS

DEFAULT_CONFIG_NAME = "loadscout.yaml"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SERVICE_NAME = "loadscout"

ENV_CONFIG = "LOADSCOUT_CONFIG"
ENV_ENGINE = "LOADSCOUT_ENGINE"
ENV_LOG_LEVEL = "LOADSCOUT_LOG_LEVEL"
ENV_TRACE = "LOADSCOUT_TRACE"
ENV_TRACE_FILE = "LOADSCOUT_TRACE_FILE"
ENV_OTLP_ENDPOINT = "LOADSCOUT_OTLP_ENDPOINT"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one run."""

    modules: tuple[str, ...] = ()
    engine: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL
    trace_exporter: str = "none"
    trace_file: str | None = None
    otlp_endpoint: str | None = None
    service_name: str = DEFAULT_SERVICE_NAME
    config_path: Path | None = None


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from ``path``; an empty file is an empty mapping."""
    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return data


def find_config(
    explicit: str | os.PathLike | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Return the config file to use, or None when there is none."""
    env = os.environ if environ is None else environ
    if explicit:
        return Path(explicit).expanduser()
    from_env = env.get(ENV_CONFIG, "").strip()
    if from_env:
        return Path(from_env).expanduser()
    default = Path.cwd() / DEFAULT_CONFIG_NAME
    return default if default.is_file() else None


def _str_or_none(data: Mapping[str, Any], key: str, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ConfigError(f"{where}{key} must be a string")
    text = str(value).strip()
    return text or None


def _modules(data: Mapping[str, Any], base_dir: Path) -> tuple[str, ...]:
    raw = data.get("modules") or []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list) or not all(isinstance(m, str) for m in raw):
        raise ConfigError("modules must be a list of paths")
    resolved = []
    for entry in raw:
        p = Path(entry).expanduser()
        resolved.append(str(p if p.is_absolute() else base_dir / p))
    return tuple(resolved)


def normalize_log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"Invalid log level {value!r}; expected one of {', '.join(LOG_LEVELS)}")
    return level


def normalize_trace_exporter(value: str) -> str:
    exporter = value.strip().lower()
    if exporter not in TRACE_EXPORTERS:
        raise ConfigError(
            f"Invalid trace exporter {value!r}; expected one of {', '.join(TRACE_EXPORTERS)}"
        )
    return exporter


def load_settings(
    config_path: str | os.PathLike | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Build Settings from the config file and environment.

    Raises:
        ConfigError: if the config file is missing (when given explicitly),
            unreadable, or has invalid values.
    """
    env = os.environ if environ is None else environ
    path = find_config(config_path, env)
    data: dict[str, Any] = {}
    if path is not None:
        data = load_yaml(path)
    base_dir = path.resolve().parent if path is not None else Path.cwd()

    tracing = data.get("tracing") or {}
    if not isinstance(tracing, dict):
        raise ConfigError("tracing must be a mapping")

    engine = env.get(ENV_ENGINE, "").strip() or _str_or_none(data, "engine", "")
    log_level = (
        env.get(ENV_LOG_LEVEL, "").strip()
        or _str_or_none(data, "log_level", "")
        or DEFAULT_LOG_LEVEL
    )
    exporter = (
        env.get(ENV_TRACE, "").strip() or _str_or_none(tracing, "exporter", "tracing.") or "none"
    )
    trace_file = env.get(ENV_TRACE_FILE, "").strip() or _str_or_none(tracing, "file", "tracing.")
    endpoint = env.get(ENV_OTLP_ENDPOINT, "").strip() or _str_or_none(
        tracing, "endpoint", "tracing."
    )
    service_name = _str_or_none(tracing, "service_name", "tracing.") or DEFAULT_SERVICE_NAME

    return Settings(
        modules=_modules(data, base_dir),
        engine=engine or None,
        log_level=normalize_log_level(log_level),
        trace_exporter=normalize_trace_exporter(exporter),
        trace_file=trace_file,
        otlp_endpoint=endpoint,
        service_name=service_name,
        config_path=path,
    )
