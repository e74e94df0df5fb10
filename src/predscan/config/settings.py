"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any

from predscan.analysis.thresholds import Thresholds, get_profile

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"

DEFAULT_PLATFORMS = ["polymarket", "kalshi", "predictit"]


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return Path(config_dir)
    cwd_config = Path.cwd() / "config"
    if cwd_config.exists():
        return cwd_config
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
    default_path = config_dir / "default.toml"
    base = _load_toml(default_path) if default_path.exists() else {}
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if not profile_path.exists():
            raise ValueError(f"config profile not found: {profile_path}")
        base = _deep_merge(base, _load_toml(profile_path))
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        scan: dict[str, Any] | None = None,
        alerts: dict[str, Any] | None = None,
        http: dict[str, Any] | None = None,
        platforms: dict[str, Any] | None = None,
        thresholds: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.scan = scan or {}
        self.alerts = alerts or {}
        self.http = http or {}
        self.platforms = platforms or {}
        self.thresholds = thresholds or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            scan=raw.get("scan"),
            alerts=raw.get("alerts"),
            http=raw.get("http"),
            platforms=raw.get("platforms"),
            thresholds=raw.get("thresholds"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def lookahead_minutes(self) -> int:
        return int(self.scan.get("lookahead_minutes", 180))

    @property
    def deadline_sec(self) -> float | None:
        value = self.scan.get("deadline_sec")
        return float(value) if value else None

    @property
    def scan_platforms(self) -> list[str]:
        return list(self.scan.get("platforms") or DEFAULT_PLATFORMS)

    @property
    def report_profile(self) -> str:
        return self.scan.get("threshold_profile", "report")

    @property
    def top_n(self) -> int:
        return int(self.scan.get("top", 10))

    @property
    def alert_lookahead_minutes(self) -> int:
        return int(self.alerts.get("lookahead_minutes", self.lookahead_minutes))

    @property
    def alert_platforms(self) -> list[str]:
        return list(self.alerts.get("platforms") or self.scan_platforms)

    @property
    def alert_profile(self) -> str:
        return self.alerts.get("threshold_profile", "alert")

    @property
    def alerts_output(self) -> str | None:
        return self.alerts.get("output")

    @property
    def http_timeout_sec(self) -> float:
        return float(self.http.get("timeout_sec", 30.0))

    def platform_options(self) -> dict[str, dict[str, Any]]:
        """Per-platform adapter kwargs, e.g. [platforms.kalshi] max_pages = 5."""
        return {name: dict(opts) for name, opts in self.platforms.items() if isinstance(opts, dict)}

    def get_thresholds(self, profile: str) -> Thresholds:
        """Named threshold profile with [thresholds.<profile>] overrides applied."""
        return get_profile(profile, self.thresholds.get(profile))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    # stderr keeps stdout clean for --json output
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
