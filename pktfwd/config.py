"""Agent configuration.

Loads from a YAML file if present, with environment variable overrides.
Environment variables use the pattern: PKTFWD_<SECTION>_<KEY> (uppercase).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from pktfwd.core.models import Location

# Searched in order when no explicit path is given.
DEFAULT_CONFIG_PATHS = (Path("config.yaml"), Path("~/.pktfwd.yml"))


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class GatewayConfig:
    frequency_plan: str = "EU_863_870"
    description: str = ""
    contact_email: str = ""
    trusted: bool = True
    gps_chip: bool = False
    # Antenna location as registered on the account server
    latitude: float | None = None
    longitude: float | None = None
    altitude: float | None = None

    def antenna_location(self) -> Location | None:
        location = Location(
            latitude=self.latitude,
            longitude=self.longitude,
            altitude=self.altitude,
        )
        return None if location.is_empty else location


@dataclass
class GPSConfig:
    serial_port: str = "/dev/ttyS0"
    baud_rate: int = 9600
    timeout_seconds: float = 2.0


@dataclass
class StatusConfig:
    interval_seconds: float = 30.0
    deadline_seconds: float = 10.0
    outbox_size: int = 100


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    gps: GPSConfig = field(default_factory=GPSConfig)
    status: StatusConfig = field(default_factory=StatusConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "PKTFWD_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "PKTFWD_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "PKTFWD_GATEWAY_FREQUENCY_PLAN": lambda v: setattr(config.gateway, "frequency_plan", v),
        "PKTFWD_GATEWAY_DESCRIPTION": lambda v: setattr(config.gateway, "description", v),
        "PKTFWD_GATEWAY_CONTACT_EMAIL": lambda v: setattr(config.gateway, "contact_email", v),
        "PKTFWD_GATEWAY_TRUSTED": lambda v: setattr(config.gateway, "trusted", _parse_bool(v)),
        "PKTFWD_GATEWAY_GPS_CHIP": lambda v: setattr(config.gateway, "gps_chip", _parse_bool(v)),
        "PKTFWD_GATEWAY_LATITUDE": lambda v: setattr(config.gateway, "latitude", float(v)),
        "PKTFWD_GATEWAY_LONGITUDE": lambda v: setattr(config.gateway, "longitude", float(v)),
        "PKTFWD_GATEWAY_ALTITUDE": lambda v: setattr(config.gateway, "altitude", float(v)),
        "PKTFWD_GPS_SERIAL_PORT": lambda v: setattr(config.gps, "serial_port", v),
        "PKTFWD_GPS_BAUD_RATE": lambda v: setattr(config.gps, "baud_rate", int(v)),
        "PKTFWD_GPS_TIMEOUT": lambda v: setattr(config.gps, "timeout_seconds", float(v)),
        "PKTFWD_STATUS_INTERVAL": lambda v: setattr(config.status, "interval_seconds", float(v)),
        "PKTFWD_STATUS_DEADLINE": lambda v: setattr(config.status, "deadline_seconds", float(v)),
        "PKTFWD_STATUS_OUTBOX_SIZE": lambda v: setattr(config.status, "outbox_size", int(v)),
        "PKTFWD_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "PKTFWD_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


def _find_config_file() -> Path | None:
    for candidate in DEFAULT_CONFIG_PATHS:
        path = candidate.expanduser()
        if path.exists():
            return path
    return None


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    if config_path is None:
        config_path = _find_config_file()
    else:
        config_path = Path(config_path).expanduser()

    if config_path is not None and config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section in ("server", "gateway", "gps", "status", "logging"):
            if section in raw:
                target = getattr(config, section)
                for k, v in (raw[section] or {}).items():
                    if hasattr(target, k):
                        setattr(target, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
