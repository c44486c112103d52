"""Global configuration — defaults, optional YAML file, env vars."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

# Fixed collection period in seconds
COLLECTION_INTERVAL = 15.0

DEFAULT_LISTEN_ADDRESS = ":32142"
SOURCE_NAMES = ("utmp", "command", "psutil", "auto")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "userexporter"
    return Path.home() / ".config" / "userexporter"


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``:port``) into host and port.

    An empty host means all interfaces. IPv6 hosts may be bracketed.
    """
    host, sep, port_text = address.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address {address!r} must be host:port or :port")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {address!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Port {port} out of range in listen address {address!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port


@dataclass
class ExporterConfig:
    """Application-wide configuration."""

    utmp_path: Path = Path("/var/run/utmp")
    listen_host: str = "0.0.0.0"
    listen_port: int = 32142
    metrics_path: str = "/metrics"
    source: str = "utmp"
    debug: bool = False
    config_dir: Path = field(default_factory=_default_config_dir)

    @property
    def listen_address(self) -> str:
        return f"{self.listen_host}:{self.listen_port}"

    def set_listen_address(self, address: str) -> None:
        self.listen_host, self.listen_port = parse_listen_address(address)

    def set_metrics_path(self, path: str) -> None:
        """Normalize to a leading slash and no trailing slash.

        ``/`` is rejected because the landing page lives there.
        """
        if not path.startswith("/"):
            path = "/" + path
        path = path.rstrip("/")
        if not path:
            raise ValueError("Telemetry path must not be '/'")
        self.metrics_path = path

    def set_source(self, source: str) -> None:
        if source not in SOURCE_NAMES:
            raise ValueError(
                f"Unknown source {source!r}; expected one of {', '.join(SOURCE_NAMES)}"
            )
        self.source = source

    def apply_mapping(self, data: dict) -> None:
        """Apply settings from a parsed YAML mapping."""
        if "utmp_path" in data:
            self.utmp_path = Path(data["utmp_path"])
        if "listen_address" in data:
            self.set_listen_address(str(data["listen_address"]))
        if "telemetry_path" in data:
            self.set_metrics_path(str(data["telemetry_path"]))
        if "source" in data:
            self.set_source(str(data["source"]))
        if "debug" in data:
            self.debug = bool(data["debug"])

    @classmethod
    def load(cls, path: str | Path | None = None) -> ExporterConfig:
        """Load config: defaults, then the YAML file, then environment variables."""
        config = cls()

        config_file = Path(path) if path else config.config_dir / "config.yaml"
        if path or config_file.is_file():
            try:
                data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            except (yaml.YAMLError, OSError) as exc:
                raise ValueError(f"Invalid YAML in {config_file}: {exc}") from exc
            if not isinstance(data, dict):
                raise ValueError(f"Config file {config_file} must be a mapping")
            config.apply_mapping(data)

        env_utmp = os.environ.get("USEREXPORTER_UTMP_PATH")
        if env_utmp:
            config.utmp_path = Path(env_utmp)

        env_listen = os.environ.get("USEREXPORTER_LISTEN_ADDRESS")
        if env_listen:
            config.set_listen_address(env_listen)

        env_telemetry = os.environ.get("USEREXPORTER_TELEMETRY_PATH")
        if env_telemetry:
            config.set_metrics_path(env_telemetry)

        env_source = os.environ.get("USEREXPORTER_SOURCE")
        if env_source:
            config.set_source(env_source)

        env_debug = os.environ.get("USEREXPORTER_DEBUG")
        if env_debug:
            config.debug = env_debug.strip().lower() in _TRUE_VALUES

        return config
