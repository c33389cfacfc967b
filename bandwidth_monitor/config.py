"""Configuration management for bandwidth monitor."""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from pathlib import Path
import os

import yaml

from .errors import ConfigError


BACKENDS = ("auto", "psutil", "sysfs")


@dataclass
class SamplingConfig:
    """Update cadence."""
    update_interval: float = 1.0  # seconds between ticks
    poll_interval: float = 0.1  # max wait for input per loop iteration


@dataclass
class HistoryConfig:
    """History window configuration."""
    capacity: int = 60  # samples
    rate_floor: float = 1024.0  # bytes/s, graph scale when idle
    headroom: float = 1.1


@dataclass
class CollectorConfig:
    """Counter collection configuration."""
    backend: str = "auto"  # auto, psutil, sysfs
    parallel: bool = True
    max_workers: int = 0  # 0 = sized to the interface count


@dataclass
class PublicIpConfig:
    """Public IP lookup configuration."""
    enabled: bool = True
    ttl: float = 300.0  # seconds
    timeout: float = 3.0  # seconds per service


@dataclass
class DashboardConfig:
    """Dashboard configuration."""
    show_chart: bool = True


@dataclass
class MonitorConfig:
    """Main configuration container."""
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    public_ip: PublicIpConfig = field(default_factory=PublicIpConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonitorConfig":
        """Create config from dictionary."""
        config = cls()

        if "sampling" in data:
            samp = data["sampling"] or {}
            config.sampling = SamplingConfig(
                update_interval=float(samp.get("update_interval", 1.0)),
                poll_interval=float(samp.get("poll_interval", 0.1)),
            )

        if "history" in data:
            hist = data["history"] or {}
            config.history = HistoryConfig(
                capacity=int(hist.get("capacity", 60)),
                rate_floor=float(hist.get("rate_floor", 1024.0)),
                headroom=float(hist.get("headroom", 1.1)),
            )

        if "collector" in data:
            coll = data["collector"] or {}
            config.collector = CollectorConfig(
                backend=coll.get("backend", "auto"),
                parallel=coll.get("parallel", True),
                max_workers=int(coll.get("max_workers", 0)),
            )

        if "public_ip" in data:
            pub = data["public_ip"] or {}
            config.public_ip = PublicIpConfig(
                enabled=pub.get("enabled", True),
                ttl=float(pub.get("ttl", 300.0)),
                timeout=float(pub.get("timeout", 3.0)),
            )

        if "dashboard" in data:
            dash = data["dashboard"] or {}
            config.dashboard = DashboardConfig(
                show_chart=dash.get("show_chart", True),
            )

        return config

    @classmethod
    def from_yaml(cls, path: str) -> "MonitorConfig":
        """Load config from YAML file."""
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        try:
            config = cls.from_dict(data or {})
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value in {path}: {e}") from e

        errors = config.validate()
        if errors:
            raise ConfigError(f"Invalid config {path}: " + "; ".join(errors))
        return config

    @classmethod
    def load(cls, path: Optional[str] = None) -> "MonitorConfig":
        """Load config from file or use defaults."""
        if path and not os.path.exists(path):
            raise ConfigError(f"Config file not found: {path}")

        search_paths = [
            path,
            "config.yaml",
            "config.yml",
            os.path.expanduser("~/.config/bandwidth-monitor/config.yaml"),
            "/etc/bandwidth-monitor/config.yaml",
        ]

        for config_path in search_paths:
            if config_path and os.path.exists(config_path):
                return cls.from_yaml(config_path)

        return cls()

    def validate(self) -> List[str]:
        """Return a list of problems; empty when the config is usable."""
        errors = []

        if self.sampling.update_interval <= 0:
            errors.append("sampling.update_interval must be positive")
        if self.sampling.poll_interval <= 0:
            errors.append("sampling.poll_interval must be positive")

        if self.history.capacity < 1:
            errors.append("history.capacity must be at least 1")
        if self.history.rate_floor < 0:
            errors.append("history.rate_floor must not be negative")
        if self.history.headroom < 1.0:
            errors.append("history.headroom must be at least 1.0")

        for name, value in (
            ("collector.parallel", self.collector.parallel),
            ("public_ip.enabled", self.public_ip.enabled),
            ("dashboard.show_chart", self.dashboard.show_chart),
        ):
            if not isinstance(value, bool):
                errors.append(f"{name} must be true or false")

        if self.collector.backend not in BACKENDS:
            errors.append(f"collector.backend must be one of {', '.join(BACKENDS)}")
        if self.collector.max_workers < 0:
            errors.append("collector.max_workers must not be negative")

        if self.public_ip.ttl <= 0:
            errors.append("public_ip.ttl must be positive")
        if self.public_ip.timeout <= 0:
            errors.append("public_ip.timeout must be positive")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "sampling": {
                "update_interval": self.sampling.update_interval,
                "poll_interval": self.sampling.poll_interval,
            },
            "history": {
                "capacity": self.history.capacity,
                "rate_floor": self.history.rate_floor,
                "headroom": self.history.headroom,
            },
            "collector": {
                "backend": self.collector.backend,
                "parallel": self.collector.parallel,
                "max_workers": self.collector.max_workers,
            },
            "public_ip": {
                "enabled": self.public_ip.enabled,
                "ttl": self.public_ip.ttl,
                "timeout": self.public_ip.timeout,
            },
            "dashboard": {
                "show_chart": self.dashboard.show_chart,
            },
        }

    def save_yaml(self, path: str) -> None:
        """Save config to YAML file."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)
