"""
Configuration Tests
===================
Tests for YAML loading, validation and defaults.
"""

import pytest
import yaml

from bandwidth_monitor.config import MonitorConfig
from bandwidth_monitor.errors import ConfigError


class TestDefaults:
    """Default configuration values."""

    def test_defaults_are_valid(self):
        config = MonitorConfig()
        assert config.validate() == []

    def test_default_values(self):
        config = MonitorConfig()
        assert config.sampling.update_interval == 1.0
        assert config.history.capacity == 60
        assert config.history.rate_floor == 1024.0
        assert config.collector.backend == "auto"
        assert config.public_ip.enabled is True


class TestYamlLoading:
    """Loading from files."""

    def test_partial_file(self, tmp_path):
        """Missing sections keep their defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("history:\n  capacity: 120\n")

        config = MonitorConfig.from_yaml(str(path))

        assert config.history.capacity == 120
        assert config.history.headroom == 1.1
        assert config.sampling.update_interval == 1.0

    def test_save_and_reload(self, tmp_path):
        config = MonitorConfig()
        config.sampling.update_interval = 2.5
        config.collector.backend = "psutil"
        path = tmp_path / "saved.yaml"

        config.save_yaml(str(path))
        loaded = MonitorConfig.from_yaml(str(path))

        assert loaded.to_dict() == config.to_dict()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert MonitorConfig.from_yaml(str(path)).to_dict() == MonitorConfig().to_dict()

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(ConfigError):
            MonitorConfig.load(str(tmp_path / "nope.yaml"))

    def test_load_without_files(self, tmp_path, monkeypatch):
        """No config anywhere means defaults."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))

        config = MonitorConfig.load()

        assert config.validate() == []


class TestInvalidConfig:
    """Rejected configuration."""

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("sampling: [unclosed\n")

        with pytest.raises(ConfigError):
            MonitorConfig.from_yaml(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text(yaml.safe_dump([1, 2, 3]))

        with pytest.raises(ConfigError):
            MonitorConfig.from_yaml(str(path))

    def test_wrong_type(self, tmp_path):
        path = tmp_path / "type.yaml"
        path.write_text("history:\n  capacity: lots\n")

        with pytest.raises(ConfigError):
            MonitorConfig.from_yaml(str(path))

    def test_validation_errors(self):
        config = MonitorConfig()
        config.sampling.update_interval = 0
        config.history.capacity = 0
        config.history.headroom = 0.5
        config.collector.backend = "carrier-pigeon"

        errors = config.validate()

        assert len(errors) == 4

    def test_flags_must_be_booleans(self, tmp_path):
        """Quoted "false" is a string, not a boolean."""
        path = tmp_path / "flags.yaml"
        path.write_text('collector:\n  parallel: "false"\n')

        with pytest.raises(ConfigError):
            MonitorConfig.from_yaml(str(path))

    def test_boolean_flags_reported(self):
        config = MonitorConfig()
        config.public_ip.enabled = "yes"
        config.dashboard.show_chart = 1

        errors = config.validate()

        assert len(errors) == 2
        assert any("public_ip.enabled" in e for e in errors)

    def test_invalid_values_in_file(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text("public_ip:\n  ttl: -5\n")

        with pytest.raises(ConfigError):
            MonitorConfig.from_yaml(str(path))
