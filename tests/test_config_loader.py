"""Tests for configuration loading, validation and scan profiles."""

import pytest
import yaml

from arp_discovery.config.config_loader import (
    SCAN_PROFILES, ConfigLoader, SessionConfig, get_profile
)
from arp_discovery.utils.error_handler import ConfigError
from arp_discovery.utils.network_utils import BROADCAST_MAC


def _write_config(tmp_path, data):
    path = tmp_path / "arp_config.yml"
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


class TestSessionConfig:
    """Tests for SessionConfig."""

    def test_defaults(self):
        config = SessionConfig()
        assert config.per_target_timeout == 0.5
        assert config.global_timeout == 30.0
        assert config.retry_count == 1
        assert config.pacing_interval == 0.01
        assert config.grace_period == 2.0
        assert config.poll_interval == 0.05
        assert config.destination_mac == BROADCAST_MAC

    def test_valid_config_passes(self):
        SessionConfig(network="10.0.0.0/24", source_ipv4="10.0.0.1",
                      source_mac="02:00:00:00:00:01").validate()

    @pytest.mark.parametrize("changes", [
        {"network": ""},
        {"per_target_timeout": 0},
        {"global_timeout": -1},
        {"poll_interval": 0},
        {"pacing_interval": -0.1},
        {"grace_period": -1},
        {"retry_count": -1},
        {"source_ipv4": "10.0.0.300"},
        {"source_mac": "not-a-mac"},
        {"destination_mac": "ff:ff:ff"},
    ])
    def test_invalid_values_raise(self, changes):
        config = SessionConfig(network="10.0.0.0/24").with_overrides(**changes)
        with pytest.raises(ConfigError):
            config.validate()

    def test_overrides_skip_none_and_normalize_macs(self):
        config = SessionConfig(network="10.0.0.0/24").with_overrides(
            retry_count=None, source_mac="AA-BB-CC-DD-EE-FF", exclude=["10.0.0.5"])
        assert config.retry_count == 1
        assert config.source_mac == "aa:bb:cc:dd:ee:ff"
        assert config.exclude == ("10.0.0.5",)

    def test_config_is_immutable(self):
        config = SessionConfig()
        with pytest.raises(AttributeError):
            config.retry_count = 5


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_bundled_config_matches_defaults(self):
        config = ConfigLoader(logger=None).load_scan_config()
        assert config == SessionConfig()

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        assert ConfigLoader(str(tmp_path)).load_scan_config() == SessionConfig()

    def test_values_are_loaded(self, tmp_path):
        _write_config(tmp_path, {"scan": {
            "per_target_timeout": 1.5,
            "retry_count": 3,
            "pacing_interval": 0,
            "destination_mac": "02:AA:BB:CC:DD:EE",
            "randomize_targets": True,
        }})
        config = ConfigLoader(str(tmp_path)).load_scan_config()
        assert config.per_target_timeout == 1.5
        assert config.retry_count == 3
        assert config.pacing_interval == 0.0
        assert config.destination_mac == "02:aa:bb:cc:dd:ee"
        assert config.randomize_targets is True

    def test_invalid_value_falls_back_to_field_default(self, tmp_path):
        _write_config(tmp_path, {"scan": {
            "global_timeout": -5,
            "retry_count": "many",
            "grace_period": 4,
            "destination_mac": "nope",
        }})
        config = ConfigLoader(str(tmp_path)).load_scan_config()
        assert config.global_timeout == 30.0
        assert config.retry_count == 1
        assert config.grace_period == 4.0
        assert config.destination_mac == BROADCAST_MAC

    @pytest.mark.parametrize("value", ["false", "yes", 1])
    def test_non_boolean_randomize_falls_back_to_default(self, tmp_path, value):
        """Only a YAML true/false turns shuffling on or off."""
        _write_config(tmp_path, {"scan": {"randomize_targets": value}})
        config = ConfigLoader(str(tmp_path)).load_scan_config()
        assert config.randomize_targets is False

    def test_invalid_structure_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "arp_config.yml").write_text("- just\n- a list\n", encoding="utf-8")
        assert ConfigLoader(str(tmp_path)).load_scan_config() == SessionConfig()

    def test_broken_yaml_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "arp_config.yml").write_text("scan: [unclosed\n", encoding="utf-8")
        assert ConfigLoader(str(tmp_path)).load_scan_config() == SessionConfig()

    def test_create_default_config(self, tmp_path):
        loader = ConfigLoader(str(tmp_path / "conf"))
        path = loader.create_default_config()
        assert path is not None and path.exists()
        assert loader.load_scan_config() == SessionConfig()
        assert loader.create_default_config() is None


class TestProfiles:
    """Tests for scan profiles."""

    def test_known_profiles(self):
        assert set(SCAN_PROFILES) == {"default", "fast", "stealth", "chaos"}

    def test_fast_profile_disables_hostnames_and_retries(self):
        profile = get_profile("fast")
        assert not profile.resolve_hostnames
        assert profile.overrides["retry_count"] == 0
        assert profile.overrides["pacing_interval"] == 0.0

    def test_stealth_profile_randomizes(self):
        config = SessionConfig().with_overrides(**get_profile("stealth").overrides)
        assert config.randomize_targets
        assert config.pacing_interval == 0.5

    def test_unknown_profile_raises(self):
        with pytest.raises(ConfigError):
            get_profile("turbo")
