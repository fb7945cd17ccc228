"""
Configuration loader for ARP discovery.
Handles loading and validation of the YAML scan defaults with fallback to
built-in defaults, and the named scan profiles.
"""

import dataclasses
import yaml
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field
from pathlib import Path

from ..utils.error_handler import ConfigError
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import BROADCAST_MAC, is_valid_ip, is_valid_mac, normalize_mac


@dataclass(frozen=True)
class SessionConfig:
    """
    Immutable settings of one scan session.

    Timeouts and intervals are in seconds.
    """
    network: str = ""
    interface: Optional[str] = None
    per_target_timeout: float = 0.5
    global_timeout: float = 30.0
    retry_count: int = 1
    pacing_interval: float = 0.01
    grace_period: float = 2.0
    poll_interval: float = 0.05
    source_ipv4: Optional[str] = None
    source_mac: Optional[str] = None
    destination_mac: str = BROADCAST_MAC
    exclude: Tuple[str, ...] = ()
    randomize_targets: bool = False
    random_seed: Optional[int] = None

    def validate(self) -> None:
        """
        Check values that cannot be repaired silently.

        Raises:
            ConfigError: On the first invalid setting
        """
        if not self.network:
            raise ConfigError("No network range to scan")
        for name in ("per_target_timeout", "global_timeout", "poll_interval"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("pacing_interval", "grace_period"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative, got {getattr(self, name)}")
        if self.retry_count < 0:
            raise ConfigError(f"retry_count must not be negative, got {self.retry_count}")
        if self.source_ipv4 is not None and not is_valid_ip(self.source_ipv4):
            raise ConfigError(f"Invalid source IPv4 address: {self.source_ipv4}")
        for name in ("source_mac", "destination_mac"):
            value = getattr(self, name)
            if value is not None and not is_valid_mac(value):
                raise ConfigError(f"Invalid {name.replace('_', ' ')}: {value}")

    def with_overrides(self, **changes: Any) -> "SessionConfig":
        """Return a copy with every non-None value in ``changes`` applied."""
        changes = {key: value for key, value in changes.items() if value is not None}
        for name in ("source_mac", "destination_mac"):
            if name in changes and is_valid_mac(changes[name]):
                changes[name] = normalize_mac(changes[name])
        if "exclude" in changes:
            changes["exclude"] = tuple(changes["exclude"])
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class ScanProfile:
    """Named bundle of scan settings."""
    name: str
    overrides: Dict[str, Any] = field(default_factory=dict)
    resolve_hostnames: bool = True


SCAN_PROFILES: Dict[str, ScanProfile] = {
    "default": ScanProfile("default"),
    "fast": ScanProfile(
        "fast",
        {"pacing_interval": 0.0, "grace_period": 0.5, "retry_count": 0},
        resolve_hostnames=False,
    ),
    "stealth": ScanProfile(
        "stealth",
        {"pacing_interval": 0.5, "randomize_targets": True},
    ),
    "chaos": ScanProfile(
        "chaos",
        {"pacing_interval": 0.005, "randomize_targets": True},
    ),
}


def get_profile(name: str) -> ScanProfile:
    """
    Look up a scan profile by name.

    Raises:
        ConfigError: If the profile does not exist
    """
    try:
        return SCAN_PROFILES[name]
    except KeyError:
        raise ConfigError(
            f"Unknown scan profile '{name}'. Choose one of: {', '.join(SCAN_PROFILES)}"
        ) from None


class ConfigLoader:
    """
    Loads and validates the YAML scan defaults.
    Provides fallback to default configuration when the file is missing.
    """

    def __init__(self, config_dir: Optional[str] = None, logger: Optional[Logger] = None):
        """
        Initialize ConfigLoader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to the config directory relative to this file.
        """
        if config_dir is None:
            self.config_dir = Path(__file__).parent
        else:
            self.config_dir = Path(config_dir)

        self.logger = logger or get_logger(__name__)

    def load_scan_config(self, config_file: str = "arp_config.yml") -> SessionConfig:
        """
        Load scan defaults from YAML file.

        Args:
            config_file: Name of the configuration file

        Returns:
            SessionConfig with loaded or default values; network and
            interface are left for the caller to fill in
        """
        config_path = self.config_dir / config_file
        defaults = SessionConfig()

        if not config_path.exists():
            self.logger.warning(f"Scan config file not found at {config_path}. Using default configuration.")
            return defaults

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing scan config file {config_path}: {e}")
            self.logger.warning("Using default scan configuration.")
            return defaults
        except OSError as e:
            self.logger.error(f"Cannot read scan config file {config_path}: {e}")
            self.logger.warning("Using default scan configuration.")
            return defaults

        if not isinstance(config_data, dict) or not isinstance(config_data.get('scan'), dict):
            self.logger.warning(f"Invalid scan config structure in {config_path}. Using default configuration.")
            return defaults

        scan_data = config_data['scan']

        return SessionConfig(
            per_target_timeout=self._validate_positive_float(
                scan_data.get('per_target_timeout', defaults.per_target_timeout),
                'per_target_timeout', defaults.per_target_timeout),
            global_timeout=self._validate_positive_float(
                scan_data.get('global_timeout', defaults.global_timeout),
                'global_timeout', defaults.global_timeout),
            retry_count=self._validate_non_negative_int(
                scan_data.get('retry_count', defaults.retry_count),
                'retry_count', defaults.retry_count),
            pacing_interval=self._validate_non_negative_float(
                scan_data.get('pacing_interval', defaults.pacing_interval),
                'pacing_interval', defaults.pacing_interval),
            grace_period=self._validate_non_negative_float(
                scan_data.get('grace_period', defaults.grace_period),
                'grace_period', defaults.grace_period),
            poll_interval=self._validate_positive_float(
                scan_data.get('poll_interval', defaults.poll_interval),
                'poll_interval', defaults.poll_interval),
            destination_mac=self._validate_mac(
                scan_data.get('destination_mac', defaults.destination_mac),
                'destination_mac', defaults.destination_mac),
            randomize_targets=self._validate_bool(
                scan_data.get('randomize_targets', defaults.randomize_targets),
                'randomize_targets', defaults.randomize_targets),
        )

    def _validate_positive_float(self, value: Any, field_name: str, default: float) -> float:
        """
        Validate that a value is a positive number.

        Returns:
            Validated value or default
        """
        try:
            float_value = float(value)
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a number. Using default: {default}")
            return default
        if float_value <= 0:
            self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
            return default
        return float_value

    def _validate_non_negative_float(self, value: Any, field_name: str, default: float) -> float:
        """Validate that a value is a number greater than or equal to zero."""
        try:
            float_value = float(value)
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a number. Using default: {default}")
            return default
        if float_value < 0:
            self.logger.warning(f"Invalid {field_name}: {value}. Must not be negative. Using default: {default}")
            return default
        return float_value

    def _validate_non_negative_int(self, value: Any, field_name: str, default: int) -> int:
        """Validate that a value is an integer greater than or equal to zero."""
        if isinstance(value, bool):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default
        try:
            int_value = int(value)
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default
        if int_value < 0:
            self.logger.warning(f"Invalid {field_name}: {value}. Must not be negative. Using default: {default}")
            return default
        return int_value

    def _validate_bool(self, value: Any, field_name: str, default: bool) -> bool:
        """Validate that a value is a YAML boolean."""
        if not isinstance(value, bool):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be true or false. Using default: {default}")
            return default
        return value

    def _validate_mac(self, value: Any, field_name: str, default: str) -> str:
        """Validate a MAC address setting."""
        if not isinstance(value, str) or not is_valid_mac(value):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a MAC address. Using default: {default}")
            return default
        return normalize_mac(value)

    def create_default_config(self, config_file: str = "arp_config.yml") -> Optional[Path]:
        """
        Create the default configuration file if it doesn't exist.

        Returns:
            Path of the created file, or None if it already existed or
            could not be written
        """
        config_path = self.config_dir / config_file
        if config_path.exists():
            return None

        defaults = SessionConfig()
        default_config = {
            'scan': {
                'per_target_timeout': defaults.per_target_timeout,
                'global_timeout': defaults.global_timeout,
                'retry_count': defaults.retry_count,
                'pacing_interval': defaults.pacing_interval,
                'grace_period': defaults.grace_period,
                'poll_interval': defaults.poll_interval,
                'destination_mac': defaults.destination_mac,
                'randomize_targets': defaults.randomize_targets,
            }
        }

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(default_config, f, default_flow_style=False, indent=2)
            self.logger.info(f"Created default scan config at {config_path}")
            return config_path
        except OSError as e:
            self.logger.error(f"Failed to create default scan config: {e}")
            return None
