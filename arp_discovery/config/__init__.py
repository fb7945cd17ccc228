"""
Configuration module for ARP discovery.
Provides the session settings, scan profiles and YAML defaults loading.
"""

from .config_loader import ConfigLoader, SessionConfig, ScanProfile, SCAN_PROFILES, get_profile

__all__ = ['ConfigLoader', 'SessionConfig', 'ScanProfile', 'SCAN_PROFILES', 'get_profile']
