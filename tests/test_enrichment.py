"""Tests for hostname and vendor enrichment."""

import socket

from arp_discovery.core.data_models import ReplyRecord
from arp_discovery.utils.enrichment import HostnameResolver, VendorLookup, enrich

OUI_CSV = """Registry,Assignment,Organization Name,Organization Address
MA-L,AABBCC,Example Networks Inc,1 Example Road
MA-L,001122,"Acme, Ltd",Somewhere
broken line
"""


def _write_oui(tmp_path):
    path = tmp_path / "oui.csv"
    path.write_text(OUI_CSV, encoding="utf-8")
    return path


class TestVendorLookup:
    """Tests for VendorLookup."""

    def test_loads_entries_and_skips_header(self, tmp_path, quiet_logger):
        vendors = VendorLookup(str(_write_oui(tmp_path)), quiet_logger)
        assert len(vendors) == 2
        assert vendors.enabled

    def test_lookup_by_mac_prefix(self, tmp_path, quiet_logger):
        vendors = VendorLookup(str(_write_oui(tmp_path)), quiet_logger)
        assert vendors.lookup("aa:bb:cc:12:34:56") == "Example Networks Inc"
        assert vendors.lookup("00-11-22-33-44-55") == "Acme, Ltd"
        assert vendors.lookup("02:00:00:00:00:01") is None

    def test_missing_file_disables_lookup(self, tmp_path, quiet_logger):
        vendors = VendorLookup(str(tmp_path / "missing.csv"), quiet_logger)
        assert not vendors.enabled
        assert vendors.lookup("aa:bb:cc:12:34:56") is None


class TestHostnameResolver:
    """Tests for HostnameResolver."""

    def test_resolved_name(self, monkeypatch, quiet_logger):
        monkeypatch.setattr(socket, "gethostbyaddr", lambda ip: (f"host-{ip.split('.')[-1]}", [], [ip]))
        resolver = HostnameResolver(logger=quiet_logger)
        assert resolver.resolve_all(["10.0.0.2", "10.0.0.3"]) == {
            "10.0.0.2": "host-2",
            "10.0.0.3": "host-3",
        }

    def test_lookup_failure_gives_none(self, monkeypatch, quiet_logger):
        def fail(ip):
            raise socket.herror(1, "Unknown host")
        monkeypatch.setattr(socket, "gethostbyaddr", fail)
        assert HostnameResolver(logger=quiet_logger).resolve("10.0.0.2") is None

    def test_no_addresses(self, quiet_logger):
        assert HostnameResolver(logger=quiet_logger).resolve_all([]) == {}


class TestEnrich:
    """Tests for enrich."""

    def test_enrich_combines_hostname_and_vendor(self, tmp_path, monkeypatch, quiet_logger):
        monkeypatch.setattr(socket, "gethostbyaddr", lambda ip: ("printer.lan", [], [ip]))
        replies = [
            ReplyRecord("10.0.0.7", "aa:bb:cc:00:00:07", 0.0),
            ReplyRecord("10.0.0.3", "02:00:00:00:00:03", 0.0),
        ]
        hosts = enrich(replies, HostnameResolver(logger=quiet_logger),
                       VendorLookup(str(_write_oui(tmp_path)), quiet_logger))

        assert [h.ip_address for h in hosts] == ["10.0.0.7", "10.0.0.3"]
        assert hosts[0].hostname == "printer.lan"
        assert hosts[0].vendor == "Example Networks Inc"
        assert hosts[1].vendor is None

    def test_enrich_without_lookups(self):
        hosts = enrich([ReplyRecord("10.0.0.7", "aa:bb:cc:00:00:07", 0.0)])
        assert hosts[0].hostname is None
        assert hosts[0].vendor is None
