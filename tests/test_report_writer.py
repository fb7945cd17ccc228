"""Tests for result rendering and export."""

import csv
import io
import json

import pytest
import yaml

from arp_discovery.core.data_models import CompletionReason, HostDetails, ScanReport
from arp_discovery.utils.report_writer import ReportWriter


@pytest.fixture
def report():
    return ScanReport(
        replies=(),
        elapsed=1.2345,
        completion_reason=CompletionReason.GRACE_ELAPSED,
        target_count=254,
        probes_sent=254,
        packet_count=40,
        arp_count=12,
    )


@pytest.fixture
def hosts():
    return [
        HostDetails("10.0.0.20", "aa:bb:cc:00:00:20", hostname="nas.lan", vendor="Example"),
        HostDetails("10.0.0.3", "aa:bb:cc:00:00:03"),
    ]


class TestStructuredExport:
    """Tests for JSON, YAML and CSV output."""

    def test_json_export(self, report, hosts, quiet_logger):
        data = json.loads(ReportWriter(quiet_logger).render(report, hosts, "json"))
        assert data["packet_count"] == 40
        assert data["arp_count"] == 12
        assert data["duration_ms"] == 1234
        assert [r["ipv4"] for r in data["results"]] == ["10.0.0.3", "10.0.0.20"]
        assert data["results"][1] == {
            "ipv4": "10.0.0.20", "mac": "aa:bb:cc:00:00:20", "hostname": "nas.lan", "vendor": "Example"
        }
        assert data["results"][0]["hostname"] == ""

    def test_yaml_export(self, report, hosts, quiet_logger):
        data = yaml.safe_load(ReportWriter(quiet_logger).render(report, hosts, "yaml"))
        assert data["duration_ms"] == 1234
        assert len(data["results"]) == 2

    def test_csv_export(self, report, hosts, quiet_logger):
        content = ReportWriter(quiet_logger).render(report, hosts, "csv")
        rows = list(csv.DictReader(io.StringIO(content)))
        assert [row["ipv4"] for row in rows] == ["10.0.0.3", "10.0.0.20"]
        assert rows[1]["vendor"] == "Example"

    def test_unknown_format_raises(self, report, hosts, quiet_logger):
        with pytest.raises(ValueError):
            ReportWriter(quiet_logger).render(report, hosts, "xml")


class TestFileOutput:
    """Tests for writing exports to disk."""

    def test_write_creates_file(self, tmp_path, quiet_logger):
        path = ReportWriter(quiet_logger).write("{}", str(tmp_path / "out" / "scan.json"))
        assert path.read_text(encoding="utf-8") == "{}"

    def test_existing_file_is_not_overwritten(self, tmp_path, quiet_logger):
        target = tmp_path / "scan.json"
        target.write_text("old", encoding="utf-8")
        path = ReportWriter(quiet_logger).write("new", str(target))
        assert path.name == "scan_001.json"
        assert target.read_text(encoding="utf-8") == "old"


class TestTable:
    """Tests for the plain console table."""

    def test_table_lists_hosts_and_summary(self, report, hosts, capsys):
        from arp_discovery.utils.logger import Logger
        ReportWriter(Logger("test")).print_table(report, hosts)
        out = capsys.readouterr().out
        assert out.index("10.0.0.3") < out.index("10.0.0.20")
        assert "nas.lan" in out
        assert "2 hosts found" in out
        assert "40 packets received" in out
        assert "12 ARP packets filtered" in out

    def test_disabled_hostnames_are_marked(self, report, capsys):
        from arp_discovery.utils.logger import Logger
        hosts = [HostDetails("10.0.0.3", "aa:bb:cc:00:00:03")]
        ReportWriter(Logger("test")).print_table(report, hosts, hostnames_enabled=False)
        out = capsys.readouterr().out
        assert "(disabled)" in out
        assert "1 host found" in out
