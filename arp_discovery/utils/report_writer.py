"""
Report Generator for ARP discovery.

This module renders the hosts found by a scan as a console table or exports
them as JSON, YAML or CSV, optionally to a file with collision handling.
"""

import csv
import io
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from ..core.data_models import HostDetails, ScanReport
from .logger import Logger, get_logger
from .network_utils import ip_sort_key

OUTPUT_FORMATS = ("plain", "json", "yaml", "csv")
CSV_FIELDS = ["ipv4", "mac", "hostname", "vendor"]


class ReportWriter:
    """
    Handles presentation and export of scan results.

    Structured exports carry the frame counters and the scan duration next to
    the host list; hosts are always sorted by IPv4 address.
    """

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the report writer.

        Args:
            logger: Logger used for the console table and file messages
        """
        self.logger = logger or get_logger(__name__)

    def to_dict(self, report: ScanReport, hosts: Sequence[HostDetails]) -> Dict[str, Any]:
        """
        Convert a report and its hosts to a serializable dictionary.

        Args:
            report: Completed scan report
            hosts: Enriched hosts of the report

        Returns:
            Dict with packet_count, arp_count, duration_ms and results
        """
        results = [
            {
                "ipv4": host.ip_address,
                "mac": host.mac_address,
                "hostname": host.hostname or "",
                "vendor": host.vendor or "",
            }
            for host in self._sorted(hosts)
        ]
        return {
            "packet_count": report.packet_count,
            "arp_count": report.arp_count,
            "duration_ms": report.duration_ms,
            "results": results,
        }

    def render(self, report: ScanReport, hosts: Sequence[HostDetails], output_format: str) -> str:
        """
        Serialize the results in a machine-readable format.

        Args:
            report: Completed scan report
            hosts: Enriched hosts of the report
            output_format: One of json, yaml or csv

        Raises:
            ValueError: For an unknown format
        """
        data = self.to_dict(report, hosts)

        if output_format == "json":
            return json.dumps(data, ensure_ascii=False)
        if output_format == "yaml":
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
        if output_format == "csv":
            buffer = io.StringIO()
            writer = csv.DictWriter(buffer, fieldnames=CSV_FIELDS, lineterminator="\n")
            writer.writeheader()
            writer.writerows(data["results"])
            return buffer.getvalue()
        raise ValueError(f"Unsupported output format: {output_format}")

    def print_table(
        self,
        report: ScanReport,
        hosts: Sequence[HostDetails],
        hostnames_enabled: bool = True,
    ) -> None:
        """
        Display the hosts as a table followed by a one-line summary.

        Args:
            report: Completed scan report
            hosts: Enriched hosts of the report
            hostnames_enabled: Whether hostname resolution ran
        """
        hosts = self._sorted(hosts)

        if hosts:
            hostname_width = max([15] + [len(h.hostname or "") for h in hosts])
            vendor_width = max([15] + [len(h.vendor or "") for h in hosts])
            widths = [15, 17, hostname_width, vendor_width]
            self.logger.section("Discovered Hosts")
            self.logger.table_header(["IPv4", "MAC", "Hostname", "Vendor"], widths)
            for host in hosts:
                hostname = host.hostname or ("" if hostnames_enabled else "(disabled)")
                self.logger.table_row(
                    [host.ip_address, host.mac_address, hostname, host.vendor or ""], widths
                )

        found = len(hosts)
        if found == 0:
            hosts_text = "no hosts found"
        elif found == 1:
            hosts_text = "1 host found"
        else:
            hosts_text = f"{found} hosts found"

        summary = (
            f"ARP scan finished, {hosts_text} in {report.elapsed:.3f} seconds "
            f"({self._plural(report.packet_count, 'packet')} received, "
            f"{self._plural(report.arp_count, 'ARP packet')} filtered)"
        )
        if found:
            self.logger.success(summary)
        else:
            self.logger.warning(summary)

    def write(self, content: str, filepath: str) -> Path:
        """
        Write an export to disk without overwriting an existing file.

        Args:
            content: Rendered export
            filepath: Requested output path

        Returns:
            Path actually written

        Raises:
            IOError: If the file cannot be written
        """
        path = self._handle_file_collision(Path(filepath))
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
        except IOError as e:
            self.logger.error(f"Failed to write report to {path}: {e}")
            raise

        self.logger.info(f"Report successfully written: {path}")
        return path

    def _handle_file_collision(self, filepath: Path) -> Path:
        """
        Handle filename collisions by adding incremental suffix.

        Args:
            filepath: Original file path

        Returns:
            Path: Unique file path
        """
        if not filepath.exists():
            return filepath

        base_name = filepath.stem
        extension = filepath.suffix
        counter = 1

        while True:
            new_filepath = filepath.parent / f"{base_name}_{counter:03d}{extension}"
            if not new_filepath.exists():
                self.logger.info(f"File collision detected, using filename: {new_filepath.name}")
                return new_filepath

            counter += 1
            if counter > 999:
                raise IOError(f"Too many file collisions for {filepath}")

    @staticmethod
    def _sorted(hosts: Sequence[HostDetails]) -> List[HostDetails]:
        return sorted(hosts, key=lambda host: ip_sort_key(host.ip_address))

    @staticmethod
    def _plural(count: int, noun: str) -> str:
        if count == 0:
            return f"no {noun}s"
        if count == 1:
            return f"1 {noun}"
        return f"{count} {noun}s"
