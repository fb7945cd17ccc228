"""
Main entry point for ARP discovery.

This module provides the command-line interface for the ARP scanner,
including argument parsing, interface selection, result output and graceful
shutdown handling.
"""

import argparse
import signal
import sys
import threading
from typing import List, Optional

from . import __version__
from .config.config_loader import SCAN_PROFILES, ConfigLoader, ScanProfile, SessionConfig, get_profile
from .core.cancellation import CancellationToken
from .core.interface import open_interface
from .core.network_detector import NetworkDetector
from .core.session_coordinator import SessionCoordinator
from .utils.enrichment import HostnameResolver, VendorLookup, enrich
from .utils.error_handler import (
    ArpDiscoveryError, ConfigError, ErrorContext, ErrorHandler, ErrorSeverity,
    ErrorType, InterfaceWriteError
)
from .utils.logger import LogLevel, get_logger, set_log_level, set_log_stream
from .utils.report_writer import OUTPUT_FORMATS, ReportWriter


class ArpDiscoveryApp:
    """
    Main application class for ARP discovery.

    Handles the CLI workflow and the application lifecycle. The first SIGINT
    or SIGTERM cancels the running scan and lets it return partial results;
    a second one terminates immediately.
    """

    def __init__(
        self,
        detector: Optional[NetworkDetector] = None,
        interface_opener=open_interface,
        install_signal_handlers: bool = True,
    ):
        """Initialize the application."""
        self.logger = get_logger(__name__)
        self.error_handler = ErrorHandler(self.logger)
        self.detector = detector or NetworkDetector(self.logger)
        self.interface_opener = interface_opener
        self.cancel_token = CancellationToken()
        self.report_writer = ReportWriter(self.logger)
        self.shutdown_requested = False

        if install_signal_handlers:
            signal.signal(signal.SIGINT, self._signal_handler)
            signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        """
        Handle shutdown signals gracefully.

        The token is cancelled on a helper thread: the interrupted main
        thread may hold locks that the cancellation callbacks take.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_names = {signal.SIGINT: "SIGINT", signal.SIGTERM: "SIGTERM"}
        signal_name = signal_names.get(signum, f"Signal {signum}")

        if not self.shutdown_requested:
            self.logger.warning(f"Received {signal_name} - stopping scan, press again to force exit")
            self.shutdown_requested = True
            threading.Thread(target=self.cancel_token.cancel, name="arp-cancel", daemon=True).start()
        else:
            self.logger.error("Force shutdown requested - terminating immediately")
            sys.exit(130)

    def list_interfaces(self) -> int:
        """
        Display the network interfaces of this host.

        Returns:
            int: Exit code
        """
        interfaces = self.detector.list_interfaces()
        default = self.detector.select_default_interface()

        self.logger.section("Network Interfaces")
        widths = [16, 5, 17, 15, 18]
        self.logger.table_header(["Name", "State", "MAC", "IPv4", "Network"], widths)
        for info in interfaces:
            self.logger.table_row(
                [
                    info.name,
                    "UP" if info.is_up else "DOWN",
                    info.mac_address or "-",
                    info.ipv4_address or "-",
                    str(info.network) if info.network else "-",
                ],
                widths,
                highlight=default is not None and info.name == default.name,
            )

        if default:
            self.logger.success(f"Default interface: {default.name}")
        else:
            self.logger.warning("No interface is ready for scanning (up, non-loopback, with IPv4 and MAC)")
        return 0

    def _complete_target(self, config: SessionConfig) -> SessionConfig:
        """
        Fill in the interface and network when they were not given.

        Raises:
            ConfigError: If no interface or network can be determined
        """
        interface = config.interface
        if not interface:
            info = self.detector.select_default_interface()
            if info is None:
                raise ConfigError("No usable network interface found; select one with --interface")
            interface = info.name
            self.logger.info(f"Using default interface {interface}")

        network = config.network
        if not network:
            network = self.detector.get_interface_network(interface)
            if not network:
                raise ConfigError(f"Interface {interface} has no IPv4 network; give a range with --network")
            self.logger.info(f"Scanning the network of {interface}: {network}")

        return config.with_overrides(interface=interface, network=network)

    def _output(self, args: argparse.Namespace, report, hosts, resolve_hostnames: bool) -> None:
        if args.output == "plain":
            self.report_writer.print_table(report, hosts, hostnames_enabled=resolve_hostnames)
            return

        content = self.report_writer.render(report, hosts, args.output)
        if args.output_file:
            self.report_writer.write(content, args.output_file)
        else:
            sys.stdout.write(content if content.endswith("\n") else content + "\n")
            sys.stdout.flush()

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the ARP discovery application.

        Args:
            args: Parsed command line arguments

        Returns:
            int: Exit code (0 for success, non-zero for failure)
        """
        try:
            if args.list:
                return self.list_interfaces()

            loader = ConfigLoader(args.config_dir, self.logger)
            profile = get_profile(args.profile)
            config = build_session_config(args, loader.load_scan_config(), profile)
            config = self._complete_target(config)
            resolve_hostnames = profile.resolve_hostnames and not args.numeric

            coordinator = SessionCoordinator(
                config,
                interface_opener=self.interface_opener,
                cancel_token=self.cancel_token,
                logger=self.logger,
                error_handler=self.error_handler,
            )
            report = coordinator.run()

            resolver = HostnameResolver(logger=self.logger) if resolve_hostnames else None
            vendors = VendorLookup(args.oui_file, self.logger) if args.oui_file else None
            hosts = enrich(report.replies, resolver, vendors)

            self._output(args, report, hosts, resolve_hostnames)
            return 0

        except ConfigError as e:
            self.error_handler.handle_error(e, ErrorContext(
                error_type=ErrorType.CONFIGURATION_ERROR,
                severity=ErrorSeverity.HIGH,
                operation="run",
                component="ArpDiscoveryApp",
            ))
            return 1
        except InterfaceWriteError as e:
            error_type = (ErrorType.PERMISSION_ERROR if isinstance(e.__cause__, PermissionError)
                          else ErrorType.INTERFACE_WRITE_ERROR)
            self.error_handler.handle_error(e, ErrorContext(
                error_type=error_type,
                severity=ErrorSeverity.CRITICAL,
                operation="scan",
                component="ArpDiscoveryApp",
                additional_info={"interface": getattr(args, "interface", None)},
            ))
            return 1
        except ArpDiscoveryError as e:
            self.logger.error(f"ARP discovery failed: {e}")
            return 1
        except IOError as e:
            self.error_handler.handle_error(e, ErrorContext(
                error_type=ErrorType.FILE_ERROR,
                severity=ErrorSeverity.HIGH,
                operation="write_report",
                component="ArpDiscoveryApp",
                additional_info={"file_path": args.output_file},
            ))
            return 1


def _milliseconds(value: Optional[int]) -> Optional[float]:
    return value / 1000.0 if value is not None else None


def _split_list(values: Optional[List[str]]) -> Optional[List[str]]:
    if not values:
        return None
    return [part.strip() for value in values for part in value.split(',') if part.strip()]


def build_session_config(
    args: argparse.Namespace,
    defaults: SessionConfig,
    profile: Optional[ScanProfile] = None,
) -> SessionConfig:
    """
    Merge YAML defaults, the scan profile and command line options.

    Later sources win: profile over file defaults, options over profile.

    Args:
        args: Parsed command line arguments
        defaults: Settings loaded from the config file
        profile: Selected scan profile

    Returns:
        SessionConfig for the session
    """
    config = defaults
    if profile is not None:
        config = config.with_overrides(**profile.overrides)

    return config.with_overrides(
        network=args.network,
        interface=args.interface,
        grace_period=_milliseconds(args.timeout),
        global_timeout=args.global_timeout,
        per_target_timeout=_milliseconds(args.probe_timeout),
        retry_count=args.retry,
        pacing_interval=_milliseconds(args.interval),
        source_ipv4=args.source_ip,
        source_mac=args.source_mac,
        destination_mac=args.destination_mac,
        exclude=_split_list(args.exclude),
        randomize_targets=True if args.random else None,
        random_seed=args.seed,
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="arp_discovery",
        description="ARP Discovery - find live hosts on the local network with ARP requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sudo python -m arp_discovery                              # Scan the default interface network
  sudo python -m arp_discovery -l                           # List network interfaces
  sudo python -m arp_discovery -i eth0 -n 10.0.0.0/24       # Scan a given range
  sudo python -m arp_discovery -p stealth -R                # Slow, randomized scan
  sudo python -m arp_discovery -o json --output-file a.json # Export results as JSON
        """
    )

    parser.add_argument("-l", "--list", action="store_true",
                        help="List network interfaces and exit")
    parser.add_argument("-i", "--interface", type=str,
                        help="Network interface to scan on. Defaults to the first usable interface")
    parser.add_argument("-n", "--network", type=str,
                        help="Comma-separated IPv4 ranges in CIDR notation. Defaults to the interface network")
    parser.add_argument("-x", "--exclude", action="append", metavar="RANGE",
                        help="Address or CIDR range to leave out (repeatable, comma-separated)")

    timing = parser.add_argument_group("timing")
    timing.add_argument("-t", "--timeout", type=int, metavar="MS",
                        help="Grace period after the last probe, in milliseconds")
    timing.add_argument("--global-timeout", type=float, metavar="SECONDS",
                        help="Hard limit for the whole scan, in seconds")
    timing.add_argument("--probe-timeout", type=int, metavar="MS",
                        help="Wait before an unanswered target is probed again, in milliseconds")
    timing.add_argument("-r", "--retry", type=int, metavar="COUNT",
                        help="Re-sends per target without reply")
    timing.add_argument("-I", "--interval", type=int, metavar="MS",
                        help="Pause after every probe, in milliseconds")
    timing.add_argument("-p", "--profile", choices=list(SCAN_PROFILES), default="default",
                        help="Scan profile (default: %(default)s)")
    timing.add_argument("-R", "--random", action="store_true",
                        help="Probe targets in random order")
    timing.add_argument("--seed", type=int,
                        help="Seed for the random target order")

    frames = parser.add_argument_group("frame fields")
    frames.add_argument("-S", "--source-ip", type=str,
                        help="Sender IPv4 written into the ARP requests")
    frames.add_argument("-M", "--source-mac", type=str,
                        help="Sender MAC written into the ARP requests")
    frames.add_argument("-D", "--destination-mac", type=str,
                        help="Ethernet destination of the ARP requests (default: broadcast)")

    output = parser.add_argument_group("output")
    output.add_argument("-N", "--numeric", action="store_true",
                        help="Do not resolve hostnames")
    output.add_argument("--oui-file", type=str,
                        help="IEEE OUI CSV file used for vendor lookup")
    output.add_argument("-o", "--output", choices=OUTPUT_FORMATS, default="plain",
                        help="Output format (default: %(default)s)")
    output.add_argument("--output-file", type=str,
                        help="Write json, yaml or csv output to this file")

    parser.add_argument("--config-dir", type=str,
                        help="Directory containing arp_config.yml. Defaults to arp_discovery/config/")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose logging output")
    parser.add_argument("--version", action="version",
                        version=f"ARP Discovery {__version__}")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for ARP discovery.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.output_file and args.output == "plain":
        parser.error("--output-file requires --output json, yaml or csv")

    if args.verbose:
        set_log_level(LogLevel.DEBUG)

    # keep stdout clean for machine-readable output
    if args.output != "plain":
        set_log_stream(sys.stderr)

    app = ArpDiscoveryApp()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
