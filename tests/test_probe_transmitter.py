"""Tests for the probe transmitter."""

import ipaddress
import threading
import time

import pytest

from arp_discovery.core.data_models import ReplyRecord
from arp_discovery.core.result_set import ResultSet
from arp_discovery.scanners.probe_transmitter import ProbeTransmitter
from arp_discovery.utils.error_handler import InterfaceWriteError

from conftest import LOCAL_IP, LOCAL_MAC, FakeInterface, wait_for


def _targets(*addresses):
    return [ipaddress.IPv4Address(a) for a in addresses]


def _transmitter(interface, results=None, **kwargs):
    kwargs.setdefault("per_target_timeout", 0.05)
    kwargs.setdefault("pacing_interval", 0.0)
    if results is None:
        results = ResultSet()
    return ProbeTransmitter(interface, results, LOCAL_IP, LOCAL_MAC, **kwargs)


class TestRetryPolicy:
    """Tests for the per-target retry budget."""

    @pytest.mark.parametrize("retries", [0, 1, 3])
    def test_silent_target_gets_retries_plus_one_probes(self, retries):
        """A target that never answers is probed exactly R + 1 times."""
        interface = FakeInterface()
        transmitter = _transmitter(interface, max_retries=retries)
        transmitter.start(_targets("10.0.0.2", "10.0.0.3"))

        assert transmitter.join(5.0)
        assert transmitter.error is None
        assert interface.send_counts["10.0.0.2"] == retries + 1
        assert interface.send_counts["10.0.0.3"] == retries + 1
        assert transmitter.probes_sent == 2 * (retries + 1)
        assert transmitter.abandoned == 2
        assert transmitter.outstanding == 0

    def test_answered_target_is_not_retried(self):
        """A target already in the result set is not probed again."""
        results = ResultSet()
        results.record(ReplyRecord("10.0.0.2", "aa:bb:cc:dd:ee:02", time.time()))
        interface = FakeInterface()
        transmitter = _transmitter(interface, results, max_retries=2)
        transmitter.start(_targets("10.0.0.2", "10.0.0.3"))

        assert transmitter.join(5.0)
        assert interface.send_counts["10.0.0.2"] == 1
        assert interface.send_counts["10.0.0.3"] == 3

    def test_retries_wait_for_per_target_timeout(self):
        """Re-sends are spaced by the per-target timeout."""
        interface = FakeInterface()
        transmitter = _transmitter(interface, per_target_timeout=0.2, max_retries=1)
        start = time.monotonic()
        transmitter.start(_targets("10.0.0.2"))

        assert transmitter.join(5.0)
        assert time.monotonic() - start >= 0.4


class TestPacingAndStop:
    """Tests for pacing and cooperative stop."""

    def test_pacing_applies_after_every_probe(self):
        interface = FakeInterface()
        transmitter = _transmitter(interface, pacing_interval=0.05, max_retries=0,
                                   per_target_timeout=0.01)
        start = time.monotonic()
        transmitter.start(_targets(*[f"10.0.0.{i}" for i in range(2, 7)]))

        assert transmitter.join(5.0)
        assert time.monotonic() - start >= 0.25
        assert transmitter.targets_sent == 5

    def test_no_probe_after_stop_returns(self):
        """Once stop() returns the interface sees no further frames."""
        interface = FakeInterface()
        transmitter = _transmitter(interface, pacing_interval=0.02)
        transmitter.start(_targets(*[f"10.0.0.{i}" for i in range(2, 200)]))

        assert wait_for(lambda: interface.total_sent >= 3)
        transmitter.stop()
        sent_at_stop = interface.total_sent
        time.sleep(0.15)

        assert interface.total_sent == sent_at_stop
        assert transmitter.join(1.0)

    def test_send_probe_after_stop_is_refused(self):
        interface = FakeInterface()
        transmitter = _transmitter(interface)
        transmitter.stop()
        assert not transmitter.send_probe(ipaddress.IPv4Address("10.0.0.2"))
        assert interface.total_sent == 0

    def test_finished_callback_fires(self):
        finished = threading.Event()
        transmitter = _transmitter(FakeInterface(), max_retries=0, on_finished=finished.set)
        transmitter.start(_targets("10.0.0.2"))
        assert finished.wait(2.0)
        assert transmitter.done


class TestWriteErrors:
    """Tests for interface write failures."""

    def test_write_error_ends_the_worker(self):
        """A write failure is fatal and recorded on the worker."""
        interface = FakeInterface(fail_send=True)
        transmitter = _transmitter(interface)
        transmitter.start(_targets("10.0.0.2", "10.0.0.3"))

        assert transmitter.join(2.0)
        assert isinstance(transmitter.error, InterfaceWriteError)
        assert transmitter.probes_sent == 0
        assert transmitter.done
