"""Tests for metrics collection and formatting."""

import random
from collections import namedtuple

import psutil
import pytest

from statusboard.errors import CollectionError
from statusboard.models import MetricsSnapshot
from statusboard.monitor import (
    CumulativeCpuSampler,
    IntervalCpuSampler,
    MetricsCollector,
    PlaceholderLatencyProbe,
    detect_runtime,
    format_bytes,
    format_uptime,
)

CpuTimes = namedtuple("CpuTimes", ["user", "system", "idle"])
VirtualMemory = namedtuple("VirtualMemory", ["total", "free"])


class FixedSampler:
    def __init__(self, value: float) -> None:
        self.value = value

    def sample(self) -> float:
        return self.value


class TestFormatBytes:
    """Tests for format_bytes."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 B"),
            (1, "1 B"),
            (1023, "1023 B"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (1048576, "1 MB"),
            (5 * 1024**3, "5 GB"),
            (1024**4, "1 TB"),
        ],
    )
    def test_known_values(self, size, expected):
        """Test format_bytes against known conversions."""
        assert format_bytes(size) == expected

    def test_two_decimal_rounding(self):
        """Test values are rounded to two decimals."""
        assert format_bytes(1234567) == "1.18 MB"

    def test_caps_at_terabytes(self):
        """Test values beyond TB stay in TB."""
        assert format_bytes(2048 * 1024**4) == "2048 TB"

    def test_negative_rejected(self):
        """Test negative sizes raise ValueError."""
        with pytest.raises(ValueError):
            format_bytes(-1)


class TestFormatUptime:
    """Tests for format_uptime."""

    def test_all_fields(self):
        """Test one of each unit."""
        assert format_uptime(90061) == "1d 1h 1m 1s"

    def test_seconds_only(self):
        """Test sub-minute durations keep all four fields."""
        assert format_uptime(59) == "0d 0h 0m 59s"

    def test_fractional_seconds_floored(self):
        """Test fractional seconds are floored."""
        assert format_uptime(3599.9) == "0d 0h 59m 59s"

    def test_negative_treated_as_zero(self):
        """Test negative durations never produce negative fields."""
        assert format_uptime(-5) == "0d 0h 0m 0s"


class TestCpuSamplers:
    """Tests for the CPU sampling strategies."""

    def test_cumulative_sampler_sums_cores(self, monkeypatch):
        """Test idle and total ticks are summed over all cores."""
        monkeypatch.setattr(
            psutil,
            "cpu_times",
            lambda percpu=False: [CpuTimes(20, 5, 75), CpuTimes(10, 15, 75)],
        )

        assert CumulativeCpuSampler().sample() == pytest.approx(25.0)

    def test_cumulative_sampler_zero_ticks(self, monkeypatch):
        """Test a zero tick total yields 0.0 instead of dividing by zero."""
        monkeypatch.setattr(psutil, "cpu_times", lambda percpu=False: [CpuTimes(0, 0, 0)])

        assert CumulativeCpuSampler().sample() == 0.0

    def test_interval_sampler_uses_deltas(self, monkeypatch):
        """Test usage is computed from the difference of two readings."""
        readings = iter(
            [
                [CpuTimes(10, 10, 80)],
                [CpuTimes(30, 10, 100)],
            ]
        )
        monkeypatch.setattr(psutil, "cpu_times", lambda percpu=False: next(readings))

        sampler = IntervalCpuSampler(interval=0.0)

        assert sampler.sample() == pytest.approx(50.0)

    def test_interval_sampler_no_elapsed_ticks(self, monkeypatch):
        """Test identical readings yield 0.0."""
        monkeypatch.setattr(psutil, "cpu_times", lambda percpu=False: [CpuTimes(10, 10, 80)])

        assert IntervalCpuSampler(interval=0.0).sample() == 0.0

    def test_interval_minimum(self):
        """Test negative intervals are clamped to zero."""
        assert IntervalCpuSampler(interval=-1.0).interval == 0.0

    def test_real_counters_in_range(self):
        """Test both samplers return a percentage on the real host."""
        for sampler in (CumulativeCpuSampler(), IntervalCpuSampler(interval=0.05)):
            usage = sampler.sample()
            assert 0.0 <= usage <= 100.0


class TestPlaceholderLatencyProbe:
    """Tests for the placeholder latency probe."""

    def test_label_format(self):
        """Test the label looks like an approximate millisecond figure."""
        label = PlaceholderLatencyProbe().measure()

        assert label.startswith("≈ ")
        assert label.endswith(" ms")
        assert 0 <= int(label[2:-3]) <= 99

    def test_seeded_rng_is_deterministic(self):
        """Test an injected RNG makes the label reproducible."""
        first = PlaceholderLatencyProbe(random.Random(7)).measure()
        second = PlaceholderLatencyProbe(random.Random(7)).measure()

        assert first == second


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_collect_returns_snapshot(self):
        """Test collect() returns a populated MetricsSnapshot."""
        snapshot = MetricsCollector(sampler=FixedSampler(12.5)).collect()

        assert isinstance(snapshot, MetricsSnapshot)
        assert snapshot.cpu_usage_percent == 12.5
        assert snapshot.total_memory_bytes > 0
        assert 0 <= snapshot.used_memory_bytes <= snapshot.total_memory_bytes
        assert snapshot.uptime_seconds >= 0
        assert snapshot.runtime_language == "Python"

    def test_memory_percent_one_decimal(self, monkeypatch):
        """Test memory_percent is derived from the byte counts."""
        monkeypatch.setattr(psutil, "virtual_memory", lambda: VirtualMemory(total=1000, free=575))

        snapshot = MetricsCollector(sampler=FixedSampler(0.0)).collect()

        assert snapshot.used_memory_bytes == 425
        assert snapshot.memory_percent == "42.5"

    def test_used_never_exceeds_total(self, monkeypatch):
        """Test inconsistent counters are clamped into range."""
        monkeypatch.setattr(psutil, "virtual_memory", lambda: VirtualMemory(total=1000, free=2000))

        snapshot = MetricsCollector(sampler=FixedSampler(0.0)).collect()

        assert snapshot.used_memory_bytes == 0
        assert snapshot.used_memory_bytes <= snapshot.total_memory_bytes

    def test_zero_total_memory(self, monkeypatch):
        """Test zero total memory does not divide by zero."""
        monkeypatch.setattr(psutil, "virtual_memory", lambda: VirtualMemory(total=0, free=0))

        snapshot = MetricsCollector(sampler=FixedSampler(0.0)).collect()

        assert snapshot.memory_percent == "0.0"

    def test_uses_latency_probe(self):
        """Test the ping label comes from the injected probe."""

        class Probe:
            def measure(self) -> str:
                return "n/a"

        snapshot = MetricsCollector(sampler=FixedSampler(0.0), latency_probe=Probe()).collect()

        assert snapshot.ping_label == "n/a"

    def test_nan_cpu_reported_as_zero(self):
        """Test a NaN sample is not propagated."""
        snapshot = MetricsCollector(sampler=FixedSampler(float("nan"))).collect()

        assert snapshot.cpu_usage_percent == 0.0

    def test_unavailable_interface_raises_collection_error(self, monkeypatch):
        """Test OS interface failures surface as CollectionError."""

        def broken():
            raise OSError("no /proc")

        monkeypatch.setattr(psutil, "virtual_memory", broken)

        with pytest.raises(CollectionError):
            MetricsCollector(sampler=FixedSampler(0.0)).collect()

    def test_sampler_psutil_error_raises_collection_error(self, monkeypatch):
        """Test psutil errors from the sampler surface as CollectionError."""

        def broken(percpu=False):
            raise psutil.Error("unavailable")

        monkeypatch.setattr(psutil, "cpu_times", broken)

        with pytest.raises(CollectionError):
            MetricsCollector(sampler=CumulativeCpuSampler()).collect()

    def test_each_collect_builds_new_snapshot(self):
        """Test snapshots are not reused between calls."""
        collector = MetricsCollector(sampler=FixedSampler(1.0))

        assert collector.collect() is not collector.collect()


def test_detect_runtime():
    """Test runtime identity names the interpreter."""
    language, version = detect_runtime()

    assert language == "Python"
    assert version
