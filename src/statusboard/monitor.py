"""Host metrics collection for statusboard."""

import math
import platform
import random
import time
from typing import Protocol, Sequence

import psutil
from loguru import logger

from statusboard.errors import CollectionError
from statusboard.models import MetricsSnapshot

BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_bytes(size: int) -> str:
    """
    Format bytes as a human-readable string using base-1024 units.

    The largest unit not exceeding the value is used, rounded to two
    decimals with trailing zeros dropped: 1536 -> "1.5 KB", 1024 -> "1 KB".
    """
    if size < 0:
        raise ValueError(f"byte count must be non-negative, got {size}")
    if size == 0:
        return "0 B"

    index = 0
    value = float(size)
    while value >= 1024 and index < len(BYTE_UNITS) - 1:
        value /= 1024
        index += 1

    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {BYTE_UNITS[index]}"


def format_uptime(seconds: float) -> str:
    """Format a duration as "Xd Yh Zm Ws"."""
    total = max(0, int(seconds))
    days = total // 86400
    hours = (total % 86400) // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    return f"{days}d {hours}h {minutes}m {secs}s"


def _tick_totals(per_core: Sequence) -> tuple[float, float]:
    """Sum idle and total ticks across all logical cores."""
    idle = sum(core.idle for core in per_core)
    total = sum(sum(core) for core in per_core)
    return idle, total


def _usage_from_ticks(idle: float, total: float) -> float:
    if total <= 0:
        return 0.0
    usage = 100.0 * (1.0 - idle / total)
    return min(100.0, max(0.0, usage))


class CpuSampler(Protocol):
    """Strategy producing a CPU usage percentage in [0, 100]."""

    def sample(self) -> float: ...


class CumulativeCpuSampler:
    """
    CPU usage averaged over every tick counted since boot.

    This reads the counters once, so it reports a long-run average rather
    than current load. Use IntervalCpuSampler for a recent-window figure.
    """

    def sample(self) -> float:
        idle, total = _tick_totals(psutil.cpu_times(percpu=True))
        return _usage_from_ticks(idle, total)


class IntervalCpuSampler:
    """CPU usage over a short window, from two counter readings."""

    def __init__(self, interval: float = 0.2) -> None:
        """
        Initialize the sampler.

        Args:
            interval: Seconds between the two readings. Blocks the caller.
        """
        self._interval = max(0.0, interval)

    @property
    def interval(self) -> float:
        return self._interval

    def sample(self) -> float:
        idle_before, total_before = _tick_totals(psutil.cpu_times(percpu=True))
        time.sleep(self._interval)
        idle_after, total_after = _tick_totals(psutil.cpu_times(percpu=True))
        return _usage_from_ticks(idle_after - idle_before, total_after - total_before)


class LatencyProbe(Protocol):
    """Source of the ping label shown on the dashboard."""

    def measure(self) -> str: ...


class PlaceholderLatencyProbe:
    """
    Stand-in latency probe returning a random figure.

    Nothing is measured. The label is a placeholder until a real probe is
    plugged into MetricsCollector.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def measure(self) -> str:
        return f"≈ {self._rng.randint(0, 99)} ms"


def detect_runtime() -> tuple[str, str]:
    """Return the (language, version) identity of the running interpreter."""
    return "Python", f"{platform.python_implementation()} {platform.python_version()}"


class MetricsCollector:
    """
    Collects one MetricsSnapshot of the host using psutil.

    Holds no state between calls; every collect() builds a fresh snapshot.
    """

    def __init__(
        self,
        sampler: CpuSampler | None = None,
        latency_probe: LatencyProbe | None = None,
    ) -> None:
        """
        Initialize the MetricsCollector.

        Args:
            sampler: CPU usage strategy. Default IntervalCpuSampler().
            latency_probe: Ping label source. Default PlaceholderLatencyProbe().
        """
        self._sampler = sampler or IntervalCpuSampler()
        self._latency_probe = latency_probe or PlaceholderLatencyProbe()

    def collect(self) -> MetricsSnapshot:
        """Collect a snapshot of the current host state."""
        try:
            cpu_usage = self._sampler.sample()
            mem = psutil.virtual_memory()
            started = psutil.Process().create_time()
        except (psutil.Error, OSError, NotImplementedError) as exc:
            logger.error(f"Metrics interface unavailable: {exc}")
            raise CollectionError("unable to read host metrics") from exc

        if math.isnan(cpu_usage):
            cpu_usage = 0.0

        total = max(0, int(mem.total))
        used = min(total, max(0, total - int(mem.free)))
        memory_percent = f"{used / total * 100:.1f}" if total else "0.0"

        language, version = detect_runtime()

        return MetricsSnapshot(
            cpu_usage_percent=cpu_usage,
            total_memory_bytes=total,
            used_memory_bytes=used,
            memory_percent=memory_percent,
            uptime_seconds=max(0, int(time.time() - started)),
            runtime_language=language,
            runtime_version=version,
            ping_label=self._latency_probe.measure(),
        )
