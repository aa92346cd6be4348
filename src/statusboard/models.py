"""Data models for statusboard."""

from dataclasses import dataclass

from PIL import Image


@dataclass(slots=True, frozen=True)
class MetricsSnapshot:
    """Immutable snapshot of host metrics, built once per render."""

    cpu_usage_percent: float  # 0.0 - 100.0
    total_memory_bytes: int
    used_memory_bytes: int  # Never above total_memory_bytes
    memory_percent: str  # One fractional digit, e.g. "42.5"
    uptime_seconds: int
    runtime_language: str
    runtime_version: str
    ping_label: str  # Placeholder value, see PlaceholderLatencyProbe

    @property
    def runtime_label(self) -> str:
        return f"{self.runtime_language} {self.runtime_version}"


@dataclass(slots=True, frozen=True, eq=False)
class RemoteImage:
    """Background image fetched over the network, decoded to RGB."""

    image: Image.Image


@dataclass(slots=True, frozen=True)
class FallbackGradient:
    """Diagonal gradient painted when no remote image is available."""

    start: tuple[int, int, int] = (0x14, 0x1E, 0x30)
    end: tuple[int, int, int] = (0x24, 0x3B, 0x55)


BackgroundSource = RemoteImage | FallbackGradient


@dataclass(slots=True, frozen=True)
class RenderResult:
    """Encoded dashboard ready for delivery."""

    caption: str
    image: bytes
    used_fallback: bool
