"""Shared fixtures for statusboard tests."""

from typing import BinaryIO

import pytest

from statusboard.models import MetricsSnapshot


def build_snapshot(**overrides) -> MetricsSnapshot:
    values = dict(
        cpu_usage_percent=42.0,
        total_memory_bytes=16 * 1024**3,
        used_memory_bytes=8 * 1024**3,
        memory_percent="50.0",
        uptime_seconds=90061,
        runtime_language="Python",
        runtime_version="CPython 3.12.1",
        ping_label="≈ 12 ms",
    )
    values.update(overrides)
    return MetricsSnapshot(**values)


class RecordingDelivery:
    """Delivery double that keeps every message it is given."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, bytes | None]] = []

    async def __call__(self, request_id: str, body: str, attachment: BinaryIO | None = None) -> None:
        self.messages.append((request_id, body, attachment.read() if attachment else None))


@pytest.fixture
def make_snapshot():
    """Factory for MetricsSnapshot with overridable fields."""
    return build_snapshot


@pytest.fixture
def delivery() -> RecordingDelivery:
    return RecordingDelivery()
