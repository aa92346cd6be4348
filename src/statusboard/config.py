"""Configuration for statusboard."""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_FETCH_TIMEOUT = 5.0
DEFAULT_BACKGROUND_URL = "https://i.ibb.co/TDJN13P4/image.jpg"


@dataclass(slots=True, frozen=True)
class DashboardConfig:
    """Settings for one StatusBoard instance. Nothing here changes per request."""

    background_url: str | None = DEFAULT_BACKGROUND_URL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT  # Seconds
    cpu_sample_interval: float = 0.2  # Seconds between CPU counter readings
    title: str = "StatusBoard Uptime"
    watermark: str = "STATUSBOARD"
    timezone: str = "Asia/Kolkata"
    caption: str = "📈 Uptime & System Stats"
    failure_notice: str = "❌ Failed to generate uptime image."
    font_dir: Path = PACKAGE_DIR / "assets"
    staging_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()) / "statusboard")

    @property
    def bold_font_path(self) -> Path:
        return self.font_dir / "Inter-Bold.ttf"

    @property
    def regular_font_path(self) -> Path:
        return self.font_dir / "Inter-Regular.ttf"
