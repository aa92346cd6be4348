"""Dashboard layout and drawing."""

import math
from datetime import datetime
from zoneinfo import ZoneInfo

from PIL import Image, ImageChops, ImageDraw, ImageFont

from statusboard.fonts import Font, FontSet
from statusboard.models import BackgroundSource, FallbackGradient, MetricsSnapshot, RemoteImage
from statusboard.monitor import format_bytes, format_uptime

CANVAS_SIZE = (1280, 720)

# Panel (x, y, width, height)
PANEL_BOX = (500, 60, 720, 600)
PANEL_FILL = (0, 0, 0, 140)  # 0.55 alpha

WATERMARK_POS = (60, 80)
TEXT_X = PANEL_BOX[0] + 40
TITLE_Y = PANEL_BOX[1] + 70
TIMESTAMP_Y = TITLE_Y + 40
ROWS_Y = TIMESTAMP_Y + 80
ROW_GAP = 75
VALUE_X = TEXT_X + 220

BAR_TRACK_WIDTH = 325
BAR_HEIGHT = 20
BAR_RISE = 18  # Bar top sits this far above the text baseline
BAR_TRACK_FILL = (0, 0, 0, 102)  # 0.4 alpha
BAR_FILL = (0xFF, 0x4B, 0x1F, 255)
PERCENT_X = VALUE_X + BAR_TRACK_WIDTH + 15

WHITE = (255, 255, 255, 255)
TIMESTAMP_FILL = (255, 255, 255, 204)  # 0.8 alpha
LABEL_FILL = (0xFF, 0xDE, 0x59, 255)

DEFAULT_TIMEZONE = "Asia/Kolkata"


def bar_fill_width(percent: float, track_width: float = BAR_TRACK_WIDTH) -> float:
    """Width of the filled part of a bar, clamped to the track."""
    if math.isnan(percent):
        return 0.0
    return max(0.0, min(float(track_width), percent / 100 * track_width))


def format_timestamp(now: datetime, timezone: str = DEFAULT_TIMEZONE) -> str:
    """Format a moment the en-IN way, e.g. "17/10/2026, 9:42:11 pm"."""
    local = now.astimezone(ZoneInfo(timezone))
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return (
        f"{local.day}/{local.month}/{local.year}, "
        f"{hour}:{local.minute:02d}:{local.second:02d} {meridiem}"
    )


def _gradient(size: tuple[int, int], start: tuple[int, int, int], end: tuple[int, int, int]) -> Image.Image:
    """Linear gradient from the top-left corner to the bottom-right corner."""
    width, height = size
    norm = width * width + height * height
    # t(x, y) = (x*w + y*h) / (w^2 + h^2), split into column and row ramps
    columns = Image.new("L", (width, 1))
    columns.putdata([round(255 * x * width / norm) for x in range(width)])
    rows = Image.new("L", (1, height))
    rows.putdata([round(255 * y * height / norm) for y in range(height)])
    mask = ImageChops.add(
        columns.resize(size, Image.Resampling.NEAREST),
        rows.resize(size, Image.Resampling.NEAREST),
    )
    return Image.composite(Image.new("RGB", size, end), Image.new("RGB", size, start), mask)


class Compositor:
    """
    Lays out a MetricsSnapshot onto a fixed 1280x720 canvas.

    Output depends only on the snapshot, the background and the timestamp.
    """

    def __init__(
        self,
        fonts: FontSet,
        title: str = "StatusBoard Uptime",
        watermark: str = "STATUSBOARD",
        timezone: str = DEFAULT_TIMEZONE,
    ) -> None:
        self._fonts = fonts
        self._title = title
        self._watermark = watermark
        self._timezone = timezone

    def compose(
        self,
        snapshot: MetricsSnapshot,
        background: BackgroundSource,
        now: datetime | None = None,
    ) -> Image.Image:
        """Render the dashboard to a new RGB image."""
        now = now or datetime.now().astimezone()
        canvas = self._paint_background(background)
        draw = ImageDraw.Draw(canvas, "RGBA")

        x, y, width, height = PANEL_BOX
        draw.rectangle([x, y, x + width - 1, y + height - 1], fill=PANEL_FILL)

        self._text(draw, WATERMARK_POS, self._watermark, self._fonts.get(24, bold=True), WHITE)
        self._text(draw, (TEXT_X, TITLE_Y), self._title, self._fonts.get(48, bold=True), WHITE)
        self._text(
            draw,
            (TEXT_X, TIMESTAMP_Y),
            format_timestamp(now, self._timezone),
            self._fonts.get(20),
            TIMESTAMP_FILL,
        )

        row_y = ROWS_Y
        self._row(draw, row_y, "Ping:", snapshot.ping_label)
        row_y += ROW_GAP

        self._label(draw, row_y, "CPU Usage:")
        self._bar(draw, VALUE_X, row_y - BAR_RISE, snapshot.cpu_usage_percent)
        self._text(
            draw,
            (PERCENT_X, row_y),
            f"{snapshot.cpu_usage_percent:.1f}%",
            self._fonts.get(22),
            WHITE,
        )
        row_y += ROW_GAP

        memory = (
            f"{format_bytes(snapshot.used_memory_bytes)} / "
            f"{format_bytes(snapshot.total_memory_bytes)} ({snapshot.memory_percent}%)"
        )
        self._row(draw, row_y, "Memory:", memory)
        row_y += ROW_GAP

        self._row(draw, row_y, "Uptime:", format_uptime(snapshot.uptime_seconds))
        row_y += ROW_GAP

        self._row(draw, row_y, "Language:", snapshot.runtime_label)
        return canvas

    def _paint_background(self, background: BackgroundSource) -> Image.Image:
        if isinstance(background, RemoteImage):
            return background.image.convert("RGB").resize(CANVAS_SIZE, Image.Resampling.BILINEAR)
        if isinstance(background, FallbackGradient):
            return _gradient(CANVAS_SIZE, background.start, background.end)
        raise TypeError(f"unsupported background source: {background!r}")

    def _row(self, draw: ImageDraw.ImageDraw, y: int, label: str, value: str) -> None:
        self._label(draw, y, label)
        self._text(draw, (VALUE_X, y), value, self._fonts.get(26), WHITE)

    def _label(self, draw: ImageDraw.ImageDraw, y: int, label: str) -> None:
        self._text(draw, (TEXT_X, y), label, self._fonts.get(26, bold=True), LABEL_FILL)

    def _bar(self, draw: ImageDraw.ImageDraw, x: int, y: int, percent: float) -> None:
        draw.rectangle([x, y, x + BAR_TRACK_WIDTH - 1, y + BAR_HEIGHT - 1], fill=BAR_TRACK_FILL)
        filled = round(bar_fill_width(percent, BAR_TRACK_WIDTH))
        if filled > 0:
            draw.rectangle([x, y, x + filled - 1, y + BAR_HEIGHT - 1], fill=BAR_FILL)

    @staticmethod
    def _text(
        draw: ImageDraw.ImageDraw,
        xy: tuple[int, int],
        text: str,
        font: Font,
        fill: tuple[int, int, int, int],
    ) -> None:
        """Draw text with xy as its left baseline point."""
        if isinstance(font, ImageFont.FreeTypeFont):
            draw.text(xy, text, font=font, fill=fill, anchor="ls")
            return
        # Bitmap fonts have no anchor support; lift by the glyph height
        bottom = draw.textbbox((0, 0), text, font=font)[3]
        draw.text((xy[0], xy[1] - bottom), text, font=font, fill=fill)
