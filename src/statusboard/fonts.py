"""Font resources for the dashboard compositor."""

from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from loguru import logger
from PIL import ImageFont

from statusboard.errors import FontLoadFailure

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

# Sizes used by the dashboard layout
LAYOUT_SIZES = (20, 22, 24, 26, 48)


def _open_font(path: Path | None, size: int) -> Font:
    if path is None:
        raise FontLoadFailure("no font path configured")
    try:
        return ImageFont.truetype(str(path), size)
    except OSError as exc:
        raise FontLoadFailure(f"cannot load {path}: {exc}") from exc


def _default_font(size: int) -> Font:
    return ImageFont.load_default(size)


class FontSet:
    """
    Bold and regular fonts, built once and shared read-only.

    Missing font files never fail rendering; the affected weight uses
    Pillow's default font at the requested size.
    """

    def __init__(
        self,
        fonts: Mapping[tuple[int, bool], Font],
        bold_path: Path | None = None,
        regular_path: Path | None = None,
    ) -> None:
        self._fonts = MappingProxyType(dict(fonts))
        self._paths = {True: bold_path, False: regular_path}

    @classmethod
    def load(
        cls,
        bold_path: Path | None,
        regular_path: Path | None,
        sizes: Iterable[int] = LAYOUT_SIZES,
    ) -> "FontSet":
        """Load both weights for every size in sizes."""
        fonts: dict[tuple[int, bool], Font] = {}
        usable = {True: bold_path, False: regular_path}

        for size in sizes:
            for bold in (True, False):
                path = usable[bold]
                try:
                    fonts[(size, bold)] = _open_font(path, size)
                except FontLoadFailure as exc:
                    logger.debug(f"Falling back to default font: {exc}")
                    usable[bold] = None
                    fonts[(size, bold)] = _default_font(size)

        return cls(fonts, usable[True], usable[False])

    @classmethod
    def default(cls, sizes: Iterable[int] = LAYOUT_SIZES) -> "FontSet":
        """FontSet made only of Pillow's default font."""
        return cls({(size, bold): _default_font(size) for size in sizes for bold in (True, False)})

    @property
    def bold_path(self) -> Path | None:
        return self._paths[True]

    @property
    def regular_path(self) -> Path | None:
        return self._paths[False]

    def get(self, size: int, bold: bool = False) -> Font:
        """Return the font for size and weight, building it if not preloaded."""
        font = self._fonts.get((size, bold))
        if font is not None:
            return font
        try:
            return _open_font(self._paths[bold], size)
        except FontLoadFailure:
            return _default_font(size)
