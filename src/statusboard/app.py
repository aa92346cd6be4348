"""statusboard - render pipeline and command entry point."""

import argparse
import asyncio
import contextlib
import shutil
import sys
import threading
from pathlib import Path
from typing import BinaryIO, Protocol

from loguru import logger
from PIL import Image

from statusboard.background import BackgroundResolver
from statusboard.compositor import Compositor
from statusboard.config import DEFAULT_BACKGROUND_URL, DEFAULT_FETCH_TIMEOUT, DashboardConfig
from statusboard.encoder import encode
from statusboard.errors import StatusBoardError
from statusboard.fonts import FontSet
from statusboard.log import setup_logger
from statusboard.models import BackgroundSource, FallbackGradient, MetricsSnapshot, RenderResult
from statusboard.monitor import IntervalCpuSampler, MetricsCollector
from statusboard.staging import StagingArea


class Delivery(Protocol):
    """Sends a message, optionally with an image attachment, back to the requester."""

    async def __call__(
        self,
        request_id: str,
        body: str,
        attachment: BinaryIO | None = None,
    ) -> None: ...


class StatusBoard:
    """
    Renders the status dashboard and hands it to a Delivery.

    Every request builds its own snapshot, background and image. Requests
    share only the read-only fonts, so drawing is serialized by a lock.
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        collector: MetricsCollector | None = None,
        resolver: BackgroundResolver | None = None,
        compositor: Compositor | None = None,
        staging: StagingArea | None = None,
    ) -> None:
        """
        Initialize the StatusBoard.

        Args:
            config: Settings. Defaults to DashboardConfig().
            collector: Metrics source. Built from config when omitted.
            resolver: Background source. Built from config when omitted.
            compositor: Layout engine. Built from config when omitted.
            staging: Temporary file area. Built from config when omitted.
        """
        self._config = config or DashboardConfig()
        self._collector = collector or MetricsCollector(
            sampler=IntervalCpuSampler(self._config.cpu_sample_interval)
        )
        self._resolver = resolver or BackgroundResolver(
            self._config.background_url, timeout=self._config.fetch_timeout
        )
        self._compositor = compositor or Compositor(
            FontSet.load(self._config.bold_font_path, self._config.regular_font_path),
            title=self._config.title,
            watermark=self._config.watermark,
            timezone=self._config.timezone,
        )
        self._staging = staging or StagingArea(self._config.staging_dir)
        self._staging.sweep()
        self._draw_lock = threading.Lock()

    @property
    def config(self) -> DashboardConfig:
        return self._config

    async def render(self) -> RenderResult:
        """Collect metrics and the background concurrently, then draw and encode."""
        fetch = asyncio.ensure_future(self._resolver.resolve())
        try:
            snapshot = await asyncio.to_thread(self._collector.collect)
        except BaseException:
            fetch.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await fetch
            raise
        background = await fetch

        image = await asyncio.to_thread(self._compose, snapshot, background)
        return RenderResult(
            caption=self._config.caption,
            image=await asyncio.to_thread(encode, image),
            used_fallback=isinstance(background, FallbackGradient),
        )

    def _compose(self, snapshot: MetricsSnapshot, background: BackgroundSource) -> Image.Image:
        # FreeType faces are shared through the FontSet; one draw at a time
        with self._draw_lock:
            return self._compositor.compose(snapshot, background)

    async def handle(self, request_id: str, deliver: Delivery) -> bool:
        """
        Serve one status request.

        Delivers the caption and image, or only the failure notice if the
        pipeline fails. Returns True when the image was delivered. Errors
        raised by deliver itself propagate after the staged file is released.
        """
        try:
            result = await self.render()
        except StatusBoardError as exc:
            logger.error(f"Status render failed for {request_id}: {exc}")
            await deliver(request_id, self._config.failure_notice)
            return False
        except Exception:
            logger.exception(f"Unexpected error rendering status for {request_id}")
            await deliver(request_id, self._config.failure_notice)
            return False

        with contextlib.ExitStack() as stack:
            try:
                path = stack.enter_context(self._staging.stage(result.image))
                stream = stack.enter_context(path.open("rb"))
            except OSError as exc:
                logger.error(f"Cannot stage status image for {request_id}: {exc}")
                await deliver(request_id, self._config.failure_notice)
                return False
            await deliver(request_id, result.caption, stream)

        logger.info(f"Delivered status image for {request_id} ({len(result.image)} bytes)")
        return True


class FileDelivery:
    """Delivery that writes the attachment to a file and prints the message body."""

    def __init__(self, output: Path) -> None:
        self._output = output

    async def __call__(
        self,
        request_id: str,
        body: str,
        attachment: BinaryIO | None = None,
    ) -> None:
        print(body)
        if attachment is None:
            return
        self._output.parent.mkdir(parents=True, exist_ok=True)
        with self._output.open("wb") as handle:
            shutil.copyfileobj(attachment, handle)
        print(f"Saved {self._output}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="statusboard",
        description="Render a host status dashboard image.",
    )
    parser.add_argument("--output", type=Path, default=Path("status.png"), help="Where to write the image")
    background = parser.add_mutually_exclusive_group()
    background.add_argument("--background-url", default=DEFAULT_BACKGROUND_URL, help="Background image URL")
    background.add_argument(
        "--no-background",
        action="store_true",
        help="Skip the network fetch and use the gradient background",
    )
    parser.add_argument("--timeout", type=float, default=DEFAULT_FETCH_TIMEOUT, help="Fetch timeout in seconds")
    parser.add_argument("--log-level", default="INFO", help="Log level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the statusboard command."""
    args = parse_args(argv)
    setup_logger(args.log_level)

    config = DashboardConfig(
        background_url=None if args.no_background else args.background_url,
        fetch_timeout=args.timeout,
    )
    board = StatusBoard(config)
    delivered = asyncio.run(board.handle("cli", FileDelivery(args.output)))
    return 0 if delivered else 1


if __name__ == "__main__":
    sys.exit(main())
