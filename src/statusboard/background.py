"""Background image resolution for statusboard."""

import asyncio
from io import BytesIO

import httpx
from loguru import logger
from PIL import Image, UnidentifiedImageError

from statusboard.errors import FetchFailure
from statusboard.models import BackgroundSource, FallbackGradient, RemoteImage


class BackgroundResolver:
    """
    Fetches the dashboard background over HTTP(S).

    resolve() never raises: any transport error, bad status, timeout or
    undecodable payload yields a FallbackGradient instead.
    """

    def __init__(
        self,
        url: str | None,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the BackgroundResolver.

        Args:
            url: Image URL, or None to always use the fallback gradient.
            timeout: Upper bound in seconds for fetch and decode together.
            client: Optional shared client. A short-lived one is used otherwise.
        """
        self._url = url
        self._timeout = timeout
        self._client = client

    @property
    def url(self) -> str | None:
        return self._url

    async def resolve(self) -> BackgroundSource:
        """Return the remote image, or the fallback gradient on any failure."""
        if not self._url:
            return FallbackGradient()

        try:
            image = await asyncio.wait_for(self._fetch(self._url), timeout=self._timeout)
        except FetchFailure as exc:
            logger.warning(f"Background fetch failed, using gradient: {exc}")
            return FallbackGradient()
        except asyncio.TimeoutError:
            logger.warning(f"Background fetch timed out after {self._timeout}s, using gradient")
            return FallbackGradient()

        return RemoteImage(image=image)

    async def _fetch(self, url: str) -> Image.Image:
        try:
            if self._client is not None:
                response = await self._client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchFailure(f"{type(exc).__name__}: {exc}") from exc

        return _decode(response.content)


def _decode(payload: bytes) -> Image.Image:
    """Decode and fully load an image payload as RGB."""
    try:
        with Image.open(BytesIO(payload)) as image:
            return image.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise FetchFailure(f"undecodable image payload: {exc}") from exc
