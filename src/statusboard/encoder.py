"""PNG encoding of rendered dashboards."""

from io import BytesIO

from PIL import Image

from statusboard.errors import EncodingError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def encode(image: Image.Image) -> bytes:
    """Serialize an image to PNG bytes."""
    buffer = BytesIO()
    try:
        image.save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodingError(f"cannot encode {image.mode} image as PNG: {exc}") from exc
    return buffer.getvalue()
