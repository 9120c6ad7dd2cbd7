"""Review photo preparation: downscale, re-encode as JPEG, embed as a data URL."""

import base64
import io

from PIL import Image, UnidentifiedImageError

from ratemyrez.core.errors import InvalidImage


def downscale_image(data: bytes, max_width: int = 800, quality: int = 70) -> bytes:
    """Shrink to ``max_width`` keeping the aspect ratio and return JPEG bytes.

    Narrower images keep their size and are only re-encoded.
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImage() from exc

    img = img.convert("RGB")
    if img.width > max_width:
        height = max(1, round(img.height * max_width / img.width))
        img = img.resize((max_width, height), Image.Resampling.LANCZOS)

    buf = io.BytesIO()
    img.save(buf, "JPEG", quality=quality)
    return buf.getvalue()


def to_data_url(jpeg: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii")


def prepare_review_photo(data: bytes, max_width: int = 800, quality: int = 70) -> str:
    """Uploaded file bytes to the data URL stored on a review."""
    return to_data_url(downscale_image(data, max_width=max_width, quality=quality))
