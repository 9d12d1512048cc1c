"""
Upload checks and storage paths for event images and route GPX tracks.
"""

import io
import random
import re
import string
import time

from bs4 import BeautifulSoup
from PIL import Image, UnidentifiedImageError

from ssa_admin.utils.slugs import slugify

GPX_CONTENT_TYPE = "application/gpx+xml"


class UploadError(ValueError):
    """Raised when a file is not what its upload slot expects."""


def inspect_image(data: bytes) -> str:
    """Verify that data is a readable image and return its MIME type."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            image_format = img.format
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise UploadError(f"Not a valid image: {e}") from e

    mime = Image.MIME.get(image_format)
    if not mime:
        raise UploadError(f"Unsupported image format: {image_format}")
    return mime


def inspect_gpx(data: bytes) -> int:
    """
    Check that data is a GPX document with at least one track or route point.
    Returns the number of points found.
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UploadError("GPX file must be UTF-8 text") from e

    soup = BeautifulSoup(text, "html.parser")
    if not soup.find("gpx"):
        raise UploadError("Missing <gpx> root element")

    points = soup.find_all(["trkpt", "rtept"])
    if not points:
        raise UploadError("GPX file has no track or route points")
    return len(points)


def _millis():
    return int(time.time() * 1000)


def image_object_path(filename):
    """event-images/<millis>-<random>.<ext>, mirroring how the web admin names them."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    token = "".join(random.choices(string.ascii_lowercase + string.digits, k=11))
    return f"event-images/{_millis()}-{token}.{ext}"


def gpx_object_path(filename, slug=None, name=None):
    """<slug>/<millis>-<filename>, with whitespace in the filename replaced by underscores."""
    base = slug or slugify(name or "route") or "route"
    safe_name = re.sub(r"\s+", "_", filename)
    return f"{base}/{_millis()}-{safe_name}"
