"""Pillow-based decoding, scaling and format detection.

HEIC/HEIF decoding is provided by pillow-heif, registered as a Pillow opener
on import.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps
from loguru import logger
from pillow_heif import register_heif_opener

register_heif_opener()

# Pillow format name -> file extension used when storing new assets
FORMAT_EXTENSIONS = {
    "JPEG": ".jpg",
    "MPO": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "BMP": ".bmp",
    "TIFF": ".tif",
    "WEBP": ".webp",
    "HEIF": ".heic",
}

# Openable formats that are documents, containers or stub plugins, not photos
NON_PHOTO_FORMATS = frozenset({"EPS", "PDF", "HDF5", "BUFR", "GRIB", "FITS", "MPEG", "WMF"})


def supported_extensions() -> set[str]:
    """Lower-case extensions of photo formats Pillow can open, HEIF included."""
    Image.init()
    return {
        ext.lower()
        for ext, fmt in Image.registered_extensions().items()
        if fmt in Image.OPEN and fmt not in NON_PHOTO_FORMATS
    } | {".heic", ".heif"}


_SUPPORTED = supported_extensions()


def is_supported_image(path: str) -> bool:
    """True if the file extension maps to a decodable image format."""
    return Path(path).suffix.lower() in _SUPPORTED


def probe_image(data: bytes) -> tuple[str, int, int]:
    """Decode `data` fully and return (format, width, height).

    Raises:
        OSError: Data is not a decodable image (`UnidentifiedImageError`
            is an `OSError`).
    """
    with Image.open(BytesIO(data)) as im:
        im.load()
        return str(im.format or "PNG"), int(im.width), int(im.height)


def image_size(path: str) -> tuple[int, int]:
    """Pixel size read from the file header."""
    with Image.open(path) as im:
        return int(im.width), int(im.height)


def _resample() -> int:
    resampling = getattr(Image, "Resampling", Image)
    return getattr(resampling, "LANCZOS", getattr(resampling, "BICUBIC", 3))


def load_scaled(path: str, width: int, height: int) -> Image.Image:
    """Open `path`, apply EXIF orientation and bound it to `width` x `height`."""
    with Image.open(path) as im:
        try:
            im = ImageOps.exif_transpose(im)
        except (OSError, ValueError, AttributeError) as ex:
            logger.debug("exif_transpose failed for {}: {}", path, ex)
        im = im.convert("RGB")
        if width > 0 and height > 0:
            im.thumbnail((width, height), _resample())
        return im


def encode_scaled(path: str, width: int, height: int) -> bytes:
    """PNG-encoded copy of `path` bounded by `width` x `height`."""
    buf = BytesIO()
    load_scaled(path, width, height).save(buf, format="PNG")
    return buf.getvalue()
