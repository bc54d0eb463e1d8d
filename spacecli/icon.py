"""Validation of the app icon referenced by a Spacefile."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

MAX_ICON_WIDTH = 512
MAX_ICON_HEIGHT = 512
MAX_ICON_SIZE = MAX_ICON_WIDTH * MAX_ICON_HEIGHT

# Formats whose headers can be read; the values are their MIME types.
_CONTENT_TYPES = {
    "PNG": "image/png",
    "GIF": "image/gif",
    "JPEG": "image/jpeg",
}


class IconError(Exception):
    """Base class for icon validation failures."""

    default_message = "invalid icon"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class InvalidIconPathError(IconError):
    default_message = "invalid icon path"


class InvalidIconTypeError(IconError):
    default_message = "invalid icon type"


class InvalidIconSizeError(IconError):
    default_message = "invalid icon size"


@dataclass(frozen=True)
class IconMeta:
    content_type: str
    width: int
    height: int


@dataclass(frozen=True)
class Icon:
    raw: bytes
    icon_meta: Optional[IconMeta] = None


def get_icon_meta(icon_path: str) -> IconMeta:
    """Read an image header and return its content type and dimensions."""
    path = os.path.abspath(icon_path)
    try:
        handle = open(path, "rb")
    except OSError:
        raise InvalidIconPathError() from None

    with handle:
        try:
            with Image.open(handle, formats=tuple(_CONTENT_TYPES)) as image:
                width, height = image.size
                image_format = image.format
        except UnidentifiedImageError:
            raise InvalidIconTypeError() from None
        except (OSError, ValueError, SyntaxError):
            raise InvalidIconPathError() from None

    return IconMeta(
        content_type=_CONTENT_TYPES.get(image_format or "", ""),
        width=width,
        height=height,
    )


def validate_icon(icon_path: str) -> None:
    """Raise an IconError if the icon is missing, of the wrong type or size."""
    meta = get_icon_meta(icon_path)
    if meta.content_type not in ("image/png", "image/webp"):
        raise InvalidIconTypeError()
    if meta.height != MAX_ICON_HEIGHT and meta.width != MAX_ICON_WIDTH:
        raise InvalidIconSizeError()