"""Image kinds used by the game and where their files live."""

from __future__ import annotations

from enum import IntEnum
from os import PathLike
from pathlib import Path


class ImageType(IntEnum):
    TRIANGLE = 0
    SQUARE = 1
    PENTAGON = 2
    HEXAGON = 3
    TEXTBOX = 4
    ICON = 5
    SPLASH = 6


_FILE_NAMES = {
    ImageType.TRIANGLE: "triangle.png",
    ImageType.SQUARE: "square.png",
    ImageType.PENTAGON: "pentagon.png",
    ImageType.HEXAGON: "hexagon.png",
    ImageType.TEXTBOX: "textbox.png",
    ImageType.ICON: "icon.png",
    ImageType.SPLASH: "splash.png",
}

_SIZES = {
    ImageType.TRIANGLE: (200, 200),
    ImageType.SQUARE: (200, 200),
    ImageType.PENTAGON: (200, 200),
    ImageType.HEXAGON: (200, 200),
    ImageType.TEXTBOX: (200, 75),
    ImageType.SPLASH: (440, 160),
}


class ImagePool:
    """Catalogue of the game's images under ``<root>/images``."""

    def __init__(self, root: str | PathLike[str] = ".") -> None:
        self._directory = Path(root) / "images"

    def path(self, image_type: ImageType | int) -> Path:
        return self._directory / _FILE_NAMES[ImageType(image_type)]

    def size(self, image_type: ImageType | int) -> tuple[int, int] | None:
        """Display size as (width, height), or None to keep the file's own size."""
        return _SIZES.get(ImageType(image_type))

    def missing(self) -> list[ImageType]:
        return [image_type for image_type in ImageType if not self.path(image_type).is_file()]