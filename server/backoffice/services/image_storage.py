"""
Image storage for travel galleries.

Every gallery image is stored twice under the public storage root, as a
full-size copy and a thumbnail, both named after the gallery's stored file
name:

    <root>/travel-galleries/<name>
    <root>/travel-galleries/thumbnails/<name>
"""

import re
import uuid
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from ..core.observability import get_logger

logger = get_logger(__name__)

GALLERY_DIRECTORY = "travel-galleries"
THUMBNAIL_DIRECTORY = "thumbnails"

FULL_SIZE: Tuple[int, int] = (1024, 683)
THUMBNAIL_SIZE: Tuple[int, int] = (400, 267)

# Formats without an alpha channel
_OPAQUE_FORMATS = {"JPEG"}


class ImageProcessingError(Exception):
    """The uploaded content could not be decoded or written as an image."""


@dataclass(frozen=True)
class GalleryPaths:
    image: Path
    thumbnail: Path

    def __iter__(self):
        return iter((self.image, self.thumbnail))


def build_stored_file_name(original_name: str) -> str:
    """
    Derive a unique stored file name from an upload's original name.

    ``Beach Day.JPG`` becomes ``beach-day-<32 hex chars>.jpg``. The stem is
    reduced to lowercase ``[a-z0-9-]`` and the extension (everything after
    the last dot) is kept, lowercased.
    """
    name = Path(original_name or "").name
    stem, dot, extension = name.rpartition(".")
    if not dot:
        stem, extension = extension, ""

    base = re.sub(r"[^a-z0-9]+", "-", stem.lower())[:100].strip("-") or "image"
    suffix = f".{extension.lower()}" if extension else ""
    return f"{base}-{uuid.uuid4().hex}{suffix}"


class ImageStorage:
    """Asset store rooted at the public storage directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def gallery_paths(self, file_name: str) -> GalleryPaths:
        gallery_dir = self.root / GALLERY_DIRECTORY
        return GalleryPaths(
            image=gallery_dir / file_name,
            thumbnail=gallery_dir / THUMBNAIL_DIRECTORY / file_name,
        )

    def resize_and_save(self, content: bytes, width: int, height: int, destination: Path) -> Path:
        """
        Resize ``content`` to exactly ``width`` x ``height`` and save it.

        The output format follows the destination's extension; missing
        directories are created.

        Raises:
            ImageProcessingError: If the content is not a readable image or
                the destination format is unsupported
        """
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            with Image.open(BytesIO(content)) as image:
                resized = image.resize((width, height))
                output_format = Image.registered_extensions().get(destination.suffix.lower())
                if output_format is None:
                    raise ImageProcessingError(f"Unsupported image extension '{destination.suffix}'")
                if output_format in _OPAQUE_FORMATS and resized.mode not in ("RGB", "L"):
                    resized = resized.convert("RGB")
                resized.save(destination, format=output_format)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageProcessingError(f"Failed to process image: {e}") from e

        return destination

    def delete_file(self, path: Path) -> bool:
        """
        Delete ``path``; a file that is already gone counts as deleted.

        Returns:
            bool: False when the file exists but could not be removed
        """
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to delete stored file", path=str(path), error=str(e))
            return False
        return True
