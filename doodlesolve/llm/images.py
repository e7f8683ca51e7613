"""Self-describing image references forwarded to multimodal models."""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_DATA_URL = re.compile(r"^data:(?P<media_type>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.+)$", re.DOTALL)


class InvalidImageReference(ValueError):
    """Raised when an image reference is not a usable base64 image data URL."""


@dataclass(frozen=True)
class ImageReference:
    """An image as `data:<mime>;base64,<payload>`.

    Pixel content is never decoded here; only the shape of the reference
    and the base64 alphabet are checked.
    """

    data_url: str
    media_type: str

    @classmethod
    def from_data_url(cls, data_url: str) -> "ImageReference":
        """Parses and validates a data URL.

        Args:
            data_url: Reference produced by the drawing surface.

        Returns:
            Validated image reference.

        Raises:
            InvalidImageReference: If the URL is malformed or not an image.
        """
        candidate = str(data_url or "").strip()
        match = _DATA_URL.match(candidate)
        if not match:
            raise InvalidImageReference("Expected a 'data:<mimetype>;base64,<encoded_data>' image reference.")

        media_type = match.group("media_type").lower()
        if not media_type.startswith("image/"):
            raise InvalidImageReference("Unsupported media type '{}'; an image is required.".format(media_type))

        try:
            base64.b64decode(match.group("payload"), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidImageReference("Image payload is not valid base64.") from exc

        return cls(data_url=candidate, media_type=media_type)

    @classmethod
    def from_base64(cls, payload: str, media_type: str = "image/png") -> "ImageReference":
        encoded = str(payload or "").strip()
        if encoded.startswith("data:"):
            return cls.from_data_url(encoded)
        return cls.from_data_url("data:{};base64,{}".format(media_type or "image/png", encoded))

    @classmethod
    def from_path(cls, path: str, max_bytes: int = 5242880, media_type: Optional[str] = None) -> "ImageReference":
        """Builds a reference from a local image file.

        Args:
            path: Local file path.
            max_bytes: Maximum accepted file size.
            media_type: Explicit MIME type; guessed from the extension otherwise.

        Returns:
            Image reference embedding the file bytes.

        Raises:
            InvalidImageReference: If the file is missing or too large.
        """
        file_path = Path(path).expanduser()
        if not file_path.exists() or not file_path.is_file():
            raise InvalidImageReference("Image file not found: {}".format(file_path))

        payload = file_path.read_bytes()
        if len(payload) > max_bytes:
            raise InvalidImageReference(
                "Image file {} exceeds {} bytes.".format(file_path, max_bytes)
            )

        encoded = base64.b64encode(payload).decode("ascii")
        resolved = media_type or _guess_media_type(file_path) or "image/png"
        return cls.from_base64(encoded, media_type=resolved)

    @property
    def size_hint(self) -> int:
        """Approximate decoded size in bytes, without decoding."""
        payload = self.data_url.split(",", 1)[1]
        return (len(payload) * 3) // 4

    def __repr__(self) -> str:
        return "ImageReference(media_type={!r}, size_hint={})".format(self.media_type, self.size_hint)


def _guess_media_type(path: Path) -> Optional[str]:
    guessed, _ = mimetypes.guess_type(str(path))
    if guessed and guessed.startswith("image/"):
        return guessed
    return None
