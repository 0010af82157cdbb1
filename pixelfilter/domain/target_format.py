from __future__ import annotations

from enum import Enum

from pixelfilter.domain.errors import EncodeError


class TargetFormat(Enum):
    JPEG = ("JPEG", "image/jpeg", "jpg", False)
    PNG = ("PNG", "image/png", "png", True)

    def __init__(self, pil_format: str, media_type: str, extension: str, keeps_alpha: bool) -> None:
        self.pil_format = pil_format
        self.media_type = media_type
        self.extension = extension
        self.keeps_alpha = keeps_alpha

    @classmethod
    def from_extension(cls, extension: str) -> TargetFormat:
        ext = extension.strip().lower().lstrip(".")
        if ext in {"jpg", "jpeg"}:
            return cls.JPEG
        if ext == "png":
            return cls.PNG
        raise EncodeError(f"Unsupported output format: {extension or '<none>'}")
