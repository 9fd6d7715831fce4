from __future__ import annotations

from enum import Enum

from PIL import Image as PILImage, ImageFilter

from .errors import UnsupportedEncoding, UnsupportedFilter


class ResampleFilter(str, Enum):
    NEAREST = "nearest"
    BOX = "box"
    LINEAR = "linear"
    GAUSSIAN = "gaussian"
    LANCZOS = "lanczos"

    @classmethod
    def parse(cls, name: "str | ResampleFilter") -> "ResampleFilter":
        if isinstance(name, ResampleFilter):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise UnsupportedFilter(f"unknown resampling filter {name!r}") from None

    def resize(self, im: PILImage.Image, size: tuple[int, int]) -> PILImage.Image:
        """Resample `im` to `size` = (width, height) with this filter."""
        if self is ResampleFilter.GAUSSIAN:
            # Pillow has no gaussian kernel; blur by the reduction factor, then interpolate.
            w, h = im.size
            factor = max(w / max(size[0], 1), h / max(size[1], 1), 1.0)
            blurred = im.filter(ImageFilter.GaussianBlur(radius=0.5 * factor))
            return blurred.resize(size, PILImage.Resampling.BILINEAR)
        return im.resize(size, _PIL_RESAMPLING[self])


_PIL_RESAMPLING = {
    ResampleFilter.NEAREST: PILImage.Resampling.NEAREST,
    ResampleFilter.BOX: PILImage.Resampling.BOX,
    ResampleFilter.LINEAR: PILImage.Resampling.BILINEAR,
    ResampleFilter.LANCZOS: PILImage.Resampling.LANCZOS,
}


class ImageEncoding(str, Enum):
    JPEG = "jpg"
    PNG = "png"

    @classmethod
    def parse(cls, name: "str | ImageEncoding") -> "ImageEncoding":
        if isinstance(name, ImageEncoding):
            return name
        key = str(name).strip().lower().lstrip(".")
        if key == "jpeg":
            key = "jpg"
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedEncoding(f"unsupported output encoding {name!r}") from None

    @property
    def extension(self) -> str:
        return "." + self.value

    @property
    def pil_format(self) -> str:
        return "JPEG" if self is ImageEncoding.JPEG else "PNG"
