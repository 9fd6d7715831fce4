"""
Image load / crop / resize / save on top of Pillow.

Every failure is raised as an ImageProcessingError subclass carrying the path of
the offending image.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image as PILImage, UnidentifiedImageError

from .annotation import AnnotatedFile, Annotation
from .attributes import CROP_COORDS, StringAttr
from .enums import ImageEncoding, ResampleFilter
from .errors import ImageDecodeError, ImageEncodeError, ImageIOError, UnsupportedImageType
from .utils import derived_crop_path, round_half_away

# Pixel modes we can crop and resample directly, and what the rest decode to.
CROPPABLE_MODES = {"L", "LA", "RGB", "RGBA", "I", "F"}
_CONVERT_ON_LOAD = {"1": "L", "P": "RGBA", "PA": "RGBA", "CMYK": "RGB", "YCbCr": "RGB", "I;16": "I"}

# Modes each encoding accepts as-is, and lossy-but-safe conversions for the others.
_ENCODABLE = {
    ImageEncoding.JPEG: {"L", "RGB"},
    ImageEncoding.PNG: {"L", "LA", "RGB", "RGBA", "I"},
}
_CONVERT_ON_SAVE = {
    ImageEncoding.JPEG: {"LA": "L", "RGBA": "RGB"},
    ImageEncoding.PNG: {},
}


def load_image(path: Path) -> PILImage.Image:
    """Read and fully decode the image at path."""
    try:
        fh = open(path, "rb")
    except OSError as e:
        raise ImageIOError(f"cannot read {path}: {e}", path) from e
    with fh:
        try:
            with PILImage.open(fh) as im:
                im.load()
                mode = _CONVERT_ON_LOAD.get(im.mode)
                img = im.convert(mode) if mode else im.copy()
        except UnidentifiedImageError as e:
            raise ImageDecodeError(f"cannot decode {path}: {e}", path) from e
        except (OSError, ValueError, SyntaxError) as e:
            raise ImageDecodeError(f"failed to decode {path}: {e}", path) from e
    if img.mode not in CROPPABLE_MODES:
        raise UnsupportedImageType(f"the image mode {img.mode!r} of {path} cannot be cropped or resized", path)
    return img


def crop_objects(f: AnnotatedFile, img: PILImage.Image) -> List[Tuple[PILImage.Image, AnnotatedFile]]:
    """
    One crop per annotation whose rounded box overlaps the image. Boxes fully
    outside the image are dropped silently.

    Each crop comes with a single-annotation file covering the whole crop; its
    path is f.path with "_NN" (the annotation index) inserted before the extension.
    """
    if img.mode not in CROPPABLE_MODES:
        raise UnsupportedImageType(f"the image mode {img.mode!r} of {f.path} cannot be cropped", f.path)
    w, h = img.size
    out: List[Tuple[PILImage.Image, AnnotatedFile]] = []
    for i, a in enumerate(f.annotations):
        rect = a.bbox.intersect_pixels(w, h)
        if rect is None:
            continue
        x1, y1, x2, y2 = rect
        attrs = dict(a.attributes)
        attrs[CROP_COORDS] = StringAttr(f"({x1},{y1})({x2},{y2})")
        derived = AnnotatedFile(
            path=derived_crop_path(f.path, i),
            annotations=[Annotation((0, 0, x2 - x1, y2 - y1), a.label, attrs)],
        )
        out.append((img.crop(rect), derived))
    return out


def target_size(width: int, height: int, longer_side: int, shorter_side: int) -> Tuple[int, int]:
    """
    (new_width, new_height) for the requested longer/shorter side lengths.
    One of them may be <= 0, in which case it follows the image aspect ratio.
    """
    landscape = width >= height
    img_longer, img_shorter = (width, height) if landscape else (height, width)
    if longer_side <= 0:
        longer_side = round_half_away(shorter_side * (img_longer / img_shorter))
    elif shorter_side <= 0:
        shorter_side = round_half_away(longer_side * (img_shorter / img_longer))
    if landscape:
        return longer_side, shorter_side
    return shorter_side, longer_side


def resize_image(
    img: PILImage.Image,
    longer_side: int,
    shorter_side: int,
    downsample: ResampleFilter,
    upsample: ResampleFilter,
    path: Optional[Path] = None,
) -> Tuple[PILImage.Image, float, float]:
    """Returns the resized image and the (x, y) scale factors from old to new pixels."""
    w, h = img.size
    if w == 0 or h == 0:
        raise UnsupportedImageType(f"cannot resize the empty image {path}", path)
    new_w, new_h = target_size(w, h, longer_side, shorter_side)
    if new_w <= 0 or new_h <= 0:
        raise UnsupportedImageType(f"resizing {path} ({w}x{h}) gives an empty image ({new_w}x{new_h})", path)
    flt = downsample if new_w * new_h < w * h else upsample
    try:
        resized = flt.resize(img, (new_w, new_h))
    except ValueError as e:
        raise UnsupportedImageType(f"cannot resample {path} (mode {img.mode}): {e}", path) from e
    return resized, new_w / w, new_h / h


def save_image(img: PILImage.Image, out_path: Path, encoding: ImageEncoding, quality: int = 90) -> None:
    mode = _CONVERT_ON_SAVE[encoding].get(img.mode)
    if mode:
        img = img.convert(mode)
    if img.mode not in _ENCODABLE[encoding]:
        raise UnsupportedImageType(
            f"image mode {img.mode!r} cannot be encoded as {encoding.value} ({out_path})", out_path
        )

    params = {"quality": int(quality)} if encoding is ImageEncoding.JPEG else {}
    try:
        fh = open(out_path, "wb")
    except OSError as e:
        raise ImageIOError(f"cannot write {out_path}: {e}", out_path) from e
    with fh:
        try:
            img.save(fh, format=encoding.pil_format, **params)
        except (OSError, ValueError) as e:
            raise ImageEncodeError(f"failed to encode {out_path}: {e}", out_path) from e
