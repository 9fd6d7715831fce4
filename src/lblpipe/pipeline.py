"""
Bounded-concurrency image processing.

    feeder --(work queue, bounded)--> N workers --(derived queue, bounded)--> collector

Workers run Load -> Crop -> Resize -> Save for one file at a time. The work
queue holds at most 2 * N items, so the feeder blocks instead of letting decoded
images pile up in memory. When cropping, the collector thread is the only writer
of the result list. Without cropping each worker writes to the result slot of
its input index, so the output keeps the input order.

Per-image failures do not stop other workers. The first one is kept, later ones
are dropped, and it is raised once every thread has finished and the dataset
holds the (consistent) partial result. Files already written stay on disk.

Output paths are checked before any thread starts: two files writing the same
path, or an output landing on a source image, is a ConfigError.
"""
from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .annotation import AnnotatedFile
from .enums import ImageEncoding, ResampleFilter
from .errors import ConfigError, ImageIOError
from .imaging import crop_objects, load_image, resize_image, save_image
from .utils import derived_crop_path, ensure_dir, output_image_path

logger = logging.getLogger(__name__)

_DONE = object()  # queue sentinel


@dataclass
class ImagePipelineConfig:
    output_dir: Optional[Path] = None
    longer_side: int = 0   # 0 derives it from the aspect ratio
    shorter_side: int = 0  # 0 derives it from the aspect ratio
    downsample_filter: str = ResampleFilter.BOX.value
    upsample_filter: str = ResampleFilter.LINEAR.value
    encoding: str = ImageEncoding.JPEG.value
    quality: int = 90      # JPEG only
    crop_objects: bool = False
    num_workers: Optional[int] = None  # default: min(2 * cpu_count, number of files)

    @property
    def resize(self) -> bool:
        return self.longer_side > 0 or self.shorter_side > 0

    @property
    def enabled(self) -> bool:
        return self.resize or self.crop_objects


class FirstErrorSlot:
    """Holds the first error offered to it; later offers are dropped."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._error: Optional[BaseException] = None
        self.dropped = 0

    def offer(self, err: BaseException) -> bool:
        with self._lock:
            if self._error is None:
                self._error = err
                return True
            self.dropped += 1
            return False

    @property
    def error(self) -> Optional[BaseException]:
        with self._lock:
            return self._error


class ImagePipeline:
    """Resizes and/or crops the images of a dataset and keeps the annotation coords in sync."""

    def __init__(self, cfg: ImagePipelineConfig) -> None:
        # configuration errors surface here, before any thread starts
        self.cfg = cfg
        self.downsample = ResampleFilter.parse(cfg.downsample_filter)
        self.upsample = ResampleFilter.parse(cfg.upsample_filter)
        self.encoding = ImageEncoding.parse(cfg.encoding)
        if cfg.enabled and cfg.output_dir is None:
            raise ConfigError("an output directory is required for image processing")
        self.output_dir = Path(cfg.output_dir) if cfg.output_dir is not None else None

    def num_workers(self, n_files: int) -> int:
        n = self.cfg.num_workers or 2 * (os.cpu_count() or 1)
        return max(1, min(n, n_files))

    def output_paths(self, files: List[AnnotatedFile]) -> List[Path]:
        """
        Every path the run may write, computed before any thread starts. With
        cropping that is one path per annotation, whether or not its box ends
        up inside the image.

        Raises ConfigError when two outputs share a path or an output would
        overwrite one of the source images.
        """
        ext = self.encoding.extension
        sources = {Path(f.path).resolve() for f in files}
        seen = {}
        out: List[Path] = []
        for f in files:
            if self.cfg.crop_objects:
                names = [derived_crop_path(f.path, i) for i in range(len(f.annotations))]
            else:
                names = [f.path]
            for name in names:
                p = output_image_path(name, self.output_dir, ext)
                key = p.resolve()
                if key in sources:
                    raise ConfigError(f"output image {p} would overwrite a source image")
                if key in seen:
                    raise ConfigError(f"{seen[key]} and {f.path} both write to {p}")
                seen[key] = f.path
                out.append(p)
        return out

    # ---------- per item ----------

    def process_file(self, f: AnnotatedFile,
                     publish: Optional[Callable[[AnnotatedFile], None]] = None) -> List[AnnotatedFile]:
        """
        Load -> Crop -> Resize -> Save for one file. Returns the files that were
        written: f itself (updated in place) or the crop-derived files. Each one is
        also handed to `publish` as soon as its image is saved.
        """
        img = load_image(f.path)

        if self.cfg.crop_objects:
            items = crop_objects(f, img)
        else:
            items = [(img, f)]

        done: List[AnnotatedFile] = []
        for im, data in items:
            scale: Optional[Tuple[float, float]] = None
            if self.cfg.resize:
                im, sx, sy = resize_image(
                    im, self.cfg.longer_side, self.cfg.shorter_side,
                    self.downsample, self.upsample, path=data.path,
                )
                scale = (sx, sy)

            out_path = output_image_path(data.path, self.output_dir, self.encoding.extension)
            save_image(im, out_path, self.encoding, self.cfg.quality)

            # path and coords change together, after the image is on disk
            data.path = out_path
            if scale is not None:
                data.scale_coords(*scale)
            done.append(data)
            if publish is not None:
                publish(data)
        return done

    # ---------- threads ----------

    def _worker(self, work: queue.Queue, slots: List[Optional[AnnotatedFile]],
                derived: Optional[queue.Queue], errors: FirstErrorSlot) -> None:
        while True:
            item = work.get()
            if item is _DONE:
                return
            idx, f = item
            try:
                produced = self.process_file(f, publish=derived.put if derived is not None else None)
            except Exception as e:  # per-item failure, surfaced after all threads finish
                if not errors.offer(e):
                    logger.warning(f"[IMAGES] dropping additional error for {f.path}: {e}")
                continue
            if derived is None:
                slots[idx] = produced[0]

    @staticmethod
    def _collector(derived: queue.Queue, out: List[AnnotatedFile]) -> None:
        while True:
            d = derived.get()
            if d is _DONE:
                return
            out.append(d)

    def process(self, dataset) -> None:
        """
        Process every file of the dataset in place. With cropping the dataset's
        files are replaced by the crop-derived files (in completion order).
        Raises the first per-image error after all work has finished.
        """
        if not self.cfg.enabled:
            return
        files = dataset.files
        self.output_paths(files)
        logger.info(f"[IMAGES] processing {len(files)} images -> {self.output_dir}")
        try:
            ensure_dir(self.output_dir)
        except OSError as e:
            raise ImageIOError(f"cannot create output directory {self.output_dir}: {e}", self.output_dir) from e
        if not files:
            if self.cfg.crop_objects:
                dataset.files = []
            return

        n_workers = self.num_workers(len(files))
        work: queue.Queue = queue.Queue(maxsize=2 * n_workers)
        errors = FirstErrorSlot()
        slots: List[Optional[AnnotatedFile]] = list(files)

        derived: Optional[queue.Queue] = None
        cropped: List[AnnotatedFile] = []
        collector: Optional[threading.Thread] = None
        if self.cfg.crop_objects:
            derived = queue.Queue(maxsize=2 * n_workers)
            collector = threading.Thread(target=self._collector, args=(derived, cropped),
                                         name="lblpipe-collector", daemon=True)
            collector.start()

        workers = [
            threading.Thread(target=self._worker, args=(work, slots, derived, errors),
                             name=f"lblpipe-worker-{i}", daemon=True)
            for i in range(n_workers)
        ]
        for t in workers:
            t.start()

        # feed, then close with one sentinel per worker
        for item in enumerate(files):
            work.put(item)
        for _ in workers:
            work.put(_DONE)

        for t in workers:
            t.join()
        if collector is not None:
            derived.put(_DONE)
            collector.join()
            dataset.files = cropped
        else:
            dataset.files = slots

        n_out = len(dataset.files)
        if errors.error is not None:
            logger.error(
                f"[IMAGES] finished with errors ({errors.dropped + 1} failed), {n_out} files in the output"
            )
            raise errors.error
        logger.info(f"[IMAGES] wrote {n_out} images to {self.output_dir}")
