from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .annotation import AnnotatedFile, Annotation

logger = logging.getLogger(__name__)


@dataclass
class FilterConfig:
    labels: List[str] = field(default_factory=list)          # keep only these labels (empty keeps all)
    attributes: List[str] = field(default_factory=list)      # keep only these attributes (empty keeps all)
    required_attrs: List[str] = field(default_factory=list)  # must be present and not default
    min_confidence: float = 0.0
    min_bbox_width: float = 0.0
    min_bbox_height: float = 0.0
    min_aspect_ratio: float = 0.0  # 0 disables
    max_aspect_ratio: float = 0.0  # 0 disables
    require_label: bool = False    # drop files left without annotations


@dataclass
class FilterStats:
    annotations_removed: int = 0
    files_removed: int = 0


class AnnotationFilter:
    """
    Drops annotations failing any predicate, checked in this order:
    confidence, bbox size, bbox aspect ratio, label allow-list, required attributes.

    Compaction is stable: surviving annotations and files keep their input order.
    Applying the same filter to its own output changes nothing.
    """

    def __init__(self, cfg: Optional[FilterConfig] = None) -> None:
        self.cfg = cfg or FilterConfig()
        self._labels = set(self.cfg.labels)
        self._attributes = set(self.cfg.attributes)

    # ---------- predicates ----------

    def rejection_reason(self, a: Annotation) -> Optional[str]:
        """Name of the first failing predicate, or None if the annotation is kept."""
        cfg = self.cfg

        conf = a.confidence()
        if conf is not None and conf < cfg.min_confidence:
            return "confidence"

        width, height = a.width, a.height
        if width < cfg.min_bbox_width or height < cfg.min_bbox_height:
            return "size"

        if cfg.min_aspect_ratio != 0 or cfg.max_aspect_ratio != 0:
            if height == 0:
                return "aspect_ratio"
            ratio = width / height
            if (cfg.min_aspect_ratio != 0 and ratio < cfg.min_aspect_ratio) or \
                    (cfg.max_aspect_ratio != 0 and ratio > cfg.max_aspect_ratio):
                return "aspect_ratio"

        if self._labels and a.label not in self._labels:
            return "label"

        for k in cfg.required_attrs:
            v = a.attributes.get(k)
            if v is None or v.is_default():
                return "required_attr"

        return None

    def keep(self, a: Annotation) -> bool:
        return self.rejection_reason(a) is None

    def project_attributes(self, a: Annotation) -> None:
        if not self._attributes:
            return
        a.attributes = {k: v for k, v in a.attributes.items() if k in self._attributes}

    # ---------- application ----------

    def filter_file(self, f: AnnotatedFile) -> int:
        """Filter one file in place; returns the number of annotations removed."""
        kept = [a for a in f.annotations if self.keep(a)]
        removed = len(f.annotations) - len(kept)
        for a in kept:
            self.project_attributes(a)
        f.annotations = kept
        return removed

    def apply(self, dataset) -> FilterStats:
        stats = FilterStats()
        kept_files: List[AnnotatedFile] = []
        for f in dataset.files:
            stats.annotations_removed += self.filter_file(f)
            if self.cfg.require_label and not f.annotations:
                stats.files_removed += 1
                continue
            kept_files.append(f)
        dataset.files = kept_files
        logger.info(
            f"[FILTER] filtered out {stats.annotations_removed} labels and {stats.files_removed} files"
        )
        return stats
