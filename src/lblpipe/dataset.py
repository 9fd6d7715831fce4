from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from .annotation import AnnotatedFile
from .bbox_transform import BboxTransformer
from .filters import AnnotationFilter, FilterConfig, FilterStats
from .labels import LabelMapper
from .pipeline import ImagePipeline, ImagePipelineConfig
from .splitter import DatasetSplitter


@dataclass
class Dataset:
    """Ordered collection of AnnotatedFile, the unit every stage operates on."""
    files: List[AnnotatedFile] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[AnnotatedFile]:
        return iter(self.files)

    def __getitem__(self, i: int) -> AnnotatedFile:
        return self.files[i]

    def num_annotations(self) -> int:
        return sum(len(f.annotations) for f in self.files)

    def labels(self) -> Dict[str, int]:
        """Label -> number of annotations carrying it."""
        return dict(Counter(a.label for f in self.files for a in f.annotations))

    def copy(self) -> "Dataset":
        return Dataset([f.copy() for f in self.files])

    @staticmethod
    def from_dicts(items: Iterable[dict]) -> "Dataset":
        return Dataset([AnnotatedFile.from_dict(d) for d in items])

    # ---------- stages (all in place except split) ----------

    def map_labels(self, rules: Iterable[str]) -> int:
        return LabelMapper(rules).apply(self)

    def transform_bboxes(self, scale_x: float = 1.0, scale_y: float = 1.0, aspect_ratio: float = 0.0) -> int:
        return BboxTransformer(scale_x, scale_y, aspect_ratio).apply(self)

    def filter(self, cfg: Optional[FilterConfig] = None, **kwargs) -> FilterStats:
        return AnnotationFilter(cfg or FilterConfig(**kwargs)).apply(self)

    def process_images(self, cfg: ImagePipelineConfig) -> None:
        """Run the ImagePipeline with an ImagePipelineConfig; raises its first per-image error."""
        ImagePipeline(cfg).process(self)

    def split(self, boundaries: Iterable[int], seed: Optional[int] = None) -> List["Dataset"]:
        return DatasetSplitter(boundaries, seed=seed).split(self)
