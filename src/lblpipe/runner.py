from __future__ import annotations

import logging
from typing import Iterable, List, Union

from .config import PipelineConfig
from .dataset import Dataset
from .filters import AnnotationFilter
from .pipeline import ImagePipeline

logger = logging.getLogger(__name__)

STEPS = ("map", "bbox", "filter", "images", "split")


def normalize_steps(steps_arg: Union[str, Iterable[str], None]) -> List[str]:
    """None/'' -> all steps; 'map,filter' -> ['map', 'filter'] (in pipeline order)."""
    if not steps_arg:
        return list(STEPS)
    if isinstance(steps_arg, str):
        wanted = [s.strip() for s in steps_arg.split(",") if s.strip()]
    else:
        wanted = [str(s).strip() for s in steps_arg]
    unknown = [s for s in wanted if s not in STEPS]
    if unknown:
        raise ValueError(f"unknown pipeline steps {unknown}, expected a subset of {list(STEPS)}")
    return [s for s in STEPS if s in wanted]


def run_pipeline(dataset: Dataset, cfg: PipelineConfig, steps: Union[str, Iterable[str], None] = None) -> List[Dataset]:
    """
    map -> bbox -> filter -> images -> split, skipping steps not selected.

    All stages are built (and so validated) before the dataset is touched.
    Returns the split datasets; a single-element list when there is one bucket or
    the split step is skipped.
    """
    todo = normalize_steps(steps)
    cfg.validate()

    mapper = cfg.label_mapper()
    transformer = cfg.bbox_transformer()
    flt = AnnotationFilter(cfg.filter_config())
    images = ImagePipeline(cfg.image_config())
    splitter = cfg.splitter()

    logger.info(f"[PIPELINE] {len(dataset)} files, {dataset.num_annotations()} labels, steps={todo}")

    if "map" in todo:
        mapper.apply(dataset)
    if "bbox" in todo:
        transformer.apply(dataset)
    if "filter" in todo:
        flt.apply(dataset)
    if "images" in todo:
        images.process(dataset)

    out: List[Dataset] = [dataset]
    if "split" in todo and len(splitter.boundaries) > 1:
        out = splitter.split(dataset)

    logger.info(f"[PIPELINE] total number of labelled files: {len(dataset)}")
    return out
