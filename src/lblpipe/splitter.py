from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import numpy as np

from .errors import InvalidSplit

logger = logging.getLogger(__name__)


def cumulative_splits(percentages: Iterable[int]) -> List[int]:
    """[70, 20, 10] -> [70, 90, 100]; each percentage must be in [0, 100] and they must sum to 100."""
    out: List[int] = []
    total = 0
    for p in percentages:
        p = int(p)
        if p < 0 or p > 100:
            raise InvalidSplit(f"invalid split percentage {p}")
        total += p
        out.append(total)
    if total != 100:
        raise InvalidSplit(f"the split percentages add up to {total}, not 100")
    return out


class DatasetSplitter:
    """
    Randomly partitions a dataset into buckets.

    `boundaries` are cumulative percentages ending at 100. Every file draws a
    uniform integer r in [0, 100) and lands in the first bucket with boundary > r,
    so bucket i receives a file with probability (b[i] - b[i-1]) / 100.
    Without a seed the split is not reproducible.
    """

    def __init__(self, boundaries: Iterable[int], seed: Optional[int] = None) -> None:
        self.boundaries = [int(b) for b in boundaries]
        if not self.boundaries or self.boundaries[-1] != 100:
            raise InvalidSplit(f"the cumulative split {self.boundaries} does not end at 100")
        prev = 0
        for b in self.boundaries:
            if b < prev or b > 100:
                raise InvalidSplit(f"the cumulative split {self.boundaries} is not non-decreasing within [0, 100]")
            prev = b
        self.seed = seed

    @classmethod
    def from_percentages(cls, percentages: Iterable[int], seed: Optional[int] = None) -> "DatasetSplitter":
        return cls(cumulative_splits(percentages), seed=seed)

    def assign(self, n: int) -> np.ndarray:
        """Bucket index for each of n items."""
        rng = np.random.default_rng(self.seed)
        draws = rng.integers(0, 100, size=n)
        return np.searchsorted(np.asarray(self.boundaries), draws, side="right")

    def split(self, dataset) -> list:
        buckets: List[list] = [[] for _ in self.boundaries]
        for f, idx in zip(dataset.files, self.assign(len(dataset))):
            buckets[int(idx)].append(f)
        out = [type(dataset)(b) for b in buckets]
        logger.info(f"[SPLIT] {len(dataset)} files -> {[len(d) for d in out]}")
        return out
