from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from .errors import MalformedRule

logger = logging.getLogger(__name__)


def parse_rules(rules: Iterable[str]) -> List[Tuple[str, str]]:
    """'old=new' strings -> [(old, new), ...]; raises MalformedRule on anything else."""
    parsed: List[Tuple[str, str]] = []
    for rule in rules:
        parts = rule.split("=")
        if len(parts) != 2:
            raise MalformedRule(f"invalid label mapping: {rule!r} (expected old=new)")
        parsed.append((parts[0], parts[1]))
    return parsed


class LabelMapper:
    """
    Rewrites label (sub-)strings. Rules are applied in order to every label, so a
    later rule sees the output of the earlier ones.
    """

    def __init__(self, rules: Iterable[str]) -> None:
        self.replacements = parse_rules(rules)

    def map_label(self, label: str) -> str:
        for old, new in self.replacements:
            label = label.replace(old, new)
        return label

    def apply(self, dataset) -> int:
        """Rewrite all labels in place; returns the number of labels that changed."""
        if not self.replacements:
            return 0
        changed = 0
        for f in dataset:
            for a in f.annotations:
                new_label = self.map_label(a.label)
                if new_label != a.label:
                    a.label = new_label
                    changed += 1
        logger.info(f"[MAP] label mappings changed {changed} labels")
        return changed
