from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .attributes import CONFIDENCE, Attributes, FloatAttr, to_attributes
from .bounding_box import BoundingBox

Coords = Tuple[float, float, float, float]


@dataclass
class Annotation:
    """
    One labelled object: absolute pixel coords (x1, y1, x2, y2) measured from the
    image's top-left corner, a label and typed attributes.
    """
    coords: Coords
    label: str
    attributes: Attributes = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.coords = tuple(float(c) for c in self.coords)  # type: ignore[assignment]
        if len(self.coords) != 4:
            raise ValueError(f"coords must have 4 values, got {len(self.coords)}")
        # accept raw python values for convenience
        self.attributes = to_attributes(self.attributes)

    # ---------- geometry ----------

    @property
    def width(self) -> float:
        return self.coords[2] - self.coords[0]

    @property
    def height(self) -> float:
        return self.coords[3] - self.coords[1]

    @property
    def bbox(self) -> BoundingBox:
        return BoundingBox.from_coords(self.coords)

    def set_bbox(self, box: BoundingBox) -> None:
        self.coords = box.coords()

    def aspect_ratio(self) -> Optional[float]:
        return self.bbox.aspect_ratio()

    # ---------- attributes ----------

    def confidence(self) -> Optional[float]:
        v = self.attributes.get(CONFIDENCE)
        return v.value if isinstance(v, FloatAttr) else None

    def copy(self) -> "Annotation":
        # attribute values are immutable, a shallow dict copy is enough
        return Annotation(self.coords, self.label, dict(self.attributes))


@dataclass
class AnnotatedFile:
    """An image path and the annotations that belong to it."""
    path: Path
    annotations: List[Annotation] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def __len__(self) -> int:
        return len(self.annotations)

    def scale_coords(self, scale_x: float, scale_y: float) -> None:
        """Multiply x coordinates by scale_x and y coordinates by scale_y."""
        for a in self.annotations:
            x1, y1, x2, y2 = a.coords
            a.coords = (x1 * scale_x, y1 * scale_y, x2 * scale_x, y2 * scale_y)

    def copy(self) -> "AnnotatedFile":
        return AnnotatedFile(self.path, [a.copy() for a in self.annotations])

    def __repr__(self) -> str:
        return f"AnnotatedFile(path={str(self.path)!r}, annotations={len(self.annotations)})"

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AnnotatedFile":
        """Build from {'path': ..., 'annotations': [{'coords': ..., 'label': ..., 'attributes': {...}}]}."""
        return AnnotatedFile(
            path=Path(d["path"]),
            annotations=[
                Annotation(
                    coords=tuple(a["coords"]),
                    label=str(a["label"]),
                    attributes=a.get("attributes") or {},
                )
                for a in d.get("annotations") or []
            ],
        )
