"""
Typed annotation attributes.

Attribute values form a closed set of kinds. Each kind decides for itself what
its empty/default value is, which the required-attribute filter relies on:

    FloatAttr       0.0
    StringAttr      ""
    StringListAttr  []   (a non-empty list is never default, whatever it holds)
    BoolAttr        False
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union

# Well-known attribute names.
ANCESTOR_LABELS = "Ancestors"  # StringListAttr, ancestors in the label taxonomy
CONFIDENCE = "Confidence"      # FloatAttr in [0.0, 1.0)
CROP_COORDS = "CropCoords"     # StringAttr, "(x1,y1)(x2,y2)" in the source image
DETECTED_TEXT = "Text"         # StringAttr


@dataclass(frozen=True)
class FloatAttr:
    value: float

    def is_default(self) -> bool:
        return self.value == 0.0


@dataclass(frozen=True)
class StringAttr:
    value: str

    def is_default(self) -> bool:
        return self.value == ""


@dataclass(frozen=True)
class StringListAttr:
    value: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # freeze lists handed in by callers
        object.__setattr__(self, "value", tuple(self.value))

    def is_default(self) -> bool:
        return len(self.value) == 0


@dataclass(frozen=True)
class BoolAttr:
    value: bool

    def is_default(self) -> bool:
        return self.value is False


AttributeValue = Union[FloatAttr, StringAttr, StringListAttr, BoolAttr]
Attributes = Dict[str, AttributeValue]


def to_attribute(value: Any) -> AttributeValue:
    """Wrap a raw Python value into its attribute kind."""
    if isinstance(value, (FloatAttr, StringAttr, StringListAttr, BoolAttr)):
        return value
    # bool before int/float: bool is an int subclass
    if isinstance(value, bool):
        return BoolAttr(value)
    if isinstance(value, (int, float)):
        return FloatAttr(float(value))
    if isinstance(value, str):
        return StringAttr(value)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return StringListAttr(tuple(value))
    raise TypeError(f"unsupported attribute value {value!r} ({type(value).__name__})")


def to_attributes(raw: Dict[str, Any] | None) -> Attributes:
    return {str(k): to_attribute(v) for k, v in (raw or {}).items()}


def plain_value(attr: AttributeValue) -> Union[float, str, List[str], bool]:
    if isinstance(attr, StringListAttr):
        return list(attr.value)
    return attr.value
