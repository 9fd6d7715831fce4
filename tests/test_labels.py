import pytest

from lblpipe.annotation import AnnotatedFile, Annotation
from lblpipe.dataset import Dataset
from lblpipe.errors import ConfigError, MalformedRule
from lblpipe.labels import LabelMapper, parse_rules


def _ds(*labels):
    return Dataset([AnnotatedFile("a.jpg", [Annotation((0, 0, 1, 1), lb) for lb in labels])])


def test_parse_rules():
    assert parse_rules(["car=vehicle", "a="]) == [("car", "vehicle"), ("a", "")]


@pytest.mark.parametrize("rule", ["car", "a=b=c", ""])
def test_malformed_rule(rule):
    with pytest.raises(MalformedRule):
        LabelMapper(["x=y", rule])
    assert issubclass(MalformedRule, ConfigError)


def test_rules_apply_in_order_to_substrings():
    ds = _ds("red car", "car", "bus")
    changed = LabelMapper(["car=vehicle", "vehicle=thing"]).apply(ds)
    assert [a.label for a in ds[0].annotations] == ["red thing", "thing", "bus"]
    assert changed == 2


def test_replaces_all_occurrences():
    ds = _ds("a-a-a")
    assert ds.map_labels(["a=b"]) == 1
    assert ds[0].annotations[0].label == "b-b-b"


def test_no_rules_is_noop():
    ds = _ds("car")
    assert LabelMapper([]).apply(ds) == 0
    assert ds[0].annotations[0].label == "car"
