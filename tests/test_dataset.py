from pathlib import Path

from lblpipe.annotation import AnnotatedFile, Annotation
from lblpipe.attributes import FloatAttr, StringListAttr
from lblpipe.dataset import Dataset


def _sample():
    return Dataset.from_dicts([
        {
            "path": "imgs/a.jpg",
            "annotations": [
                {"coords": [10, 20, 30, 60], "label": "car", "attributes": {"Confidence": 0.9}},
                {"coords": [0, 0, 5, 5], "label": "bus", "attributes": {"Ancestors": ["vehicle"]}},
            ],
        },
        {"path": "imgs/b.jpg", "annotations": [{"coords": [1, 1, 2, 2], "label": "car"}]},
        {"path": "imgs/c.jpg"},
    ])


def test_from_dicts():
    ds = _sample()
    assert len(ds) == 3
    assert ds[0].path == Path("imgs/a.jpg")
    a = ds[0].annotations[0]
    assert a.coords == (10.0, 20.0, 30.0, 60.0)
    assert a.width == 20 and a.height == 40
    assert a.attributes["Confidence"] == FloatAttr(0.9)
    assert a.confidence() == 0.9
    assert ds[0].annotations[1].attributes["Ancestors"] == StringListAttr(("vehicle",))
    assert ds[0].annotations[1].confidence() is None


def test_counts():
    ds = _sample()
    assert ds.num_annotations() == 3
    assert ds.labels() == {"car": 2, "bus": 1}


def test_copy_is_deep():
    ds = _sample()
    cp = ds.copy()
    cp[0].annotations[0].label = "truck"
    cp[0].path = Path("x.jpg")
    cp.files.pop()
    assert ds[0].annotations[0].label == "car"
    assert ds[0].path == Path("imgs/a.jpg")
    assert len(ds) == 3


def test_scale_coords():
    f = AnnotatedFile("a.jpg", [Annotation((20, 20, 60, 60), "x")])
    f.scale_coords(0.5, 0.25)
    assert f.annotations[0].coords == (10, 5, 30, 15)


def test_chained_stages():
    ds = _sample()
    ds.map_labels(["bus=car"])
    ds.transform_bboxes(scale_x=2.0, scale_y=2.0)
    ds.filter(min_bbox_width=10, require_label=True)
    assert [f.path.name for f in ds] == ["a.jpg"]
    assert ds.labels() == {"car": 2}
    buckets = ds.split([100])
    assert len(buckets) == 1 and len(buckets[0]) == len(ds)
