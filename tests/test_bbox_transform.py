import random

import pytest

from lblpipe.annotation import AnnotatedFile, Annotation
from lblpipe.bbox_transform import BboxTransformer
from lblpipe.dataset import Dataset
from lblpipe.errors import ConfigError


def _ann(*coords):
    return Annotation(coords, "obj")


def test_scale_about_center():
    a = _ann(10, 10, 30, 20)
    BboxTransformer(scale_x=1.5, scale_y=2.0).transform(a)
    assert a.coords == pytest.approx((5, 5, 35, 25))


def test_scale_then_aspect():
    a = _ann(0, 0, 10, 10)
    BboxTransformer(scale_x=2.0, aspect_ratio=1.0).transform(a)
    # 20x10 after scaling, then grown vertically to 20x20
    assert a.coords == pytest.approx((-5, -5, 15, 15))


def test_aspect_ratio_never_shrinks():
    rng = random.Random(7)
    for _ in range(200):
        x1, y1 = rng.uniform(-50, 50), rng.uniform(-50, 50)
        w, h = rng.uniform(0.5, 100), rng.uniform(0.5, 100)
        target = rng.uniform(0.1, 5)
        a = _ann(x1, y1, x1 + w, y1 + h)
        BboxTransformer(aspect_ratio=target).transform(a)
        assert a.width / a.height == pytest.approx(target, rel=1e-9)
        assert a.width >= w - 1e-9
        assert a.height >= h - 1e-9


def test_noop_leaves_coords():
    ds = Dataset([AnnotatedFile("a.jpg", [_ann(1, 2, 3, 4)])])
    t = BboxTransformer()
    assert t.is_noop
    assert t.apply(ds) == 0
    assert ds[0].annotations[0].coords == (1, 2, 3, 4)


def test_dataset_helper_counts_boxes():
    ds = Dataset([AnnotatedFile("a.jpg", [_ann(0, 0, 2, 1), _ann(0, 0, 1, 2)]), AnnotatedFile("b.jpg")])
    assert ds.transform_bboxes(aspect_ratio=1.0) == 2
    for a in ds[0].annotations:
        assert a.width == pytest.approx(a.height)


@pytest.mark.parametrize("kwargs", [{"scale_x": 0}, {"scale_y": -1}, {"aspect_ratio": -0.5}])
def test_invalid_parameters(kwargs):
    with pytest.raises(ConfigError):
        BboxTransformer(**kwargs)
