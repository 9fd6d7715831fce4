import pytest

from lblpipe.bounding_box import BoundingBox


def test_scaled_keeps_center():
    b = BoundingBox(10, 20, 30, 60)
    s = b.scaled(2.0, 0.5)
    assert s.width == pytest.approx(40)
    assert s.height == pytest.approx(20)
    assert s.center == pytest.approx(b.center)


@pytest.mark.parametrize("box,ratio", [
    (BoundingBox(0, 0, 10, 40), 1.0),
    (BoundingBox(0, 0, 40, 10), 1.0),
    (BoundingBox(5, 5, 25, 15), 0.5),
    (BoundingBox(5, 5, 8, 50), 16 / 9),
])
def test_grown_to_aspect(box, ratio):
    g = box.grown_to_aspect(ratio)
    assert g.width / g.height == pytest.approx(ratio)
    assert g.width >= box.width - 1e-9
    assert g.height >= box.height - 1e-9
    assert g.center == pytest.approx(box.center)


def test_grown_to_aspect_zero_height_grows_vertically():
    g = BoundingBox(0, 10, 20, 10).grown_to_aspect(2.0)
    assert (g.x1, g.x2) == (0, 20)
    assert g.height == pytest.approx(10)


def test_aspect_ratio_zero_height():
    assert BoundingBox(0, 0, 5, 0).aspect_ratio() is None
    assert BoundingBox(0, 0, 6, 3).aspect_ratio() == pytest.approx(2.0)


def test_intersect_pixels():
    assert BoundingBox(-5.4, 2.5, 12.6, 30).intersect_pixels(10, 20) == (0, 3, 10, 20)
    assert BoundingBox(20, 20, 30, 30).intersect_pixels(10, 10) is None
    # touching the border only is empty
    assert BoundingBox(10, 0, 15, 5).intersect_pixels(10, 10) is None
