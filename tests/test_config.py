from pathlib import Path

import pytest
import yaml

from lblpipe.config import PipelineConfig
from lblpipe.errors import ConfigError, InvalidSplit, MalformedRule, UnsupportedEncoding, UnsupportedFilter


def test_defaults():
    cfg = PipelineConfig().validate()
    assert cfg.bbox_scale_x == 1.0 and cfg.bbox_aspect_ratio == 0.0
    assert cfg.jpeg_quality == 90
    assert cfg.split == [100]
    assert not cfg.processes_images
    assert cfg.bbox_transformer().is_noop
    assert not cfg.label_mapper()


def test_load_yaml(tmp_path):
    data = {
        "label_mappings": "car=vehicle,bus=vehicle",
        "filter_labels": ["vehicle", "person"],
        "filter_required_attrs": "Text",
        "min_confidence": 0.25,
        "require_label": True,
        "image_out_dir": "out/images",
        "resize_longer": 512,
        "downsample_filter": "lanczos",
        "image_encoding": "png",
        "crop_objects": True,
        "split": "70,20,10",
        "seed": 42,
    }
    p = tmp_path / "pipeline.yaml"
    p.write_text(yaml.safe_dump(data))

    cfg = PipelineConfig.load(p).validate()
    assert cfg.label_mappings == ["car=vehicle", "bus=vehicle"]
    assert cfg.filter_labels == ["vehicle", "person"]
    assert cfg.filter_required_attrs == ["Text"]
    assert cfg.image_out_dir == (tmp_path / "out" / "images").resolve()
    assert cfg.split == [70, 20, 10]
    assert cfg.raw["resize_longer"] == 512

    fc = cfg.filter_config()
    assert fc.min_confidence == 0.25 and fc.require_label
    ic = cfg.image_config()
    assert ic.longer_side == 512 and ic.encoding == "png" and ic.crop_objects
    assert ic.output_dir == cfg.image_out_dir
    sp = cfg.splitter()
    assert sp.boundaries == [70, 90, 100] and sp.seed == 42


def test_load_rejects_non_mapping(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError):
        PipelineConfig.load(p)


def test_empty_yaml_gives_defaults(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert PipelineConfig.load(p).split == [100]


@pytest.mark.parametrize("overrides,exc", [
    ({"label_mappings": ["oops"]}, MalformedRule),
    ({"bbox_scale_x": 0.0}, ConfigError),
    ({"bbox_aspect_ratio": -1.0}, ConfigError),
    ({"min_confidence": 1.0}, ConfigError),
    ({"min_confidence": -0.1}, ConfigError),
    ({"crop_objects": True}, ConfigError),
    ({"resize_longer": -5}, ConfigError),
    ({"upsample_filter": "bicubic"}, UnsupportedFilter),
    ({"image_encoding": "tiff"}, UnsupportedEncoding),
    ({"split": [50, 40]}, InvalidSplit),
])
def test_validate_errors(overrides, exc):
    with pytest.raises(exc):
        PipelineConfig(**overrides).validate()


def test_invalid_jpeg_quality_is_reset(caplog):
    cfg = PipelineConfig(jpeg_quality=0).validate()
    assert cfg.jpeg_quality == 92
    assert "JPEG quality" in caplog.text


def test_output_dir_expanded(tmp_path):
    cfg = PipelineConfig.from_dict({"image_out_dir": str(tmp_path / "x"), "resize_shorter": 10})
    assert cfg.image_out_dir == Path(tmp_path / "x").resolve()
    assert cfg.processes_images
