import logging

import numpy as np
import pytest
from PIL import Image

from pbr_tyler.cli import build_parser, config_from_args, main
from pbr_tyler.loader import texture_paths


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _write_atlas(prefix, width=16, height=16):
    rng = np.random.default_rng(0)
    paths = texture_paths(str(prefix))
    for key, count in (("diffuse", 4), ("normal", 3), ("hrm", 3)):
        Image.fromarray(rng.integers(0, 256, size=(height, width, count), dtype=np.uint8)).save(paths[key])


def test_defaults_match_config():
    args = build_parser().parse_args(["-i", "in", "-o", "out"])
    config = config_from_args(args)

    assert config.convention == "2x2"
    assert config.blur is True
    assert config.noise is True
    assert config.seed is None


def test_short_flags():
    args = build_parser().parse_args(
        ["-i", "in", "-o", "out", "-noblur", "-sharpness", "0.5", "-noise", "0.2", "-epsilon", "0.1"]
    )
    config = config_from_args(args)

    assert config.blur is False
    assert config.sharpness == 0.5
    assert config.noise_strength == 0.2
    assert config.epsilon == 0.1


def test_main_writes_tile(tmp_path):
    _write_atlas(tmp_path / "capture")
    out = tmp_path / "result" / "tile"

    code = main(["-i", str(tmp_path / "capture"), "-o", str(out), "--seed", "3", "--log-dir", str(tmp_path / "logs")])

    assert code == 0
    for path in texture_paths(str(out)).values():
        with Image.open(path) as image:
            assert image.size == (8, 8)
    assert len(list((tmp_path / "logs").iterdir())) == 1


def test_main_3x1(tmp_path):
    _write_atlas(tmp_path / "capture", width=24, height=8)
    out = tmp_path / "tile"

    assert main(["-i", str(tmp_path / "capture"), "-o", str(out), "--convention", "3x1", "--seed", "1"]) == 0
    with Image.open(texture_paths(str(out))["diffuse"]) as image:
        assert image.size == (8, 8)
        assert image.mode == "RGBA"


def test_missing_input_fails(tmp_path):
    assert main(["-i", str(tmp_path / "nothing"), "-o", str(tmp_path / "out")]) == 1


def test_too_small_atlas_fails(tmp_path):
    _write_atlas(tmp_path / "capture", width=2, height=2)
    assert main(["-i", str(tmp_path / "capture"), "-o", str(tmp_path / "out"), "--seed", "0"]) == 1


def test_invalid_option_exits(tmp_path):
    with pytest.raises(SystemExit):
        main(["-i", "in", "-o", "out", "-noise", "2.0"])


def test_unwritable_output_fails(tmp_path):
    _write_atlas(tmp_path / "capture")
    (tmp_path / "blocker").write_text("a file, not a directory")
    out = tmp_path / "blocker" / "sub" / "tile"

    assert main(["-i", str(tmp_path / "capture"), "-o", str(out), "--seed", "0"]) == 1
