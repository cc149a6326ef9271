import numpy as np
import pytest
import torch
from PIL import Image

from pbr_tyler.loader import PBRLoadError, PBRSaveError, load_pbr, save_pbr, texture_paths
from pbr_tyler.pbr_map import PBRMap


def _write_set(prefix, width=6, height=4, seed=0, sizes=None):
    prefix.parent.mkdir(parents=True, exist_ok=True)
    rng = np.random.default_rng(seed)
    sizes = sizes or {}
    paths = texture_paths(str(prefix))
    channels = {"diffuse": 4, "normal": 3, "hrm": 3}
    arrays = {}
    for key, count in channels.items():
        w, h = sizes.get(key, (width, height))
        arrays[key] = rng.integers(0, 256, size=(h, w, count), dtype=np.uint8)
        Image.fromarray(arrays[key]).save(paths[key])
    return arrays


def test_load_reads_channels(tmp_path):
    arrays = _write_set(tmp_path / "rock")

    pbr = load_pbr(str(tmp_path / "rock"))

    assert pbr.size == (6, 4)
    torch.testing.assert_close(pbr.d, torch.from_numpy(arrays["diffuse"].astype(np.float32) / 255.0))
    torch.testing.assert_close(pbr.n, torch.from_numpy(arrays["normal"].astype(np.float32) / 255.0) * 2 - 1)
    torch.testing.assert_close(pbr.h, torch.from_numpy(arrays["hrm"][..., 0].astype(np.float32) / 255.0))
    torch.testing.assert_close(pbr.r, torch.from_numpy(arrays["hrm"][..., 1].astype(np.float32) / 255.0))
    torch.testing.assert_close(pbr.m, torch.from_numpy(arrays["hrm"][..., 2].astype(np.float32) / 255.0))
    assert torch.equal(pbr.hn, pbr.h)


def test_save_then_load_keeps_colour_and_hrm(tmp_path):
    _write_set(tmp_path / "in" / "rock", seed=1)
    pbr = load_pbr(str(tmp_path / "in" / "rock"))

    paths = save_pbr(str(tmp_path / "out" / "rock"), pbr)
    reloaded = load_pbr(str(tmp_path / "out" / "rock"))

    assert sorted(paths) == ["diffuse", "hrm", "normal"]
    for name in ("d", "h", "r", "m"):
        torch.testing.assert_close(reloaded.channel(name), pbr.channel(name), atol=1 / 255, rtol=0)


def test_saved_normals_are_unit_length(tmp_path):
    _write_set(tmp_path / "rock", seed=2)
    pbr = load_pbr(str(tmp_path / "rock"))

    save_pbr(str(tmp_path / "out"), pbr)
    reloaded = load_pbr(str(tmp_path / "out"))

    lengths = torch.linalg.vector_norm(reloaded.n, dim=-1)
    # One 8-bit step per component is 2/255 in -1..1.
    torch.testing.assert_close(lengths, torch.ones_like(lengths), atol=0.02, rtol=0)


def test_missing_file_raises(tmp_path):
    _write_set(tmp_path / "rock")
    (tmp_path / "rock_hrm.png").unlink()

    with pytest.raises(PBRLoadError):
        load_pbr(str(tmp_path / "rock"))


def test_undecodable_file_raises(tmp_path):
    _write_set(tmp_path / "rock")
    (tmp_path / "rock_n.png").write_bytes(b"not a png")

    with pytest.raises(PBRLoadError):
        load_pbr(str(tmp_path / "rock"))


def test_mismatched_sizes_raise(tmp_path):
    _write_set(tmp_path / "rock", sizes={"normal": (5, 4)})

    with pytest.raises(PBRLoadError):
        load_pbr(str(tmp_path / "rock"))


def test_oversized_image_raises(tmp_path, monkeypatch):
    _write_set(tmp_path / "rock")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 5)

    with pytest.raises(PBRLoadError):
        load_pbr(str(tmp_path / "rock"))


def test_unwritable_output_directory_raises(tmp_path):
    (tmp_path / "blocker").write_text("a file, not a directory")

    with pytest.raises(PBRSaveError):
        save_pbr(str(tmp_path / "blocker" / "sub" / "tile"), PBRMap.allocate(4, 4))
