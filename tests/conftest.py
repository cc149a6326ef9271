import pytest
import torch

from pbr_tyler.pbr_map import PBRMap, Tile


def _flat_map(width, height, color=(0.0, 0.0, 0.0, 1.0), normal=(0.0, 0.0, 1.0), height_value=0.0,
              roughness=0.0, metalness=0.0):
    return PBRMap(
        d=torch.tensor(color, dtype=torch.float32).expand(height, width, 4).clone(),
        n=torch.tensor(normal, dtype=torch.float32).expand(height, width, 3).clone(),
        h=torch.full((height, width), float(height_value)),
        r=torch.full((height, width), float(roughness)),
        m=torch.full((height, width), float(metalness)),
    )


def _random_map(width, height, seed=0):
    generator = torch.Generator().manual_seed(seed)
    return PBRMap(
        d=torch.rand((height, width, 4), generator=generator),
        n=torch.rand((height, width, 3), generator=generator) * 2 - 1,
        h=torch.rand((height, width), generator=generator),
        r=torch.rand((height, width), generator=generator),
        m=torch.rand((height, width), generator=generator),
    )


def _random_tile(width, height, seed=0):
    generator = torch.Generator().manual_seed(seed + 10_000)
    # Keep influence strictly inside (0, 1) so no pixel is saturated.
    influence = torch.rand((height, width), generator=generator) * 0.98 + 0.01
    return Tile(_random_map(width, height, seed), influence)


@pytest.fixture
def flat_map():
    return _flat_map


@pytest.fixture
def random_map():
    return _random_map


@pytest.fixture
def random_tile():
    return _random_tile


def assert_maps_equal(a: PBRMap, b: PBRMap):
    for name in ("d", "n", "h", "hn", "r", "m"):
        assert torch.equal(a.channel(name), b.channel(name)), f"channel {name} differs"


def assert_maps_close(a: PBRMap, b: PBRMap, **kwargs):
    for name in ("d", "n", "h", "hn", "r", "m"):
        torch.testing.assert_close(a.channel(name), b.channel(name), **kwargs)


@pytest.fixture
def maps_equal():
    return assert_maps_equal


@pytest.fixture
def maps_close():
    return assert_maps_close
