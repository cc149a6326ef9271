import pytest
import torch

from pbr_tyler.blending.noise import FractalNoise, apply_height_noise, apply_influence_noise, tile_seeds


@pytest.fixture
def noise():
    return FractalNoise(frequency=1.5, octaves=8, gain=0.5, lacunarity=2.0)


class TestFractalNoise:
    def test_range_and_shape(self, noise):
        field = noise.sample(48, 32, seed=3)

        assert field.shape == (32, 48)
        assert field.min() >= 0.0
        assert field.max() <= 1.0

    def test_same_seed_is_reproducible(self, noise):
        assert torch.equal(noise.sample(32, 32, seed=11), noise.sample(32, 32, seed=11))

    def test_different_seeds_differ(self, noise):
        assert not torch.equal(noise.sample(32, 32, seed=1), noise.sample(32, 32, seed=2))

    def test_noise_is_coherent(self, noise):
        field = noise.sample(64, 64, seed=5)
        step_x = (field[:, 1:] - field[:, :-1]).abs().mean()
        step_y = (field[1:, :] - field[:-1, :]).abs().mean()

        # Uniform white noise would average about 1/3 here.
        assert step_x < 0.1
        assert step_y < 0.1

    def test_not_constant(self, noise):
        field = noise.sample(64, 64, seed=5)
        assert field.std() > 0.01

    @pytest.mark.parametrize(
        "kwargs",
        [{"frequency": 0}, {"octaves": 0}, {"gain": 0}, {"lacunarity": -1.0}],
    )
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ValueError):
            FractalNoise(**kwargs)


class TestInfluenceNoise:
    def test_saturated_pixels_keep_full_influence(self, noise):
        field = torch.ones(16, 16)
        apply_influence_noise(field, noise.sample(16, 16, seed=1), 0.8)
        assert torch.equal(field, torch.ones(16, 16))

    def test_empty_pixels_take_scaled_noise(self):
        field = torch.zeros(4, 4)
        values = torch.linspace(0, 1, 16).reshape(4, 4)

        apply_influence_noise(field, values, 0.5)

        torch.testing.assert_close(field, values * 0.5)

    def test_noise_only_raises_influence_and_stays_in_range(self, noise):
        field = torch.rand(16, 16)
        before = field.clone()

        result = apply_influence_noise(field, noise.sample(16, 16, seed=9), 0.8)

        assert result is field
        assert torch.all(field >= before)
        assert field.min() >= 0.0
        assert field.max() <= 1.0

    def test_strength_is_validated(self):
        with pytest.raises(ValueError):
            apply_influence_noise(torch.zeros(2, 2), torch.zeros(2, 2), 1.5)
        with pytest.raises(ValueError):
            apply_influence_noise(torch.zeros(2, 2), torch.zeros(3, 3), 0.5)


class TestHeightNoise:
    def test_writes_hn_and_keeps_raw_height(self, random_map, noise):
        pbr = random_map(16, 16, seed=4)
        raw = pbr.h.clone()

        apply_height_noise(pbr, noise.sample(16, 16, seed=2), 0.6)

        assert torch.equal(pbr.h, raw)
        assert not torch.equal(pbr.hn, raw)
        assert pbr.hn.min() >= 0.0
        assert pbr.hn.max() <= 1.0


def test_tile_seeds_are_reproducible_and_distinct():
    seeds = tile_seeds(8, 1234)

    assert seeds == tile_seeds(8, 1234)
    assert len(set(seeds)) == 8
    assert seeds != tile_seeds(8, 4321)
