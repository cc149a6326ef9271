import pytest
import torch

from pbr_tyler.blending.gaussian import blur_map, gaussian_kernel, gaussian_weight


def test_kernel_is_normalized_and_symmetric():
    kernel = gaussian_kernel()

    assert kernel.shape == (5, 5)
    assert kernel.sum().item() == pytest.approx(1.0, abs=1e-6)
    torch.testing.assert_close(kernel, kernel.T)
    torch.testing.assert_close(kernel, kernel.flip(0))
    assert kernel[2, 2] == kernel.max()


def test_gaussian_weight_is_clamped():
    assert 0.0 <= gaussian_weight(0, 0, 0.1) <= 1.0
    assert gaussian_weight(0, 0, 0.83) > gaussian_weight(1, 0, 0.83) > gaussian_weight(2, 2, 0.83)


def test_constant_field_is_preserved():
    field = torch.full((12, 9), 0.7)
    torch.testing.assert_close(blur_map(field), field)


def test_input_is_not_modified():
    field = torch.rand(8, 8)
    before = field.clone()
    out = blur_map(field)

    assert torch.equal(field, before)
    assert out.data_ptr() != field.data_ptr()


def test_sampling_wraps_around_both_axes():
    field = torch.zeros(8, 8)
    field[0, 0] = 1.0
    out = blur_map(field)

    assert out[-1, -1] > 0
    assert out[0, -2] > 0
    torch.testing.assert_close(out[-1, -1], out[1, 1])
    torch.testing.assert_close(out[0, -2], out[0, 2])
    assert out[4, 4] == 0


def test_total_weight_is_conserved():
    field = torch.rand(10, 14)
    assert blur_map(field).sum().item() == pytest.approx(field.sum().item(), rel=1e-5)


def test_rejects_non_2d_input():
    with pytest.raises(ValueError):
        blur_map(torch.zeros(2, 4, 4))
