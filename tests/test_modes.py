import numpy as np
import numpy.testing as npt
import pytest

from ebcmpy.modes import (
    block_size,
    combined_index,
    mode_lookup,
    mode_position,
    normalization,
    pair_normalization,
    pair_offsets,
    split_index,
    total_size,
)


@pytest.mark.parametrize("nmax", [1, 2, 5, 12])
def test_sizes(nmax: int):
    assert block_size(nmax) == nmax * (nmax + 2)
    assert total_size(nmax) == 2 * nmax * (nmax + 2)


def test_combined_index_is_dense_and_invertible():
    nmax = 6
    indices = [combined_index(n, m) for n in range(1, nmax + 1) for m in range(-n, n + 1)]

    assert indices == list(range(1, block_size(nmax) + 1))

    n, m = split_index(np.array(indices))
    npt.assert_array_equal(combined_index(n, m), indices)
    assert np.all(np.abs(m) <= n)


def test_mode_position():
    assert mode_position(1, -1, 3) == 0
    assert mode_position(1, 1, 3) == 2
    assert mode_position(2, 0, 3) == 5
    assert mode_position(1, -1, 3, polarization=2) == block_size(3)
    assert mode_position(3, 3, 3, polarization=2) == total_size(3) - 1


@pytest.mark.parametrize(
    ("n", "m", "polarization"), [(0, 0, 1), (4, 0, 1), (2, 3, 1), (1, 0, 3)]
)
def test_mode_position_rejects_invalid_modes(n: int, m: int, polarization: int):
    with pytest.raises(ValueError):
        mode_position(n, m, 3, polarization)


def test_mode_lookup_matches_mode_position():
    nmax = 4
    lookup = mode_lookup(nmax)

    assert lookup.shape == (total_size(nmax), 3)
    for row, (polarization, n, m) in enumerate(lookup):
        assert mode_position(n, m, nmax, polarization) == row


def test_normalization():
    npt.assert_allclose(normalization(3), [1 / np.sqrt(2), 1 / np.sqrt(6), 1 / np.sqrt(12)])
    nm = pair_normalization(3)
    npt.assert_allclose(nm, nm.T)
    npt.assert_allclose(nm[0, 1], 1 / np.sqrt(12))


@pytest.mark.parametrize("nmax", [1, 2, 3, 7])
def test_pair_offsets_partition_the_buffer(nmax: int):
    offsets, length = pair_offsets(nmax)

    assert length == nmax**2 * (nmax + 2) - sum(n * (n + 1) for n in range(1, nmax))
    assert offsets[0] == 0
    assert offsets.dtype == np.int64

    widths = np.diff(np.append(offsets, length))
    for pair, width in enumerate(widths):
        j, k = pair // nmax + 1, pair % nmax + 1
        assert width == 2 * min(j, k) + 1
