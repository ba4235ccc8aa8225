import numpy as np
import numpy.testing as npt
import pytest

from ebcmpy.modes import block_size, mode_lookup
from ebcmpy.shapes import Ellipsoid
from ebcmpy.tmatrix import TMatrix, tmatrix_ebcm_simple

OPTIONS = dict(k_medium=2 * np.pi, index_relative=1.3)


@pytest.fixture(scope="module")
def spheroid() -> Ellipsoid:
    return Ellipsoid(0.3, 0.3, 0.42)


@pytest.fixture(scope="module")
def spheroid_nmax10(spheroid: Ellipsoid) -> TMatrix:
    return tmatrix_ebcm_simple(spheroid, nmax=10, **OPTIONS)


def test_orders_do_not_mix(spheroid_nmax10: TMatrix):
    lookup = mode_lookup(spheroid_nmax10.nmax)
    rows, cols = np.nonzero(np.abs(spheroid_nmax10.data) > 1e-14)
    npt.assert_array_equal(lookup[rows, 2], lookup[cols, 2])


def test_opposite_orders_scatter_alike(spheroid_nmax10: TMatrix):
    t = np.abs(spheroid_nmax10.data)
    lookup = mode_lookup(spheroid_nmax10.nmax)
    mirrored = np.array(
        [
            spheroid_nmax10.mode(n, -m, polarization)
            for polarization, n, m in lookup
        ]
    )
    npt.assert_allclose(t[np.ix_(mirrored, mirrored)], t, atol=1e-10)


def test_reciprocity(spheroid_nmax10: TMatrix):
    """Same-polarization blocks are symmetric, cross-polarization blocks antisymmetric."""
    t = spheroid_nmax10.data
    size = block_size(spheroid_nmax10.nmax)
    t11, t12 = t[:size, :size], t[:size, size:]
    t21, t22 = t[size:, :size], t[size:, size:]
    atol = 1e-4 * np.max(np.abs(t))

    assert np.max(np.abs(t12)) > 1e-3 * np.max(np.abs(t))
    npt.assert_allclose(t11, t11.T, atol=atol)
    npt.assert_allclose(t22, t22.T, atol=atol)
    npt.assert_allclose(t12, -t21.T, atol=atol)


def test_lossless_spheroid_conserves_energy(spheroid_nmax10: TMatrix):
    t = spheroid_nmax10.data
    npt.assert_allclose(t + t.conj().T + 2 * t.conj().T @ t, 0, atol=1e-5)


def test_converges_with_nmax(spheroid: Ellipsoid, spheroid_nmax10: TMatrix):
    coarse = tmatrix_ebcm_simple(spheroid, nmax=8, **OPTIONS)

    for n, m in [(1, 0), (1, 1), (2, -1), (3, 2)]:
        for polarization in (1, 2):
            fine_idx = spheroid_nmax10.mode(n, m, polarization)
            coarse_idx = coarse.mode(n, m, polarization)
            npt.assert_allclose(
                coarse.data[coarse_idx, coarse_idx],
                spheroid_nmax10.data[fine_idx, fine_idx],
                atol=1e-6,
            )


def test_spheroid_differs_from_volume_equivalent_sphere(spheroid_nmax10: TMatrix):
    radius = (0.3 * 0.3 * 0.42) ** (1 / 3)
    sphere = tmatrix_ebcm_simple("sphere", [radius], nmax=10, **OPTIONS)
    idx = sphere.mode(2, 1, 1)
    jdx = sphere.mode(4, 1, 1)

    assert abs(sphere.data[idx, jdx]) < 1e-9
    assert abs(spheroid_nmax10.data[idx, jdx]) > 1e-6


@pytest.mark.parametrize("nmax", [1, 2, 3, 4])
def test_dimension(spheroid: Ellipsoid, nmax: int):
    tmatrix = tmatrix_ebcm_simple(spheroid, nmax=nmax, **OPTIONS)
    assert tmatrix.shape == (2 * nmax * (nmax + 2),) * 2
    assert tmatrix.nmax == nmax
