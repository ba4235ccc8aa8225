import miepython as mie
import numpy as np
import numpy.testing as npt
import pytest

from ebcmpy.shapes import Sphere
from ebcmpy.tmatrix import TMatrix, tmatrix_ebcm, tmatrix_ebcm_simple, tmatrix_mie

K_MEDIUM = 2 * np.pi


def _efficiencies(tmatrix: TMatrix, x: float) -> tuple[float, float]:
    """Extinction and scattering efficiencies of a sphere from its T-matrix."""
    qext = 0.0
    qsca = 0.0
    for n in range(1, tmatrix.nmax + 1):
        t1 = tmatrix.data[tmatrix.mode(n, 0, 1), tmatrix.mode(n, 0, 1)]
        t2 = tmatrix.data[tmatrix.mode(n, 0, 2), tmatrix.mode(n, 0, 2)]
        qext -= (2 * n + 1) * np.real(t1 + t2)
        qsca += (2 * n + 1) * (np.abs(t1) ** 2 + np.abs(t2) ** 2)
    return 2 / x**2 * qext, 2 / x**2 * qsca


@pytest.fixture(scope="module")
def sphere_nmax6() -> TMatrix:
    return tmatrix_ebcm_simple(
        "sphere", [1.0], nmax=6, k_medium=K_MEDIUM, index_relative=1.2
    )


@pytest.mark.smoke
def test_smoke_sphere_matches_mie(sphere_nmax6: TMatrix):
    """Fast end-to-end check of the EBCM pipeline against the analytic sphere."""
    reference = tmatrix_mie(1.0, nmax=6, k_medium=K_MEDIUM, index_relative=1.2)

    assert sphere_nmax6.shape == (96, 96)
    assert sphere_nmax6.type == "scattered"
    for polarization in (1, 2):
        idx = sphere_nmax6.mode(1, 0, polarization)
        npt.assert_allclose(
            sphere_nmax6.data[idx, idx], reference.data[idx, idx], atol=1e-6
        )


def test_sphere_matches_mie_everywhere(sphere_nmax6: TMatrix):
    reference = tmatrix_mie(1.0, nmax=6, k_medium=K_MEDIUM, index_relative=1.2)
    npt.assert_allclose(sphere_nmax6.data, reference.data, atol=1e-9)


def test_sphere_is_diagonal(sphere_nmax6: TMatrix):
    off_diagonal = sphere_nmax6.data - np.diag(np.diag(sphere_nmax6.data))
    assert np.max(np.abs(off_diagonal)) < 1e-9


def test_mirror_symmetry_does_not_change_the_result(sphere_nmax6: TMatrix):
    rtp, normals, ds = Sphere(1.0).boundarypoints(6)
    full = tmatrix_ebcm(
        rtp, normals, ds, nmax=6, k_medium=K_MEDIUM, index_relative=1.2
    )
    npt.assert_allclose(full.data, sphere_nmax6.data, atol=1e-10)


def test_shared_azimuth_does_not_change_the_result():
    rtp, normals, ds = Sphere(0.5).boundarypoints(4)
    options = dict(nmax=4, k_medium=K_MEDIUM, index_relative=1.4)

    meridian = tmatrix_ebcm(rtp, normals, ds, **options)
    rtp = rtp.copy()
    rtp[:, 2] = 0.7
    rotated = tmatrix_ebcm(rtp, normals, ds, **options)

    npt.assert_allclose(rotated.data, meridian.data, atol=1e-12)


def test_sparse_and_dense_solver_agree():
    options = dict(nmax=5, k_medium=K_MEDIUM, index_relative=1.3)
    dense = tmatrix_ebcm_simple("sphere", [0.6], solver="dense", **options)
    sparse = tmatrix_ebcm_simple("sphere", [0.6], solver="sparse", **options)
    npt.assert_allclose(sparse.data, dense.data, rtol=1e-10, atol=1e-12)


@pytest.mark.parametrize(
    ("m_sphere", "wavelength", "radius"),
    [
        (1.5, 1.0, 0.10),
        (1.33, 1.0, 0.35),
        (1.5, 1.0, 0.50),
    ],
)
def test_sphere_matches_miepython_efficiencies(
    m_sphere: float, wavelength: float, radius: float
):
    x = 2 * np.pi * radius / wavelength
    tmatrix = tmatrix_ebcm_simple(
        "sphere",
        [radius],
        nmax=10,
        wavelength_medium=wavelength,
        index_relative=m_sphere,
    )

    qext, qsca = _efficiencies(tmatrix, x)
    qext_mie, qsca_mie, _, _ = mie.efficiencies_mx(m_sphere, x)

    npt.assert_allclose(qext, qext_mie, rtol=1e-6)
    npt.assert_allclose(qsca, qsca_mie, rtol=1e-6)


def test_lossless_sphere_conserves_energy():
    tmatrix = tmatrix_mie(0.8, nmax=8, k_medium=K_MEDIUM, index_relative=1.5)
    t = tmatrix.data
    npt.assert_allclose(t + t.conj().T + 2 * t.conj().T @ t, 0, atol=1e-10)


def test_index_matched_sphere_does_not_scatter():
    scattered = tmatrix_mie(1.0, nmax=5, k_medium=K_MEDIUM, index_relative=1.0)
    internal = tmatrix_mie(
        1.0, nmax=5, k_medium=K_MEDIUM, index_relative=1.0, internal=True
    )

    npt.assert_allclose(scattered.data, 0, atol=1e-12)
    assert internal.type == "internal"
    npt.assert_allclose(internal.data, np.eye(internal.shape[0]), atol=1e-12)


def test_mie_size_heuristic():
    tmatrix = tmatrix_mie(1.0, k_medium=K_MEDIUM, index_relative=1.2)
    # ceil(2 pi + 3 (2 pi)^(1/3))
    assert tmatrix.nmax == 12
