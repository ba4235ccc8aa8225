from numba import jit, prange, complex128, int64

import numpy as np


@jit(nopython=True, parallel=True, nogil=True, cache=True)
def surface_integrals(
    nmax: int,
    mirror_symmetry: bool,
    y: np.ndarray,
    y_theta: np.ndarray,
    y_phi: np.ndarray,
    j_kr: np.ndarray,
    dj_kr: np.ndarray,
    j_kr_medium: np.ndarray,
    dj_kr_medium: np.ndarray,
    h_kr_medium: np.ndarray,
    dh_kr_medium: np.ndarray,
    inv_kr: np.ndarray,
    inv_kr_medium: np.ndarray,
    normal_r: np.ndarray,
    normal_theta: np.ndarray,
    ds: np.ndarray,
    nm: np.ndarray,
    offsets: np.ndarray,
    length: int,
):
    """The function `surface_integrals` integrates the EBCM coupling terms over the particle
    boundary for every degree pair ``(j, k)`` and every shared order ``m``.

    Parameters
    ----------
    nmax : int
        Truncation order.
    mirror_symmetry : bool
        Whether the particle is mirror symmetric about the xy-plane. Terms that vanish
        for such particles are skipped and stay exactly zero.
    y, y_theta, y_phi : np.ndarray
        Scalar spherical harmonics and their derivatives with shape
        `(nmax, points, 2 * nmax + 1)`; order `m` of degree `n` is stored at
        `[n - 1, :, nmax + m]`.
    j_kr, dj_kr : np.ndarray
        Spherical Bessel functions and derivative terms at `k_particle * r`, shape `(nmax, points)`.
    j_kr_medium, dj_kr_medium, h_kr_medium, dh_kr_medium : np.ndarray
        Spherical Bessel/Hankel functions and derivative terms at `k_medium * r`.
    inv_kr, inv_kr_medium : np.ndarray
        `1 / (k_particle * r)` and `1 / (k_medium * r)`.
    normal_r, normal_theta : np.ndarray
        Radial and polar components of the outward unit normal.
    ds : np.ndarray
        Area elements (without the azimuthal `2 pi`).
    nm : np.ndarray
        Pairwise normalization `N(j) N(k)`, shape `(nmax, nmax)`.
    offsets : np.ndarray
        Start offset of each pair `(j - 1) * nmax + (k - 1)` in the output buffers.
    length : int
        Total number of `(j, k, m)` entries.

    Returns
    -------
        `rows` and `cols` (zero-based combined indices `idx(k, m) - 1` and `idx(j, m) - 1`)
    and the array `blocks` of shape `(8, length)` holding
    `J11, J12, J21, J22, RgJ11, RgJ12, RgJ21, RgJ22`.

    """
    rows = np.zeros(length, dtype=int64)
    cols = np.zeros(length, dtype=int64)
    blocks = np.zeros(8 * length, dtype=complex128).reshape((8, length))

    points = ds.shape[0]
    pi2 = 2 * np.pi

    for pair in prange(nmax * nmax):
        jj = pair // nmax + 1
        kk = pair % nmax + 1
        p = min(jj, kk)

        same_parity = (jj % 2) == (kk % 2)
        diagonal = not (mirror_symmetry and same_parity)
        cross = not (mirror_symmetry and not same_parity)

        jn = jj * (jj + 1)
        kn = kk * (kk + 1)
        factor = pi2 * nm[jj - 1, kk - 1]

        for e in range(2 * p + 1):
            m = e - p
            i = offsets[pair] + e
            rows[i] = kn + m - 1
            cols[i] = jn + m - 1
            c = nmax + m

            j11 = 0j
            j12 = 0j
            j21 = 0j
            j22 = 0j
            rg11 = 0j
            rg12 = 0j
            rg21 = 0j
            rg22 = 0j

            for s in range(points):
                yj = y[jj - 1, s, c]
                ytj = y_theta[jj - 1, s, c]
                ypj = y_phi[jj - 1, s, c]
                yk = y[kk - 1, s, c]
                ytk = y_theta[kk - 1, s, c]
                ypk = y_phi[kk - 1, s, c]

                # conj(y_phi) = -y_phi, conj(y_theta) = y_theta at phi = 0; a shared phi
                # only adds one phase per order, which cancels in T
                yt_yp = -ytj * ypk
                yp_yt = ypj * ytk
                y_yt = yj * ytk
                yt_y = ytj * yk
                y_yp = -yj * ypk
                yp_y = ypj * yk
                yp_yp = -ypj * ypk
                yt_yt = ytj * ytk

                jh = j_kr[jj - 1, s] * h_kr_medium[kk - 1, s]
                jj_ = j_kr[jj - 1, s] * j_kr_medium[kk - 1, s]
                jdh = j_kr[jj - 1, s] * dh_kr_medium[kk - 1, s]
                djh = dj_kr[jj - 1, s] * h_kr_medium[kk - 1, s]
                jdj = j_kr[jj - 1, s] * dj_kr_medium[kk - 1, s]
                djj = dj_kr[jj - 1, s] * j_kr_medium[kk - 1, s]
                djdh = dj_kr[jj - 1, s] * dh_kr_medium[kk - 1, s]
                djdj = dj_kr[jj - 1, s] * dj_kr_medium[kk - 1, s]

                w = ds[s]
                nr = normal_r[s]
                nt = normal_theta[s]
                ikr = inv_kr[s]
                ikr_ = inv_kr_medium[s]

                if diagonal:
                    j11 += w * nr * jh * (yt_yp - yp_yt)
                    j22 += w * (
                        nr * djdh * (yt_yp - yp_yt)
                        - nt * (jn * ikr * jdh * y_yp - kn * ikr_ * djh * yp_y)
                    )
                    rg11 += w * nr * jj_ * (yt_yp - yp_yt)
                    rg22 += w * (
                        nr * djdj * (yt_yp - yp_yt)
                        - nt * (jn * ikr * jdj * y_yp - kn * ikr_ * djj * yp_y)
                    )

                if cross:
                    j12 += w * (nr * jdh * (yp_yp + yt_yt) - kn * ikr_ * nt * jh * yt_y)
                    j21 += w * (-nr * djh * (yt_yt + yp_yp) + jn * ikr * nt * jh * y_yt)
                    rg12 += w * (
                        nr * jdj * (yp_yp + yt_yt) - kn * ikr_ * nt * jj_ * yt_y
                    )
                    rg21 += w * (
                        -nr * djj * (yt_yt + yp_yp) + jn * ikr * nt * jj_ * y_yt
                    )

            mfac = factor
            if abs(m) % 2 == 1:
                mfac = -factor

            if diagonal:
                blocks[0, i] = mfac * j11
                blocks[3, i] = mfac * j22
                blocks[4, i] = mfac * rg11
                blocks[7, i] = mfac * rg22
            if cross:
                blocks[1, i] = mfac * j12
                blocks[2, i] = mfac * j21
                blocks[5, i] = mfac * rg12
                blocks[6, i] = mfac * rg21

    return rows, cols, blocks
