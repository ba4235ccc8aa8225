"""Special functions evaluated on the particle boundary.

Scalar spherical harmonics and their angular derivatives are built from
:func:`scipy.special.lpmv` with an explicit normalization. Spherical Bessel and Hankel
functions come from :func:`scipy.special.spherical_jn` and
:func:`scipy.special.spherical_yn`, which accept complex arguments and are
stable for small arguments.
"""

from __future__ import annotations

import numpy as np
from scipy.special import lpmv, spherical_jn, spherical_yn


def normalized_legendre(n: int, m: int, cosine_theta: np.ndarray) -> np.ndarray:
    """Orthonormal associated Legendre function ``c_n^m P_n^m(cos(theta))``.

    The Condon-Shortley phase of :func:`scipy.special.lpmv` is kept, so that
    ``Y_n^m = c_n^m P_n^m(cos(theta)) exp(i m phi)`` satisfies
    ``Y_n^{-m} = (-1)^m conj(Y_n^m)``.

    Args:
        n (int): Degree.
        m (int): Order. Orders with ``|m| > n`` evaluate to zero.
        cosine_theta (np.ndarray): Cosine of the polar angle.

    Returns:
        (np.ndarray): The normalized Legendre values, same shape as ``cosine_theta``.
    """
    absm = abs(m)
    if n < 0 or absm > n:
        return np.zeros_like(cosine_theta, dtype=float)
    cml = np.sqrt(
        (2 * n + 1) / (4 * np.pi) * np.prod(1 / np.arange(n - absm + 1, n + absm + 1))
    )
    p = cml * lpmv(absm, n, cosine_theta)
    if m < 0:
        p = np.power(-1.0, absm) * p
    return p


def scalar_harmonic(
    n: int, m: int, theta: np.ndarray, phi: np.ndarray
) -> np.ndarray:
    """Orthonormal scalar spherical harmonic ``Y_n^m(theta, phi)``."""
    return normalized_legendre(n, m, np.cos(theta)) * np.exp(1j * m * phi)


def spherical_harmonics(n: int, theta: np.ndarray, phi: np.ndarray):
    """Scalar spherical harmonics of degree ``n`` and their angular derivatives.

    Parameters
    ----------
    n:
        Multipole degree, ``n >= 1``.
    theta, phi:
        Polar and azimuthal angles of the boundary samples (1D, same length).

    Returns
    -------
    y, y_theta, y_phi:
        Complex arrays of shape ``(len(theta), 2 n + 1)``; column ``n + m``
        holds order ``m``. ``y_theta`` is ``dY/dtheta`` and ``y_phi`` is
        ``(1 / sin(theta)) dY/dphi``.

    Notes
    -----
    Both derivatives use ladder recurrences in the neighbouring orders instead
    of a division by ``sin(theta)``, so they stay finite on the axis:

    .. math::

        \\partial_\\theta Y_n^m = \\tfrac12 \\left[\\sqrt{(n-m)(n+m+1)}\\, e^{-i\\phi} Y_n^{m+1}
            - \\sqrt{(n+m)(n-m+1)}\\, e^{i\\phi} Y_n^{m-1}\\right]

        \\frac{i m}{\\sin\\theta} Y_n^m = -\\tfrac{i}{2}\\sqrt{\\tfrac{2n+1}{2n+3}}
            \\left[\\sqrt{(n+m+1)(n+m+2)}\\, e^{-i\\phi} Y_{n+1}^{m+1}
            + \\sqrt{(n-m+1)(n-m+2)}\\, e^{i\\phi} Y_{n+1}^{m-1}\\right]
    """
    theta = np.asarray(theta, dtype=float).ravel()
    phi = np.asarray(phi, dtype=float).ravel()
    if theta.shape != phi.shape:
        raise ValueError(
            f"theta ({theta.shape}) and phi ({phi.shape}) need to have the same shape"
        )

    orders = np.arange(-n, n + 1)
    y = np.zeros((theta.size, orders.size), dtype=complex)
    y_theta = np.zeros_like(y)
    y_phi = np.zeros_like(y)

    expplus = np.exp(1j * phi)
    expminus = np.exp(-1j * phi)
    prefactor = np.sqrt((2 * n + 1) / (2 * n + 3))

    for col, m in enumerate(orders):
        y[:, col] = scalar_harmonic(n, m, theta, phi)
        y_theta[:, col] = 0.5 * (
            np.sqrt((n - m) * (n + m + 1))
            * expminus
            * scalar_harmonic(n, m + 1, theta, phi)
            - np.sqrt((n + m) * (n - m + 1))
            * expplus
            * scalar_harmonic(n, m - 1, theta, phi)
        )
        y_phi[:, col] = (
            -0.5j
            * prefactor
            * (
                np.sqrt((n + m + 1) * (n + m + 2))
                * expminus
                * scalar_harmonic(n + 1, m + 1, theta, phi)
                + np.sqrt((n - m + 1) * (n - m + 2))
                * expplus
                * scalar_harmonic(n + 1, m - 1, theta, phi)
            )
        )

    return y, y_theta, y_phi


def spherical_bessel(n: int, x: np.ndarray):
    """Spherical Bessel function ``j_n(x)`` and its radial derivative term.

    The derivative term is ``j_{n-1}(x) - n j_n(x) / x``, i.e.
    ``(1/x) d[x j_n(x)]/dx``.
    """
    x = np.asarray(x)
    jn = spherical_jn(n, x)
    djn = spherical_jn(n - 1, x) - n * jn / x
    return jn, djn


def spherical_hankel(n: int, x: np.ndarray):
    """Spherical Hankel function ``h_n^(1)(x) = j_n(x) + i y_n(x)`` and its derivative term.

    The derivative term is ``h_{n-1}(x) - n h_n(x) / x``, matching
    :func:`spherical_bessel`.
    """
    x = np.asarray(x)
    hn = spherical_jn(n, x) + 1j * spherical_yn(n, x)
    hn_lower = spherical_jn(n - 1, x) + 1j * spherical_yn(n - 1, x)
    dhn = hn_lower - n * hn / x
    return hn, dhn
