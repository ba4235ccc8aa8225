"""Surface-integral assembly for the extended boundary condition method.

This module evaluates the special-function tables on the particle boundary and
integrates the EBCM coupling terms for every pair of multipole degrees
``(j, k)`` and every shared order ``m = -min(j, k) .. min(j, k)``. Orders do
not mix for an axisymmetric particle, only degrees.

For each triple four irregular couplings ``J11, J12, J21, J22`` (spherical
Hankel functions outside) and their regular counterparts ``RgJ11 .. RgJ22``
(spherical Bessel functions outside) are produced. With mirror symmetry about
the xy-plane, ``J11``/``J22`` vanish for degree pairs of equal parity and
``J12``/``J21`` for pairs of different parity; those entries are not computed
and stay exactly zero.

The formulation follows the null-field method of Waterman (1971)
for axisymmetric scatterers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import time

import numpy as np

from ebcmpy.functions.cpu_numba import surface_integrals
from ebcmpy.functions.special import (
    spherical_bessel,
    spherical_hankel,
    spherical_harmonics,
)
from ebcmpy.modes import pair_normalization, pair_offsets

log = logging.getLogger(__name__)

BLOCK_NAMES = ("J11", "J12", "J21", "J22", "RgJ11", "RgJ12", "RgJ21", "RgJ22")


@dataclass(frozen=True)
class CouplingBlocks:
    """Coupling values per ``(j, k, m)`` triple in coordinate form.

    Attributes
    ----------
    nmax:
        Truncation order.
    rows:
        Zero-based combined index ``idx(k, m) - 1`` (response degree ``k``).
    cols:
        Zero-based combined index ``idx(j, m) - 1`` (source degree ``j``).
    values:
        Array of shape ``(8, len(rows))`` ordered as :data:`BLOCK_NAMES`.
    """

    nmax: int
    rows: np.ndarray
    cols: np.ndarray
    values: np.ndarray

    def __getitem__(self, name: str) -> np.ndarray:
        return self.values[BLOCK_NAMES.index(name)]

    @property
    def irregular(self) -> tuple[np.ndarray, ...]:
        """``(J11, J12, J21, J22)``."""
        return tuple(self.values[:4])

    @property
    def regular(self) -> tuple[np.ndarray, ...]:
        """``(RgJ11, RgJ12, RgJ21, RgJ22)``."""
        return tuple(self.values[4:])


@dataclass(frozen=True)
class SpecialFunctionTables:
    """Per-degree special-function arena sampled on the boundary.

    Angular tables have shape ``(nmax, points, 2 * nmax + 1)`` with order ``m``
    in column ``nmax + m``; radial tables have shape ``(nmax, points)``.
    """

    y: np.ndarray
    y_theta: np.ndarray
    y_phi: np.ndarray
    j_kr: np.ndarray
    dj_kr: np.ndarray
    j_kr_medium: np.ndarray
    dj_kr_medium: np.ndarray
    h_kr_medium: np.ndarray
    dh_kr_medium: np.ndarray
    inv_kr: np.ndarray
    inv_kr_medium: np.ndarray


def compute_special_function_tables(
    nmax: int,
    rtp: np.ndarray,
    k_medium: complex,
    k_particle: complex,
) -> SpecialFunctionTables:
    """Evaluate harmonics and radial functions for all degrees ``1..nmax``.

    Parameters
    ----------
    nmax:
        Truncation order.
    rtp:
        Boundary samples ``(r, theta, phi)`` with shape ``(points, 3)``.
    k_medium, k_particle:
        Wavenumbers outside and inside the particle.

    Returns
    -------
    SpecialFunctionTables
        The arena consumed by :func:`ebcmpy.functions.cpu_numba.surface_integrals`.
    """

    points = rtp.shape[0]
    width = 2 * nmax + 1

    y = np.zeros((nmax, points, width), dtype=complex)
    y_theta = np.zeros_like(y)
    y_phi = np.zeros_like(y)

    kr = k_particle * rtp[:, 0].astype(complex)
    kr_medium = k_medium * rtp[:, 0].astype(complex)

    j_kr = np.zeros((nmax, points), dtype=complex)
    dj_kr = np.zeros_like(j_kr)
    j_kr_medium = np.zeros_like(j_kr)
    dj_kr_medium = np.zeros_like(j_kr)
    h_kr_medium = np.zeros_like(j_kr)
    dh_kr_medium = np.zeros_like(j_kr)

    for n in range(1, nmax + 1):
        columns = slice(nmax - n, nmax + n + 1)
        (
            y[n - 1, :, columns],
            y_theta[n - 1, :, columns],
            y_phi[n - 1, :, columns],
        ) = spherical_harmonics(n, rtp[:, 1], rtp[:, 2])

        j_kr[n - 1], dj_kr[n - 1] = spherical_bessel(n, kr)
        j_kr_medium[n - 1], dj_kr_medium[n - 1] = spherical_bessel(n, kr_medium)
        h_kr_medium[n - 1], dh_kr_medium[n - 1] = spherical_hankel(n, kr_medium)

    return SpecialFunctionTables(
        y=y,
        y_theta=y_theta,
        y_phi=y_phi,
        j_kr=j_kr,
        dj_kr=dj_kr,
        j_kr_medium=j_kr_medium,
        dj_kr_medium=dj_kr_medium,
        h_kr_medium=h_kr_medium,
        dh_kr_medium=dh_kr_medium,
        inv_kr=1 / kr,
        inv_kr_medium=1 / kr_medium,
    )


def compute_coupling_blocks(
    nmax: int,
    rtp: np.ndarray,
    normals: np.ndarray,
    ds: np.ndarray,
    k_medium: complex,
    k_particle: complex,
    z_mirror_symmetry: bool = False,
) -> CouplingBlocks:
    """Integrate the EBCM coupling terms over the boundary samples.

    Parameters
    ----------
    nmax:
        Truncation order.
    rtp:
        Boundary samples ``(r, theta, phi)``, shape ``(points, 3)``.
    normals:
        Outward unit normals ``(n_r, n_theta)``, shape ``(points, 2)``.
        Additional columns (``n_phi``) are ignored.
    ds:
        Area elements, shape ``(points,)``.
    k_medium, k_particle:
        Wavenumbers outside and inside the particle.
    z_mirror_symmetry:
        Skip the terms that vanish for particles mirror symmetric about the
        xy-plane.

    Returns
    -------
    CouplingBlocks
        The coupling values in coordinate form.

    Notes
    -----
    The degree pairs are integrated in parallel by a Numba kernel. Each pair
    writes to its own slice of the output buffers; the slice offsets are
    computed up front by :func:`ebcmpy.modes.pair_offsets`.
    """

    start = time()
    tables = compute_special_function_tables(nmax, rtp, k_medium, k_particle)
    log.info("Computing special-function tables took %f s" % (time() - start))

    offsets, length = pair_offsets(nmax)
    log.debug(
        "Integrating %d coupling entries over %d boundary points"
        % (length, rtp.shape[0])
    )

    start = time()
    rows, cols, values = surface_integrals(
        nmax,
        bool(z_mirror_symmetry),
        np.ascontiguousarray(tables.y),
        np.ascontiguousarray(tables.y_theta),
        np.ascontiguousarray(tables.y_phi),
        np.ascontiguousarray(tables.j_kr),
        np.ascontiguousarray(tables.dj_kr),
        np.ascontiguousarray(tables.j_kr_medium),
        np.ascontiguousarray(tables.dj_kr_medium),
        np.ascontiguousarray(tables.h_kr_medium),
        np.ascontiguousarray(tables.dh_kr_medium),
        np.ascontiguousarray(tables.inv_kr),
        np.ascontiguousarray(tables.inv_kr_medium),
        np.ascontiguousarray(normals[:, 0], dtype=float),
        np.ascontiguousarray(normals[:, 1], dtype=float),
        np.ascontiguousarray(ds, dtype=float),
        np.ascontiguousarray(pair_normalization(nmax)),
        offsets,
        length,
    )
    log.info("Integrating coupling blocks took %f s" % (time() - start))

    return CouplingBlocks(nmax=nmax, rows=rows, cols=cols, values=values)
