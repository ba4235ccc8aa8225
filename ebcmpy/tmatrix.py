"""T-matrix value type and its construction strategies.

A :class:`TMatrix` is an immutable complex matrix of dimension
``2 nmax (nmax + 2)`` in the mode layout of :mod:`ebcmpy.modes`, tagged with
its kind (``"scattered"`` or ``"internal"``). It is produced by

- :func:`tmatrix_ebcm`: extended boundary condition method from explicit
  boundary samples of an axisymmetric star-shaped particle,
- :func:`tmatrix_ebcm_simple`: the same for a named shape,
- :func:`tmatrix_mie`: the analytic (Mie) result for a homogeneous sphere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy.sparse import csr_matrix
from scipy.special import spherical_jn, spherical_yn

from ebcmpy.config import Config
from ebcmpy.errors import ConfigurationError, UnsupportedGeometryError
from ebcmpy.global_matrix import build_global_matrices
from ebcmpy.modes import block_size, mode_position
from ebcmpy.parameters import Parameters
from ebcmpy.shapes import StarShape, simple_shape
from ebcmpy.solver import Solver
from ebcmpy.surface_integrals import compute_coupling_blocks

log = logging.getLogger(__name__)

TMATRIX_TYPES = ("scattered", "internal")


@dataclass(frozen=True)
class TMatrix:
    """Immutable T-matrix.

    Attributes
    ----------
    data:
        Complex square matrix of dimension ``2 nmax (nmax + 2)``; read-only.
    type:
        ``"scattered"`` maps incident to scattered-field coefficients,
        ``"internal"`` maps incident to internal-field coefficients.
    k_medium, k_particle:
        Wavenumbers the matrix has been computed for.
    """

    data: np.ndarray
    type: str = "scattered"
    k_medium: complex | None = None
    k_particle: complex | None = None

    def __post_init__(self):
        if self.type not in TMATRIX_TYPES:
            raise ValueError(
                f"T-matrix type needs to be one of {TMATRIX_TYPES}, got {self.type!r}"
            )
        data = np.array(self.data, dtype=complex)
        if data.ndim != 2 or data.shape[0] != data.shape[1]:
            raise ValueError(f"T-matrix needs to be square, got shape {data.shape}")
        nmax = int(round(np.sqrt(1 + data.shape[0] / 2) - 1))
        if nmax < 1 or 2 * nmax * (nmax + 2) != data.shape[0]:
            raise ValueError(
                f"Dimension {data.shape[0]} is not of the form 2 * nmax * (nmax + 2)"
            )
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    @property
    def nmax(self) -> int:
        return int(round(np.sqrt(1 + self.data.shape[0] / 2) - 1))

    @property
    def shape(self) -> tuple[int, int]:
        return self.data.shape

    def mode(self, n: int, m: int, polarization: int = 1) -> int:
        """Row/column of the mode ``(n, m)`` in the given polarization block."""
        return mode_position(n, m, self.nmax, polarization)

    def to_sparse(self) -> csr_matrix:
        return csr_matrix(self.data)


def _config(config: Config | None, options: dict[str, Any]) -> Config:
    if config is None:
        return Config.create(**options)
    if not options:
        return config
    return Config.create(**{**config.model_dump(exclude_unset=True), **options})


def _check_boundary(rtp: np.ndarray, normals: np.ndarray, ds: np.ndarray):
    if rtp.ndim != 2 or rtp.shape[1] != 3:
        raise ValueError(f"rtp needs to have shape (points, 3), got {rtp.shape}")
    points = rtp.shape[0]
    if points == 0:
        raise ValueError("At least one boundary point is required")
    if normals.ndim != 2 or normals.shape[0] != points or normals.shape[1] < 2:
        raise ValueError(
            f"normals needs to have shape ({points}, 2) or ({points}, 3), got {normals.shape}"
        )
    if ds.shape != (points,):
        raise ValueError(f"ds needs to have shape ({points},), got {ds.shape}")
    if np.any(rtp[:, 0] <= 0):
        raise ValueError("Boundary radii need to be positive")
    if np.any(ds <= 0):
        raise ValueError("Area elements need to be positive")
    if not np.allclose(rtp[:, 2], rtp[0, 2], rtol=0, atol=1e-12):
        raise UnsupportedGeometryError(
            "All boundary points need to share one azimuthal angle (axisymmetric particle)"
        )


def tmatrix_ebcm(
    rtp: np.ndarray,
    normals: np.ndarray,
    ds: np.ndarray,
    config: Config | None = None,
    **options: Any,
) -> TMatrix:
    """Calculate a T-matrix with the extended boundary condition method.

    Parameters
    ----------
    rtp:
        Boundary points ``(r, theta, phi)``, shape ``(points, 3)``. ``theta`` is
        the polar angle from the +z axis, ``phi`` the azimuthal angle from +x
        towards +y. All points need to share one ``phi``.
    normals:
        Outward unit normals ``(n_r, n_theta[, n_phi])`` at the points.
    ds:
        Area elements at the points.
    config:
        Options, see :class:`ebcmpy.config.Config`. Keyword ``options`` are
        merged on top of it (e.g. ``nmax=6, k_medium=2 * np.pi``).

    Returns
    -------
    TMatrix
        The scattered-type T-matrix of dimension ``2 nmax (nmax + 2)``.

    Raises
    ------
    ConfigurationError
        If the wavenumbers or the truncation order cannot be resolved.
    UnsupportedGeometryError
        If the points do not share one azimuthal angle or anything but full
        axisymmetry is requested.
    NumericalSingularityError
        If ``Q`` cannot be inverted.
    """
    config = _config(config, options)
    rtp = np.asarray(rtp, dtype=float)
    normals = np.asarray(normals, dtype=float)
    ds = np.asarray(ds, dtype=float).ravel()
    _check_boundary(rtp, normals, ds)

    parameters = Parameters(config, max_radius=float(np.max(rtp[:, 0])))
    log.info(
        f"Computing EBCM T-matrix with nmax = {parameters.nmax} from {rtp.shape[0]} boundary points"
    )

    blocks = compute_coupling_blocks(
        parameters.nmax,
        rtp,
        normals,
        ds,
        parameters.k_medium,
        parameters.k_particle,
        z_mirror_symmetry=parameters.z_mirror_symmetry,
    )
    matrices = build_global_matrices(
        blocks, parameters.k_medium, parameters.k_particle
    )
    data = Solver(config.solver).run(matrices)

    return TMatrix(
        data=data,
        type="scattered",
        k_medium=parameters.k_medium,
        k_particle=parameters.k_particle,
    )


def tmatrix_ebcm_simple(
    shape: str | StarShape,
    parameters=None,
    config: Config | None = None,
    **options: Any,
) -> TMatrix:
    """Calculate an EBCM T-matrix for a simple shape.

    Args:
        shape (str | StarShape): A shape object, or a shape name (see
            :func:`ebcmpy.shapes.simple_shape`) together with ``parameters``.
        parameters (list[float], optional): Numeric shape parameters.
        config (Config, optional): Options; keyword ``options`` are merged on top.
            ``nmax`` defaults to ``ka2nmax(max_radius * k_medium)``.

    Returns:
        (TMatrix): The scattered-type T-matrix.

    The truncation order is resolved first, the boundary is sampled for it,
    and the rotational and mirror symmetry detected on the shape are passed on
    to :func:`tmatrix_ebcm`.
    """
    if isinstance(shape, str) and parameters is not None:
        shape = simple_shape(shape, parameters)
    elif not isinstance(shape, StarShape) or parameters is not None:
        raise ConfigurationError(
            "Either provide a shape object, or a shape name and its parameters"
        )

    if not shape.is_star_shaped():
        raise UnsupportedGeometryError("Only star shaped particles are supported")
    axial_symmetry = shape.axial_symmetry()
    if axial_symmetry[2] != 0:
        raise UnsupportedGeometryError(
            f"Only axially symmetric particles are supported, {shape.__class__.__name__} "
            f"has a rotational symmetry of order {axial_symmetry[2]}"
        )

    config = _config(config, options)
    nmax = Parameters(config, max_radius=shape.max_radius).nmax
    rtp, normals, ds = shape.boundarypoints(nmax, npts=config.npts)

    return tmatrix_ebcm(
        rtp,
        normals,
        ds,
        config,
        nmax=nmax,
        rotational_symmetry=axial_symmetry[2],
        z_mirror_symmetry=shape.mirror_symmetry()[2],
    )


def mie_coefficients(
    nmax: int, k_medium: complex, k_particle: complex, radius: float
) -> dict[str, np.ndarray]:
    """Mie coefficients of a homogeneous sphere for the degrees ``1..nmax``.

    Returns a dict with the scattered-field entries ``"scattered"`` (``-b_n``,
    ``-a_n``) and the internal-field entries ``"internal"`` (``c_n``, ``d_n``),
    each of shape ``(2, nmax)`` for the two polarizations.
    """
    m = k_particle / k_medium
    x = k_medium * radius
    mx = k_particle * radius
    l_orders = np.arange(1, nmax + 1)

    jx = spherical_jn(l_orders, x)
    jx_prime = spherical_jn(l_orders, x, derivative=True)
    yx = spherical_yn(l_orders, x)
    yx_prime = spherical_yn(l_orders, x, derivative=True)

    jmx = spherical_jn(l_orders, mx)
    jmx_prime = spherical_jn(l_orders, mx, derivative=True)

    hx = jx + 1j * yx
    hx_prime = jx_prime + 1j * yx_prime

    # Riccati-Bessel derivatives: d/dz [z * f_l(z)]
    djx = jx + x * jx_prime
    djmx = jmx + mx * jmx_prime
    dhx = hx + x * hx_prime

    denom_tau1 = jmx * dhx - hx * djmx
    denom_tau2 = m**2 * jmx * dhx - hx * djmx

    scattered = np.stack(
        (
            -(jmx * djx - jx * djmx) / denom_tau1,  # -b
            -(m**2 * jmx * djx - jx * djmx) / denom_tau2,  # -a
        )
    )
    internal = np.stack(
        (
            (jx * dhx - hx * djx) / denom_tau1,  # c
            (m * jx * dhx - m * hx * djx) / denom_tau2,  # d
        )
    )
    return dict(scattered=scattered, internal=internal)


def tmatrix_mie(
    radius: float,
    config: Config | None = None,
    internal: bool = False,
    **options: Any,
) -> TMatrix:
    """Analytic T-matrix of a homogeneous sphere.

    Args:
        radius (float): Sphere radius.
        config (Config, optional): Options; keyword ``options`` are merged on top.
        internal (bool, optional): Return the internal-field operator instead of
            the scattered-field one.

    Returns:
        (TMatrix): Diagonal T-matrix; each coefficient is repeated for all
            orders ``m = -n..n`` of its degree.
    """
    if radius <= 0:
        raise ValueError(f"Radius needs to be positive, got {radius}")
    config = _config(config, options)
    parameters = Parameters(config, max_radius=radius)
    nmax = parameters.nmax

    kind = "internal" if internal else "scattered"
    coefficients = mie_coefficients(
        nmax, parameters.k_medium, parameters.k_particle, radius
    )[kind]

    diagonal = np.zeros(2 * block_size(nmax), dtype=complex)
    for tau in (1, 2):
        for l_idx, l in enumerate(range(1, nmax + 1)):
            j_start = (tau - 1) * block_size(nmax) + l * l - 1
            diagonal[j_start : j_start + 2 * l + 1] = coefficients[tau - 1, l_idx]

    return TMatrix(
        data=np.diag(diagonal),
        type=kind,
        k_medium=parameters.k_medium,
        k_particle=parameters.k_particle,
    )
