"""Star-shaped particle geometries and their boundary sampling.

A star shape is described by its radius ``r(theta, phi)`` as seen from the
origin. For the shapes supported by the EBCM solver the radius does not depend
on ``phi`` and the boundary is sampled along a single meridian:

- polar samples on Gauss-Legendre nodes in ``cos(theta)``,
- outward unit normals ``(n_r, n_theta, n_phi)``,
- area elements ``ds = r sqrt(r^2 + r'^2) w`` per unit azimuth, so that
  ``n_r ds = r^2 w``.
"""

from __future__ import annotations

import numpy as np

from ebcmpy.errors import ConfigurationError, UnsupportedGeometryError


class StarShape:
    """Base class of shapes that are single valued in ``(theta, phi)``."""

    def radii(self, theta: np.ndarray, phi: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    @property
    def max_radius(self) -> float:
        raise NotImplementedError

    def axial_symmetry(self) -> tuple[int, int, int]:
        """Order of rotational symmetry about the x, y and z axes (``0`` is infinite)."""
        raise NotImplementedError

    def mirror_symmetry(self) -> tuple[bool, bool, bool]:
        """Mirror symmetry about the yz, xz and xy planes."""
        raise NotImplementedError

    def is_star_shaped(self) -> bool:
        return True

    def radii_derivative(
        self, theta: np.ndarray, phi: np.ndarray, step: float = 1e-6
    ) -> np.ndarray:
        """``dr/dtheta`` by central differences; shapes with a closed form override it."""
        return (self.radii(theta + step, phi) - self.radii(theta - step, phi)) / (
            2 * step
        )

    def normals(self, theta: np.ndarray, phi: np.ndarray) -> np.ndarray:
        """Outward unit normals ``(n_r, n_theta, n_phi)`` of an axisymmetric shape."""
        r = self.radii(theta, phi)
        dr = self.radii_derivative(theta, phi)
        norm = np.sqrt(r**2 + dr**2)
        return np.stack([r / norm, -dr / norm, np.zeros_like(r)], axis=-1)

    def boundarypoints(self, nmax: int, npts: int | None = None):
        """Sample the boundary of an axisymmetric shape.

        Args:
            nmax (int): Truncation order the samples are meant for.
            npts (int, optional): Number of polar samples. Defaults to ``4 * (nmax + 2)``.

        Returns:
            rtp (np.ndarray): Samples ``(r, theta, phi)`` with shape ``(npts, 3)``, ``phi = 0``.
            normals (np.ndarray): Unit normals ``(n_r, n_theta, n_phi)``, shape ``(npts, 3)``.
            ds (np.ndarray): Area elements, shape ``(npts,)``.
        """
        if self.axial_symmetry()[2] != 0:
            raise UnsupportedGeometryError(
                f"{self.__class__.__name__} is not rotationally symmetric about the z-axis"
            )
        if npts is None:
            npts = 4 * (nmax + 2)

        nodes, weights = np.polynomial.legendre.leggauss(npts)
        # theta ascending from the +z axis
        theta = np.arccos(nodes[::-1])
        weights = weights[::-1]
        phi = np.zeros_like(theta)

        r = self.radii(theta, phi)
        normals = self.normals(theta, phi)

        rtp = np.stack([r, theta, phi], axis=-1)
        # n_r = r / sqrt(r^2 + r'^2)
        ds = r**2 / normals[:, 0] * weights
        return rtp, normals, ds


class Sphere(StarShape):
    def __init__(self, radius: float):
        if radius <= 0:
            raise ValueError(f"Radius needs to be positive, got {radius}")
        self.radius = float(radius)

    def radii(self, theta, phi):
        return np.full(np.broadcast(theta, phi).shape, self.radius)

    def radii_derivative(self, theta, phi, step=None):
        return np.zeros(np.broadcast(theta, phi).shape)

    @property
    def max_radius(self) -> float:
        return self.radius

    def axial_symmetry(self):
        return 0, 0, 0

    def mirror_symmetry(self):
        return True, True, True


class Ellipsoid(StarShape):
    """Ellipsoid with semi-axes ``a``, ``b``, ``c`` along x, y, z."""

    def __init__(self, a: float, b: float, c: float):
        if min(a, b, c) <= 0:
            raise ValueError(f"Semi-axes need to be positive, got {(a, b, c)}")
        self.a, self.b, self.c = float(a), float(b), float(c)

    def __transverse(self, phi):
        return np.cos(phi) ** 2 / self.a**2 + np.sin(phi) ** 2 / self.b**2

    def radii(self, theta, phi):
        return 1 / np.sqrt(
            np.sin(theta) ** 2 * self.__transverse(phi)
            + np.cos(theta) ** 2 / self.c**2
        )

    def radii_derivative(self, theta, phi, step=None):
        r = self.radii(theta, phi)
        return (
            -(r**3)
            * np.sin(theta)
            * np.cos(theta)
            * (self.__transverse(phi) - 1 / self.c**2)
        )

    @property
    def max_radius(self) -> float:
        return max(self.a, self.b, self.c)

    def axial_symmetry(self):
        return (
            0 if self.b == self.c else 2,
            0 if self.a == self.c else 2,
            0 if self.a == self.b else 2,
        )

    def mirror_symmetry(self):
        return True, True, True


class Superellipsoid(StarShape):
    """Superellipsoid ``(|x/a|^(2/e) + |y/b|^(2/e))^(e/n) + |z/c|^(2/n) = 1``."""

    def __init__(self, a: float, b: float, c: float, e: float, n: float):
        if min(a, b, c, e, n) <= 0:
            raise ValueError(
                f"Superellipsoid parameters need to be positive, got {(a, b, c, e, n)}"
            )
        self.a, self.b, self.c = float(a), float(b), float(c)
        self.e, self.n = float(e), float(n)

    def radii(self, theta, phi):
        x = np.abs(np.sin(theta) * np.cos(phi) / self.a)
        y = np.abs(np.sin(theta) * np.sin(phi) / self.b)
        z = np.abs(np.cos(theta) / self.c)
        return (
            (x ** (2 / self.e) + y ** (2 / self.e)) ** (self.e / self.n)
            + z ** (2 / self.n)
        ) ** (-self.n / 2)

    @property
    def max_radius(self) -> float:
        theta, phi = np.meshgrid(
            np.linspace(0, np.pi, 181), np.linspace(0, 2 * np.pi, 361)
        )
        return float(np.max(self.radii(theta, phi)))

    def axial_symmetry(self):
        if self.a == self.b and self.e == 1:
            return 2, 2, 0
        return 2, 2, (4 if self.a == self.b else 2)

    def mirror_symmetry(self):
        return True, True, True


class Cube(StarShape):
    def __init__(self, width: float):
        if width <= 0:
            raise ValueError(f"Width needs to be positive, got {width}")
        self.width = float(width)

    def radii(self, theta, phi):
        direction = np.stack(
            np.broadcast_arrays(
                np.sin(theta) * np.cos(phi),
                np.sin(theta) * np.sin(phi),
                np.cos(theta),
            ),
            axis=-1,
        )
        return self.width / 2 / np.max(np.abs(direction), axis=-1)

    @property
    def max_radius(self) -> float:
        return self.width / 2 * np.sqrt(3)

    def axial_symmetry(self):
        return 4, 4, 4

    def mirror_symmetry(self):
        return True, True, True


class AxisymLerp(StarShape):
    """Axisymmetric shape from a piecewise linear profile.

    Args:
        rho (np.ndarray): Distances of the profile vertices from the z-axis.
        z (np.ndarray): Heights of the profile vertices.

    The profile runs from the +z axis to the -z axis; the shape is star
    shaped if the polar angle of the vertices increases monotonically.
    """

    def __init__(self, rho, z):
        self.rho = np.asarray(rho, dtype=float)
        self.z = np.asarray(z, dtype=float)
        if self.rho.shape != self.z.shape or self.rho.ndim != 1 or self.rho.size < 2:
            raise ValueError(
                "rho and z need to be 1D arrays of the same length with at least 2 vertices"
            )

    def is_star_shaped(self) -> bool:
        angles = np.arctan2(self.rho, self.z)
        return bool(
            np.all(self.rho >= 0)
            and self.rho[0] == 0
            and self.rho[-1] == 0
            and np.all(np.diff(angles) > 0)
        )

    def __intersections(self, theta):
        """Distance along each direction to every segment (``nan`` if missed)."""
        theta = np.asarray(theta, dtype=float)[..., np.newaxis]
        d_rho, d_z = np.sin(theta), np.cos(theta)
        p_rho, p_z = self.rho[:-1], self.z[:-1]
        delta_rho, delta_z = np.diff(self.rho), np.diff(self.z)

        det = d_z * delta_rho - d_rho * delta_z
        with np.errstate(divide="ignore", invalid="ignore"):
            t = (p_z * delta_rho - p_rho * delta_z) / det
            s = (d_rho * p_z - d_z * p_rho) / det
        valid = (det != 0) & (s >= -1e-12) & (s <= 1 + 1e-12) & (t > 0)
        return np.where(valid, t, np.nan), delta_rho, delta_z

    def radii(self, theta, phi):
        t, _, _ = self.__intersections(np.broadcast_arrays(theta, phi)[0])
        if np.any(np.all(np.isnan(t), axis=-1)):
            raise UnsupportedGeometryError(
                "The profile does not enclose the origin in every direction"
            )
        return np.nanmax(t, axis=-1)

    def radii_derivative(self, theta, phi, step=None):
        theta = np.broadcast_arrays(theta, phi)[0]
        t, delta_rho, delta_z = self.__intersections(theta)
        segment = np.argmax(np.where(np.isnan(t), -np.inf, t), axis=-1)
        # segment line n . p = c with n = (delta_z, -delta_rho)
        n_rho, n_z = delta_z[segment], -delta_rho[segment]
        c = n_rho * self.rho[:-1][segment] + n_z * self.z[:-1][segment]
        n_dot_u = n_rho * np.sin(theta) + n_z * np.cos(theta)
        n_dot_du = n_rho * np.cos(theta) - n_z * np.sin(theta)
        return -c * n_dot_du / n_dot_u**2

    @property
    def max_radius(self) -> float:
        return float(np.max(np.hypot(self.rho, self.z)))

    def axial_symmetry(self):
        return (2, 2, 0) if self.mirror_symmetry()[2] else (1, 1, 0)

    def mirror_symmetry(self):
        theta = np.linspace(0.05, np.pi / 2 - 0.05, 32)
        phi = np.zeros_like(theta)
        z_mirror = np.allclose(
            self.radii(theta, phi), self.radii(np.pi - theta, phi), rtol=1e-12
        )
        return True, True, bool(z_mirror)


class Cylinder(AxisymLerp):
    def __init__(self, radius: float, height: float):
        if radius <= 0 or height <= 0:
            raise ValueError(
                f"Radius and height need to be positive, got {(radius, height)}"
            )
        super().__init__(
            [0.0, radius, radius, 0.0],
            [height / 2, height / 2, -height / 2, -height / 2],
        )


class ConeTippedCylinder(AxisymLerp):
    def __init__(self, radius: float, height: float, cone_height: float):
        if radius <= 0 or height <= 0 or cone_height < 0:
            raise ValueError(
                f"Invalid cone-tipped cylinder parameters {(radius, height, cone_height)}"
            )
        super().__init__(
            [0.0, radius, radius, 0.0],
            [
                height / 2 + cone_height,
                height / 2,
                -height / 2,
                -height / 2 - cone_height,
            ],
        )


SHAPES = {
    "sphere": (Sphere, 1),
    "ellipsoid": (Ellipsoid, 3),
    "superellipsoid": (Superellipsoid, 5),
    "cylinder": (Cylinder, 2),
    "cone-tipped-cylinder": (ConeTippedCylinder, 3),
    "cube": (Cube, 1),
}


def simple_shape(name: str, parameters) -> StarShape:
    """Construct a shape from its name and numeric parameters.

    Supported names and parameters:

    - ``sphere``: ``[radius]``
    - ``ellipsoid``: ``[a, b, c]``
    - ``superellipsoid``: ``[a, b, c, e, n]``
    - ``cylinder``: ``[radius, height]``
    - ``cone-tipped-cylinder``: ``[radius, height, cone_height]``
    - ``cube``: ``[width]``
    """
    key = name.lower()
    if key not in SHAPES:
        raise ConfigurationError(
            f"Unknown shape {name!r}. Expected one of {sorted(SHAPES)}."
        )
    cls, count = SHAPES[key]
    parameters = list(np.atleast_1d(parameters))
    if len(parameters) != count:
        raise ConfigurationError(
            f"Shape {name!r} needs {count} parameters, got {len(parameters)}"
        )
    return cls(*(float(p) for p in parameters))
