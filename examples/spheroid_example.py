"""
Example: T-matrix of a prolate spheroid

This example computes the T-matrix of an axisymmetric spheroid with the
extended boundary condition method and compares it with the analytic
T-matrix of the volume-equivalent sphere.

The spheroid:
- Has a circular cross section in the xy-plane (a = b)
- Is mirror symmetric about the xy-plane, so half of the couplings are skipped
- Couples multipoles of different degree, which a sphere never does
"""

import numpy as np

from ebcmpy import tmatrix_ebcm_simple, tmatrix_mie
from ebcmpy.export import save_tmatrix
from ebcmpy.shapes import Ellipsoid


def efficiencies(tmatrix, x):
    """Orientation-averaged extinction and scattering efficiencies."""
    t = tmatrix.data
    q_ext = -2 / x**2 * np.real(np.trace(t))
    q_sca = 2 / x**2 * np.sum(np.abs(t) ** 2)
    return q_ext, q_sca


def run_spheroid_example():
    print("\n" + "=" * 70)
    print("SPHEROID T-MATRIX EXAMPLE")
    print("=" * 70)

    # =========================================================================
    # 1. Define the particle and the media
    # =========================================================================
    print("\n1. Setting up the particle...")

    wavelength = 0.55  # in the medium
    relative_index = 1.5 + 0.01j
    spheroid = Ellipsoid(0.1, 0.1, 0.2)
    radius_equivalent = (0.1 * 0.1 * 0.2) ** (1 / 3)

    print(f"   Semi-axes: {spheroid.a}, {spheroid.b}, {spheroid.c}")
    print(f"   Volume-equivalent radius: {radius_equivalent:.4f}")
    print(f"   Relative refractive index: {relative_index}")

    # =========================================================================
    # 2. Compute the T-matrices
    # =========================================================================
    print("\n2. Computing T-matrices...")

    options = dict(wavelength_medium=wavelength, index_relative=relative_index)
    t_spheroid = tmatrix_ebcm_simple(spheroid, **options)
    t_sphere = tmatrix_mie(radius_equivalent, nmax=t_spheroid.nmax, **options)

    print(f"   Truncation order: {t_spheroid.nmax}")
    print(f"   Dimension: {t_spheroid.shape[0]} x {t_spheroid.shape[1]}")

    # =========================================================================
    # 3. Compare
    # =========================================================================
    print("\n3. Comparing with the equivalent sphere...")

    x = 2 * np.pi / wavelength * radius_equivalent
    for name, tmatrix in (("spheroid", t_spheroid), ("sphere", t_sphere)):
        q_ext, q_sca = efficiencies(tmatrix, x)
        print(f"   {name:<9} Q_ext = {q_ext:.6f}, Q_sca = {q_sca:.6f}")

    idx = t_spheroid.mode(1, 0, 1)
    jdx = t_spheroid.mode(3, 0, 1)
    print(f"   Coupling (1, 0) <- (3, 0): spheroid {abs(t_spheroid.data[idx, jdx]):.3e}")
    print(f"                              sphere   {abs(t_sphere.data[idx, jdx]):.3e}")

    save_tmatrix(t_spheroid, "spheroid.npz")
    print("\n   Saved the spheroid T-matrix to spheroid.npz")


if __name__ == "__main__":
    run_spheroid_example()
