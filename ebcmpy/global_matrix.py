"""Assembly of the global EBCM matrices ``Q`` and ``RgQ``.

Both matrices have dimension ``2 N (N + 2)``. The coupling values of
:class:`~ebcmpy.surface_integrals.CouplingBlocks` are combined into four
polarization quadrants

.. math::

    Q_{11} &= i k_m (k_p J_{21} + k_m J_{12}), \\qquad
    Q_{12} = i k_m (k_p J_{11} + k_m J_{22}), \\\\
    Q_{21} &= i k_m (k_p J_{22} + k_m J_{11}), \\qquad
    Q_{22} = i k_m (k_p J_{12} + k_m J_{21}),

and likewise for ``RgQ`` with the regular couplings. The second polarization
block is offset by ``N (N + 2)`` along rows and/or columns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy.sparse import coo_matrix, csr_matrix

from ebcmpy.modes import block_size, total_size
from ebcmpy.surface_integrals import CouplingBlocks

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalMatrices:
    """The irregular matrix ``q`` and the regular matrix ``rg_q`` (CSR)."""

    q: csr_matrix
    rg_q: csr_matrix

    @property
    def dimension(self) -> int:
        return self.q.shape[0]


def combine_quadrants(
    j11: np.ndarray,
    j12: np.ndarray,
    j21: np.ndarray,
    j22: np.ndarray,
    k_medium: complex,
    k_particle: complex,
) -> np.ndarray:
    """Combine one family of couplings into the values of the four quadrants.

    Returns:
        (np.ndarray): Array of shape ``(4, len(j11))`` for the quadrants
            ``(1, 1), (1, 2), (2, 1), (2, 2)``.
    """
    prefactor = 1j * k_medium
    return np.stack(
        (
            prefactor * (k_particle * j21 + k_medium * j12),
            prefactor * (k_particle * j11 + k_medium * j22),
            prefactor * (k_particle * j22 + k_medium * j11),
            prefactor * (k_particle * j12 + k_medium * j21),
        )
    )


def quadrant_coordinates(blocks: CouplingBlocks) -> tuple[np.ndarray, np.ndarray]:
    """Row and column indices of the four quadrants, concatenated in quadrant order."""
    offset = block_size(blocks.nmax)
    rows = np.concatenate(
        (blocks.rows, blocks.rows, blocks.rows + offset, blocks.rows + offset)
    )
    cols = np.concatenate(
        (blocks.cols, blocks.cols + offset, blocks.cols, blocks.cols + offset)
    )
    return rows, cols


def build_global_matrices(
    blocks: CouplingBlocks, k_medium: complex, k_particle: complex
) -> GlobalMatrices:
    """Build ``Q`` and ``RgQ`` from the coupling blocks.

    Args:
        blocks (CouplingBlocks): Output of
            :func:`ebcmpy.surface_integrals.compute_coupling_blocks`.
        k_medium (complex): Wavenumber of the medium.
        k_particle (complex): Wavenumber of the particle.

    Returns:
        (GlobalMatrices): The sparse matrices ``Q`` and ``RgQ``.
    """
    dimension = total_size(blocks.nmax)
    rows, cols = quadrant_coordinates(blocks)

    q_values = combine_quadrants(*blocks.irregular, k_medium, k_particle).ravel()
    rg_q_values = combine_quadrants(*blocks.regular, k_medium, k_particle).ravel()

    q = coo_matrix((q_values, (rows, cols)), shape=(dimension, dimension)).tocsr()
    rg_q = coo_matrix(
        (rg_q_values, (rows, cols)), shape=(dimension, dimension)
    ).tocsr()
    # drop the stored zeros of skipped terms
    q.eliminate_zeros()
    rg_q.eliminate_zeros()

    log.debug(
        "Q has %d non-zero entries out of %d" % (q.nnz, dimension * dimension)
    )
    return GlobalMatrices(q=q, rg_q=rg_q)
