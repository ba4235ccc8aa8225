"""Multipole mode bookkeeping.

The T-matrix and the EBCM matrices ``Q``/``RgQ`` are addressed by a single
index per polarization block. A mode of degree ``n`` and order ``m`` maps to

.. math::

    \\mathrm{idx}(n, m) = n (n + 1) + m, \\qquad 1 \\le \\mathrm{idx} \\le N (N + 2),

and the second polarization block is offset by ``N (N + 2)``. Arrays are
zero-based, so the position of a mode in a numpy array is ``idx - 1``. Rows run over polarization, then degree, then order.
"""

from __future__ import annotations

import numpy as np


def block_size(nmax: int) -> int:
    """Number of modes in one polarization block, ``nmax * (nmax + 2)``."""
    return nmax * (nmax + 2)


def total_size(nmax: int) -> int:
    """Dimension of ``Q``, ``RgQ`` and the T-matrix, ``2 * nmax * (nmax + 2)``."""
    return 2 * block_size(nmax)


def combined_index(n, m):
    """One-based combined index ``n (n + 1) + m`` of the mode ``(n, m)``.

    Works on scalars and on numpy arrays.
    """
    return n * (n + 1) + m


def split_index(idx):
    """Inverse of :func:`combined_index`.

    Args:
        idx (int | np.ndarray): One-based combined index.

    Returns:
        n (int | np.ndarray): Multipole degree.
        m (int | np.ndarray): Multipole order.
    """
    n = np.floor(np.sqrt(idx)).astype(int)
    m = idx - n * (n + 1)
    return n, m


def mode_position(n: int, m: int, nmax: int, polarization: int = 1) -> int:
    """Zero-based row/column of mode ``(n, m)`` in a ``total_size(nmax)`` matrix.

    Args:
        n (int): Degree, ``1 <= n <= nmax``.
        m (int): Order, ``-n <= m <= n``.
        nmax (int): Truncation order.
        polarization (int, optional): Polarization block, ``1`` or ``2``.

    Returns:
        (int): The matrix position.
    """
    if not 1 <= n <= nmax:
        raise ValueError(f"Degree {n} is outside of [1, {nmax}]")
    if abs(m) > n:
        raise ValueError(f"Order {m} is not valid for degree {n}")
    if polarization not in (1, 2):
        raise ValueError(f"Polarization needs to be 1 or 2, got {polarization}")
    return (polarization - 1) * block_size(nmax) + combined_index(n, m) - 1


def mode_lookup(nmax: int) -> np.ndarray:
    """Table of ``(polarization, n, m)`` for every row of a ``total_size(nmax)`` matrix."""
    lookup = np.zeros((total_size(nmax), 3), dtype=int)
    for polarization in (1, 2):
        for n in range(1, nmax + 1):
            for m in range(-n, n + 1):
                lookup[mode_position(n, m, nmax, polarization), :] = (
                    polarization,
                    n,
                    m,
                )
    return lookup


def normalization(nmax: int) -> np.ndarray:
    """Per-degree normalization ``N(n) = 1 / sqrt(n (n + 1))`` for ``n = 1..nmax``."""
    n = np.arange(1, nmax + 1)
    return 1 / np.sqrt(n * (n + 1))


def pair_normalization(nmax: int) -> np.ndarray:
    """Pairwise normalization ``N(j) N(k)`` as an ``(nmax, nmax)`` array."""
    nn = normalization(nmax)
    return np.outer(nn, nn)


def pair_offsets(nmax: int) -> tuple[np.ndarray, int]:
    """Write offsets of every degree pair in the flat coupling buffers.

    The pair ``(j, k)`` (flattened as ``(j - 1) * nmax + (k - 1)``) owns the
    ``2 * min(j, k) + 1`` consecutive entries starting at its offset, one per
    shared order ``m = -min(j, k) .. min(j, k)``.

    Returns:
        offsets (np.ndarray): Start offset of every pair.
        length (int): Total number of entries,
            ``nmax^2 (nmax + 2) - sum_{n<nmax} n (n + 1)``.
    """
    degrees = np.arange(1, nmax + 1)
    widths = 2 * np.minimum.outer(degrees, degrees).ravel() + 1
    offsets = np.zeros(widths.size, dtype=np.int64)
    offsets[1:] = np.cumsum(widths)[:-1]
    return offsets, int(widths.sum())
