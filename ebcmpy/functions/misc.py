import numpy as np


def ka2nmax(ka: complex) -> int:
    """
    Estimate the truncation order for a particle of size parameter ``ka``.

    Uses the Wiscombe-type rule ``Nmax = ceil(|ka| + 3 |ka|^(1/3))``.

    Args:
        ka (complex): Product of the maximal particle radius and the medium wavenumber.

    Returns:
        (int): The truncation order, at least 1.
    """
    ka = np.abs(ka)
    return max(1, int(np.ceil(ka + 3 * np.cbrt(ka))))
