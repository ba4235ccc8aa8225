import logging
import warnings
from time import time

import numpy as np
from scipy.linalg import LinAlgError, LinAlgWarning, solve
from scipy.sparse.linalg import splu

from ebcmpy.errors import NumericalSingularityError
from ebcmpy.global_matrix import GlobalMatrices


class Solver:
    """
    Direct solver for the T-matrix relation ``T = -RgQ Q^{-1}``.

    The relation is solved as ``Q^T X = RgQ^T`` followed by ``T = -X^T``.

    Parameters
    ----------
    solver_type : str, optional
        ``"dense"`` uses an LU solve with a reciprocal condition check
        (:func:`scipy.linalg.solve`), ``"sparse"`` uses a sparse LU
        factorization (:func:`scipy.sparse.linalg.splu`) and the same check.

    Attributes
    ----------
    type : str
        The type of solver.
    log : logging.Logger
        The logger for solver information.
    """

    def __init__(self, solver_type: str = "dense"):
        self.type = solver_type.lower()
        if self.type not in {"dense", "sparse"}:
            raise ValueError(
                f"Unsupported solver type: {solver_type!r}. Expected one of {{'dense', 'sparse'}}."
            )
        self.log = logging.getLogger(self.__class__.__module__)

    def run(self, matrices: GlobalMatrices) -> np.ndarray:
        """
        Solves for the T-matrix.

        Parameters
        ----------
        matrices : GlobalMatrices
            The irregular and regular EBCM matrices.

        Returns
        -------
        np.ndarray
            The dense T-matrix.

        Raises
        ------
        NumericalSingularityError
            If ``Q`` is singular, ill-conditioned beyond machine precision, or
            the solution is not finite.
        """
        start = time()
        if self.type == "dense":
            x = self.__run_dense(matrices)
        else:
            x = self.__run_sparse(matrices)

        if not np.all(np.isfinite(x)):
            raise NumericalSingularityError(
                "The T-matrix solve produced non-finite values; Q is singular at this truncation order"
            )

        self.log.info("Solving for the T-matrix took %f s" % (time() - start))
        return -x.T

    def __run_dense(self, matrices: GlobalMatrices) -> np.ndarray:
        q_t = matrices.q.T.toarray()
        rg_q_t = matrices.rg_q.T.toarray()
        with warnings.catch_warnings():
            warnings.simplefilter("error", LinAlgWarning)
            try:
                return solve(q_t, rg_q_t)
            except LinAlgWarning as err:
                raise NumericalSingularityError(
                    f"Q is too ill-conditioned to solve for the T-matrix: {err}"
                ) from err
            except LinAlgError as err:
                raise NumericalSingularityError(f"Q is singular: {err}") from err

    def __run_sparse(self, matrices: GlobalMatrices) -> np.ndarray:
        q_t = matrices.q.T.tocsc()
        try:
            lu = splu(q_t)
        except RuntimeError as err:
            raise NumericalSingularityError(f"Q is singular: {err}") from err

        # reciprocal condition number in the 1-norm, same threshold as the dense path
        inverse = lu.solve(np.eye(q_t.shape[0], dtype=complex))
        rcond = 1 / (
            abs(q_t).sum(axis=0).max() * np.abs(inverse).sum(axis=0).max()
        )
        if not rcond >= np.finfo(float).eps:
            raise NumericalSingularityError(
                f"Q is too ill-conditioned to solve for the T-matrix: rcond = {rcond:e}"
            )
        self.log.debug(f"Reciprocal condition number of Q: {rcond:e}")
        return lu.solve(matrices.rg_q.T.toarray())
