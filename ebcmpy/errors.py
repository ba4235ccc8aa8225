"""Exceptions raised while constructing a T-matrix.

All errors are raised at construction time; a partially built or degenerate
T-matrix is never returned.
"""


class EbcmError(Exception):
    """Base class for all errors raised by :mod:`ebcmpy`."""


class ConfigurationError(EbcmError, ValueError):
    """Missing, ambiguous or invalid wavenumber/wavelength/index or truncation input."""


class UnsupportedGeometryError(EbcmError, ValueError):
    """The geometry is not star shaped or not fully axisymmetric."""


class NumericalSingularityError(EbcmError, ArithmeticError):
    """The irregular matrix ``Q`` is singular or too ill-conditioned to invert."""
