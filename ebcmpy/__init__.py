from .config import Config
from .errors import (
    ConfigurationError,
    EbcmError,
    NumericalSingularityError,
    UnsupportedGeometryError,
)
from .export import load_tmatrix, save_tmatrix
from .parameters import Parameters
from .shapes import simple_shape
from .solver import Solver
from .tmatrix import TMatrix, tmatrix_ebcm, tmatrix_ebcm_simple, tmatrix_mie

__version__ = "0.1.0"
