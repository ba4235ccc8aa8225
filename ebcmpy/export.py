import _pickle
import bz2
import json
import logging
from pathlib import Path
from typing import Any

import numpy as np
import yaml
from pydantic import BaseModel, Field, model_validator
from scipy.io import savemat
from typing_extensions import Self

from ebcmpy.tmatrix import TMATRIX_TYPES, TMatrix

log = logging.getLogger(__name__)


class Export(BaseModel):
    """Serializable representation of a :class:`~ebcmpy.tmatrix.TMatrix`.

    Complex values are stored as separate real and imaginary parts, so the
    model dumps to plain json/yaml.
    """

    type: str = Field(default="scattered")
    nmax: int = Field()
    real: list[list[float]] = Field()
    imag: list[list[float]] = Field()
    k_medium: list[float] | None = Field(default=None)
    k_particle: list[float] | None = Field(default=None)
    metadata: dict = Field(default={})

    @model_validator(mode="after")
    def check_dimension(self) -> Self:
        if self.type not in TMATRIX_TYPES:
            raise ValueError(f"Unknown T-matrix type {self.type}")
        dimension = 2 * self.nmax * (self.nmax + 2)
        if len(self.real) != dimension or len(self.imag) != dimension:
            raise ValueError(
                f"Number of rows ({len(self.real)}, {len(self.imag)}) does not match nmax = {self.nmax}"
            )
        return self

    @classmethod
    def from_tmatrix(cls, tmatrix: TMatrix, **metadata: Any) -> "Export":
        def split(value: complex | None) -> list[float] | None:
            if value is None:
                return None
            return [float(np.real(value)), float(np.imag(value))]

        return cls(
            type=tmatrix.type,
            nmax=tmatrix.nmax,
            real=tmatrix.data.real.tolist(),
            imag=tmatrix.data.imag.tolist(),
            k_medium=split(tmatrix.k_medium),
            k_particle=split(tmatrix.k_particle),
            metadata=metadata,
        )

    def save(self, filename: str | Path) -> None:
        if isinstance(filename, str):
            filename = Path(filename)

        match filename.suffix:
            case ".npz":
                data = np.array(self.real) + 1j * np.array(self.imag)
                np.savez(
                    filename,
                    data=data,
                    type=self.type,
                    k_medium=_join(self.k_medium),
                    k_particle=_join(self.k_particle),
                )
            case ".json":
                with open(filename, "w") as f:
                    json.dump(self.model_dump(), f, indent=4)
            case ".yml" | ".yaml":
                with open(filename, "w") as f:
                    yaml.dump(self.model_dump(), f)
            case ".bz2":
                with bz2.BZ2File(filename, "w") as outfile:
                    _pickle.dump(self.model_dump(), outfile)
            case ".mat":
                savemat(
                    filename,
                    dict(
                        data=np.array(self.real) + 1j * np.array(self.imag),
                        type=self.type,
                        nmax=self.nmax,
                    ),
                )
            case _:
                raise ValueError(f"Unknown file extension {filename.suffix}")
        log.info(f"Saved {self.type} T-matrix (nmax = {self.nmax}) to {filename}")


def _join(parts: list[float] | None) -> complex:
    if parts is None:
        return complex(np.nan, np.nan)
    return complex(parts[0], parts[1])


def save_tmatrix(tmatrix: TMatrix, filename: str | Path, **metadata: Any) -> None:
    """Write a T-matrix to ``filename``; the format follows the file suffix.

    Supported suffixes are ``.npz``, ``.mat``, ``.json``, ``.yaml``/``.yml``
    and ``.bz2``.
    """
    Export.from_tmatrix(tmatrix, **metadata).save(filename)


def load_tmatrix(filename: str | Path) -> TMatrix:
    """Read a T-matrix written by :func:`save_tmatrix` as ``.npz``."""
    filename = Path(filename)
    if filename.suffix != ".npz":
        raise ValueError(f"Only .npz files can be loaded, got {filename.suffix}")
    with np.load(filename) as archive:
        k_medium = complex(archive["k_medium"])
        k_particle = complex(archive["k_particle"])
        return TMatrix(
            data=archive["data"],
            type=str(archive["type"]),
            k_medium=None if np.isnan(k_medium) else k_medium,
            k_particle=None if np.isnan(k_particle) else k_particle,
        )
