import json
import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ebcmpy.errors import ConfigurationError

log = logging.getLogger(__name__)


class ShapeConfig(BaseModel):
    """Named shape and its numeric parameters, e.g. ``sphere`` with ``[1.0]``."""

    name: str
    parameters: list[float] = Field(default=[])

    model_config = ConfigDict(extra="forbid")


class OutputConfig(BaseModel):
    filename: str | None = Field(default=None)

    model_config = ConfigDict(extra="forbid")


class Config(BaseModel):
    """Options for building a T-matrix.

    All fields are optional; they are resolved once by
    :class:`ebcmpy.parameters.Parameters`:

    - ``nmax``: an explicit truncation order wins over the size heuristic.
    - ``k_medium`` > ``wavelength_medium`` > ``index_medium`` (needs ``wavelength0``).
    - ``k_particle`` > ``wavelength_particle`` > ``index_particle``
      (needs ``wavelength0``) > ``index_relative * k_medium``.
    - ``rotational_symmetry`` is the order of rotational symmetry about the
      z-axis; ``0`` means infinite order (fully axisymmetric), which is the only
      supported value.
    - ``z_mirror_symmetry`` marks mirror symmetry about the xy-plane.
    """

    nmax: int | None = Field(default=None)
    k_medium: complex | None = Field(default=None)
    wavelength_medium: float | None = Field(default=None)
    index_medium: complex | None = Field(default=None)
    k_particle: complex | None = Field(default=None)
    wavelength_particle: float | None = Field(default=None)
    index_particle: complex | None = Field(default=None)
    index_relative: complex | None = Field(default=None)
    wavelength0: float | None = Field(default=None)
    rotational_symmetry: int = Field(default=0)
    z_mirror_symmetry: bool = Field(default=False)
    npts: int | None = Field(default=None)
    solver: Literal["dense", "sparse"] = Field(default="dense")

    shape: ShapeConfig | None = Field(default=None)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = ConfigDict(extra="forbid")

    @field_validator("nmax", "npts")
    @classmethod
    def positive(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError(f"needs to be at least 1, got {value}")
        return value

    @field_validator("wavelength_medium", "wavelength_particle", "wavelength0")
    @classmethod
    def positive_wavelength(cls, value: float | None) -> float | None:
        if value is not None and not value > 0:
            raise ValueError(f"wavelengths need to be positive, got {value}")
        return value

    @classmethod
    def create(cls, **kwargs: Any) -> "Config":
        """Validate keyword options, raising :class:`ConfigurationError` on failure."""
        try:
            return cls(**kwargs)
        except ValidationError as err:
            raise ConfigurationError(str(err)) from err

    @classmethod
    def from_file(cls, path_config: str | Path) -> "Config":
        """Read the options from a json or yaml file."""
        path_config = Path(path_config)
        match path_config.suffix:
            case ".json":
                with open(path_config) as data:
                    config = json.load(data)
            case ".yaml" | ".yml":
                with open(path_config) as data:
                    config = yaml.safe_load(data)
            case _:
                raise ConfigurationError(
                    "The provided config file needs to be a json or yaml file!"
                )
        if config is None:
            raise ConfigurationError(f"Could not read config file {path_config}.")
        log.info(f"Read configuration from {path_config}")
        return cls.create(**config)
