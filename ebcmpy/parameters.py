import logging

import numpy as np

from ebcmpy.config import Config
from ebcmpy.errors import ConfigurationError, UnsupportedGeometryError
from ebcmpy.functions.misc import ka2nmax


class Parameters:
    """
    Class resolving the physical parameters of a T-matrix computation.

    Args:
        config (Config): The (unresolved) options.
        max_radius (float, optional): Largest radius of the particle. Needed to
            estimate the truncation order when ``config.nmax`` is not set.

    Attributes:
        k_medium (complex): Wavenumber in the surrounding medium.
        k_particle (complex): Wavenumber inside the particle.
        nmax (int): Truncation order.
        z_mirror_symmetry (bool): Mirror symmetry about the xy-plane.
    """

    def __init__(self, config: Config, max_radius: float | None = None):
        """
        Initialize the Parameters object.

        Args:
            config (Config): The options to resolve.
            max_radius (float, optional): Largest radius of the particle.

        Raises:
            ConfigurationError: If a wavenumber or the truncation order cannot be resolved.
            UnsupportedGeometryError: If anything but full axisymmetry is requested.
        """
        self.config = config
        self.max_radius = max_radius
        self.log = logging.getLogger(self.__class__.__module__)

        self.__setup()

    def __setup(self):
        """
        Performs the setup operations for the object.
        This method checks the symmetry and computes the wavenumbers and the truncation order.
        """
        self.__check_symmetry()
        self.__compute_ks()
        self.__compute_nmax()
        self.z_mirror_symmetry = bool(self.config.z_mirror_symmetry)

    def __check_symmetry(self):
        if self.config.rotational_symmetry != 0:
            raise UnsupportedGeometryError(
                "Only fully axisymmetric particles (rotational_symmetry = 0) are supported, "
                f"got rotational_symmetry = {self.config.rotational_symmetry}"
            )

    def __vacuum_wavelength(self, name: str) -> float:
        if self.config.wavelength0 is None:
            raise ConfigurationError(f"wavelength0 must be specified to use {name}")
        return self.config.wavelength0

    def __ignored(self, used: str, names: list[str]):
        for name in names:
            if getattr(self.config, name) is not None:
                self.log.warning(f"{name} is ignored, since {used} has been provided")

    def __parse_k_medium(self) -> complex | None:
        """
        Resolve the medium wavenumber.

        The order of precedence is ``k_medium``, ``wavelength_medium`` and
        ``index_medium`` (together with ``wavelength0``).

        Returns:
            (complex | None): The wavenumber, or None if nothing has been specified.
        """
        config = self.config
        if config.k_medium is not None:
            self.__ignored("k_medium", ["wavelength_medium", "index_medium"])
            return config.k_medium
        if config.wavelength_medium is not None:
            self.__ignored("wavelength_medium", ["index_medium"])
            return 2 * np.pi / config.wavelength_medium
        if config.index_medium is not None:
            return config.index_medium * 2 * np.pi / self.__vacuum_wavelength(
                "index_medium"
            )
        return None

    def __parse_k_particle(self) -> complex | None:
        config = self.config
        if config.k_particle is not None:
            self.__ignored("k_particle", ["wavelength_particle", "index_particle"])
            return config.k_particle
        if config.wavelength_particle is not None:
            self.__ignored("wavelength_particle", ["index_particle"])
            return 2 * np.pi / config.wavelength_particle
        if config.index_particle is not None:
            return config.index_particle * 2 * np.pi / self.__vacuum_wavelength(
                "index_particle"
            )
        return None

    def __compute_ks(self):
        """
        Compute the wavenumbers of the medium and the particle.

        A missing wavenumber is derived from the other one with ``index_relative``.
        """
        k_medium = self.__parse_k_medium()
        k_particle = self.__parse_k_particle()
        index_relative = self.config.index_relative

        if k_particle is None and index_relative is not None and k_medium is not None:
            k_particle = index_relative * k_medium
        elif k_medium is None and index_relative is not None and k_particle is not None:
            k_medium = k_particle / index_relative
        elif index_relative is not None and k_medium is not None:
            self.log.warning(
                "index_relative is ignored, since both wavenumbers have been provided"
            )

        if k_medium is None:
            raise ConfigurationError(
                "Unable to determine k_medium: provide k_medium, wavelength_medium, "
                "or index_medium with wavelength0"
            )
        if k_particle is None:
            raise ConfigurationError(
                "Unable to determine k_particle: provide k_particle, wavelength_particle, "
                "index_particle with wavelength0, or index_relative"
            )

        for name, value in (("k_medium", k_medium), ("k_particle", k_particle)):
            if not np.isfinite(value) or value == 0:
                raise ConfigurationError(
                    f"{name} needs to be finite and non-zero, got {value}"
                )

        self.k_medium = complex(k_medium)
        self.k_particle = complex(k_particle)
        self.log.debug(
            f"Resolved k_medium = {self.k_medium}, k_particle = {self.k_particle}"
        )

    def __compute_nmax(self):
        """
        Use the explicit truncation order or estimate it from the particle size.
        """
        if self.config.nmax is not None:
            self.nmax = int(self.config.nmax)
            return
        if self.max_radius is None:
            raise ConfigurationError(
                "nmax needs to be provided when the particle size is unknown"
            )
        self.nmax = ka2nmax(self.max_radius * self.k_medium)
        self.log.info(
            f"Estimated nmax = {self.nmax} from k_medium * max_radius = "
            f"{abs(self.max_radius * self.k_medium):.3f}"
        )
