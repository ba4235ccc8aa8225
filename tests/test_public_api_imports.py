def test_public_imports() -> None:
    # A lightweight contract test: keep the most common imports stable.
    import ebcmpy

    assert hasattr(ebcmpy, "__version__")

    from ebcmpy import (  # noqa: F401
        Config,
        ConfigurationError,
        NumericalSingularityError,
        TMatrix,
        UnsupportedGeometryError,
        load_tmatrix,
        save_tmatrix,
        tmatrix_ebcm,
        tmatrix_ebcm_simple,
        tmatrix_mie,
    )
