import json

import numpy as np
import numpy.testing as npt
import pytest
import yaml
from scipy.io import loadmat

from ebcmpy.export import Export, load_tmatrix, save_tmatrix
from ebcmpy.tmatrix import TMatrix, tmatrix_mie


@pytest.fixture(scope="module")
def tmatrix() -> TMatrix:
    return tmatrix_mie(0.5, nmax=3, k_medium=2 * np.pi, index_relative=1.5 + 0.01j)


def test_npz_round_trip(tmp_path, tmatrix: TMatrix):
    path = tmp_path / "tmatrix.npz"
    save_tmatrix(tmatrix, path)
    loaded = load_tmatrix(path)

    npt.assert_array_equal(loaded.data, tmatrix.data)
    assert loaded.type == tmatrix.type
    assert loaded.k_medium == tmatrix.k_medium
    assert loaded.k_particle == tmatrix.k_particle


def test_npz_without_wavenumbers(tmp_path):
    path = tmp_path / "identity.npz"
    save_tmatrix(TMatrix(np.eye(6), type="internal"), str(path))
    loaded = load_tmatrix(path)

    assert loaded.type == "internal"
    assert loaded.k_medium is None


@pytest.mark.parametrize("suffix", [".json", ".yaml"])
def test_text_formats(tmp_path, tmatrix: TMatrix, suffix: str):
    path = tmp_path / f"tmatrix{suffix}"
    save_tmatrix(tmatrix, path, shape="sphere")

    with open(path) as f:
        content = json.load(f) if suffix == ".json" else yaml.safe_load(f)

    assert content["nmax"] == 3
    assert content["metadata"] == {"shape": "sphere"}
    npt.assert_allclose(
        np.array(content["real"]) + 1j * np.array(content["imag"]), tmatrix.data
    )


def test_mat(tmp_path, tmatrix: TMatrix):
    path = tmp_path / "tmatrix.mat"
    save_tmatrix(tmatrix, path)
    npt.assert_allclose(loadmat(path)["data"], tmatrix.data)


def test_bz2(tmp_path, tmatrix: TMatrix):
    path = tmp_path / "tmatrix.bz2"
    save_tmatrix(tmatrix, path)
    assert path.stat().st_size > 0


def test_unknown_suffix(tmp_path, tmatrix: TMatrix):
    with pytest.raises(ValueError):
        save_tmatrix(tmatrix, tmp_path / "tmatrix.csv")
    with pytest.raises(ValueError):
        load_tmatrix(tmp_path / "tmatrix.json")


def test_export_checks_dimension():
    with pytest.raises(ValueError):
        Export(nmax=2, real=[[0.0]], imag=[[0.0]])
