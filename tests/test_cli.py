import numpy as np
import yaml
from click.testing import CliRunner

from ebcmpy.cli import cli
from ebcmpy.export import load_tmatrix


def _write_config(path, **overrides):
    config = {
        "nmax": 2,
        "k_medium": float(2 * np.pi),
        "index_relative": 1.2,
        "shape": {"name": "sphere", "parameters": [0.5]},
    }
    config.update(overrides)
    with open(path, "w") as f:
        yaml.safe_dump(config, f)


def test_compute(tmp_path):
    config = tmp_path / "config.yaml"
    output = tmp_path / "tmatrix.npz"
    _write_config(config, output={"filename": str(output)})

    result = CliRunner().invoke(cli, ["compute", "--config", str(config)])

    assert result.exit_code == 0, result.output
    assert load_tmatrix(output).shape == (16, 16)


def test_compute_output_overrides_config(tmp_path):
    config = tmp_path / "config.yaml"
    output = tmp_path / "override.npz"
    _write_config(config, output={"filename": str(tmp_path / "ignored.npz")})

    result = CliRunner().invoke(
        cli, ["compute", "--config", str(config), "--output", str(output), "--verbose"]
    )

    assert result.exit_code == 0, result.output
    assert output.exists()
    assert not (tmp_path / "ignored.npz").exists()


def test_compute_requires_a_shape(tmp_path):
    config = tmp_path / "config.yaml"
    _write_config(config, shape=None)

    result = CliRunner().invoke(cli, ["compute", "--config", str(config)])

    assert result.exit_code != 0


def test_compute_reports_unsupported_shapes(tmp_path):
    config = tmp_path / "config.yaml"
    _write_config(config, shape={"name": "cube", "parameters": [1.0]})

    result = CliRunner().invoke(cli, ["compute", "--config", str(config)])

    assert result.exit_code == 1
    assert "axially symmetric" in result.output
