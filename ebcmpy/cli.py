import logging

import click

from ebcmpy.config import Config
from ebcmpy.errors import EbcmError
from ebcmpy.export import save_tmatrix
from ebcmpy.tmatrix import tmatrix_ebcm_simple


@click.group()
def cli() -> None:
    pass


@cli.command()
@click.option(
    "--config",
    required=True,
    type=str,
    help="Specify the path to the config file to be used.",
)
@click.option(
    "--output",
    type=str,
    default="",
    help="File path the T-matrix is written to. Overrides the provided path in the config.",
)
@click.option("--verbose", is_flag=True, help="Log debug information.")
def compute(config: str, output: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    log = logging.getLogger(__name__)

    try:
        options = Config.from_file(config)
        if options.shape is None:
            raise click.UsageError("The config file needs to specify a shape")
        tmatrix = tmatrix_ebcm_simple(
            options.shape.name, options.shape.parameters, options
        )
    except EbcmError as err:
        raise click.ClickException(str(err)) from err
    log.info(f"Computed T-matrix of dimension {tmatrix.shape[0]} (nmax = {tmatrix.nmax})")

    filename = output or options.output.filename
    if filename:
        save_tmatrix(tmatrix, filename)
    else:
        log.warning("No output file provided, the T-matrix is not saved")
