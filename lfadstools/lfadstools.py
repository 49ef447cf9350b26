"""Lfadstools - A command line tool to prepare datasets for LFADS runs."""

from importlib.metadata import version
from pathlib import Path
from typing import Callable

import pandas as pd
import rich_click as click
from rich.console import Console
from rich.table import Table

from lfadstools.datasets import DatasetCollection, load_collection
from lfadstools.datasets.savers import split_and_export
from lfadstools.utils.configfiles import copy_config, load_run_config
from lfadstools.utils.logger import Timer
from lfadstools.utils.progress import RichProgress

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = True

__version__ = version("lfadstools")

con = Console()


def add_version(f: Callable) -> Callable:
    """Add the version of lfadstools to the help heading."""
    doc = f.__doc__
    f.__doc__ = "Welcome to Lfadstools Version: " + __version__ + "\n\n" + doc

    return f


def _load(input_path: Path) -> DatasetCollection:
    """Load a collection and the info of all its datasets."""
    dc = load_collection(input_path)
    with Timer(con, f"Loading info of {dc.n_datasets} datasets"):
        with RichProgress("Loading info") as prog:
            dc.load_info(progress=prog)
    return dc


def _print_table(df: pd.DataFrame, title: str) -> None:
    table = Table(title=title)
    table.add_column(df.index.name or "")
    for column in df.columns:
        table.add_column(str(column))
    for name, row in df.iterrows():
        values = [
            str(v.date()) if isinstance(v, pd.Timestamp) else str(v)
            for v in row.to_list()
        ]
        table.add_row(str(name), *values)
    con.print(table)


input_option = click.option(
    "--input_path",
    "-i",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=True,
    help="Path to the dataset collection.",
)


@click.group()
@click.version_option(
    __version__, "-V", "--version", message="Lfadstools, version %(version)s"
)
@add_version
def cli() -> None:
    """Prepare collections of recording datasets for LFADS runs.

    The lfadstools command line tool collects the datasets in a directory,
    summarizes their metadata, and works out which batch sizes and
    train/test splits every dataset can support before a run is launched.
    """
    pass


@cli.command()
@input_option
def info(input_path: Path) -> None:
    """Show the metadata of every dataset in a collection."""
    dc = _load(input_path)
    _print_table(dc.get_dataset_info_table(), f'Datasets in "{dc.name}"')


@cli.command()
@input_option
@click.option(
    "--ratio",
    "-r",
    type=click.FloatRange(min=0),
    default=4.0,
    show_default=True,
    help="Ratio of training to validation trials.",
)
def maxbatch(input_path: Path, ratio: float) -> None:
    """Compute the largest batch size every dataset can supply."""
    dc = _load(input_path)
    max_batch_size, min_trials = (
        dc.compute_max_batch_size_for_train_to_test_ratio(ratio)
    )
    if max_batch_size == 0:
        con.print(
            "[bold red]No batch size is feasible[/bold red] "
            f"(minimum trials: {min_trials})."
        )
        raise SystemExit(1)
    con.print(
        f"Max batch size: [bold green]{max_batch_size}[/bold green] "
        f"(minimum trials: {min_trials})"
    )


@cli.command(name="filter")
@input_option
@click.option(
    "--config_path",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to the run config file.",
)
def filter_datasets(input_path: Path, config_path: Path) -> None:
    """Show the datasets that have enough trials for every run."""
    config = load_run_config(config_path)
    dc = _load(input_path)
    n_before = dc.n_datasets
    min_trials = dc.filter_having_minimum_trials_for_batch_size(config.params)
    con.print(
        f"Kept {dc.n_datasets} of {n_before} datasets with at least "
        f"{min_trials} trials."
    )
    dc.pprint(con)


@cli.command()
@input_option
@click.option(
    "--name", "-n", type=str, required=True, help="Name of the dataset."
)
@click.option(
    "--output_path",
    "-o",
    type=Path,
    required=True,
    help="Path to the HDF5 file to write.",
)
@click.option(
    "--ratio",
    "-r",
    type=click.FloatRange(min=0),
    default=4.0,
    show_default=True,
    help="Ratio of training to validation trials.",
)
def export(
    input_path: Path, name: str, output_path: Path, ratio: float
) -> None:
    """Export the spikes of a dataset for LFADS."""
    dc = load_collection(input_path)
    (ds,), _ = dc.match_datasets_by_name(name)
    outfile = split_and_export(ds, output_path, ratio)
    con.print(f"Exported {ds.name} to {outfile}")


@cli.command()
@click.option(
    "--config_path",
    "-c",
    type=Path,
    required=True,
    help="Directory to copy the config file to.",
)
def copyconfig(config_path: Path) -> None:
    """Copy the default run config file to a directory."""
    target = copy_config(config_path)
    con.print(f"Copied run config to {target}")


if __name__ == "__main__":
    cli()
