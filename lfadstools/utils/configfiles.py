"""Methods to handle the run configuration files."""

import pathlib
import shutil
from typing import Optional

import toml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PositiveInt,
)

default_config = (
    pathlib.Path(__file__).parent.parent / "config" / "runconfig.toml"
)


def copy_config(destination: pathlib.Path) -> pathlib.Path:
    """Copy the default run config into a specified directory.

    Parameters
    ----------
    - `destination` : `pathlib.Path`
        Existing directory to copy the config file into.

    Returns
    -------
    - `pathlib.Path`
        Path to the copied config file.

    Raises
    ------
    - `FileExistsError`
        If the destination is a file.
    - `FileNotFoundError`
        If the destination does not exist or the default config is missing.
    """
    if not default_config.exists():
        msg = (
            f"Could not find the default config file {default_config.name}. "
            "Please make sure that the package was installed completely."
        )
        raise FileNotFoundError(msg)

    if destination.is_file():
        msg = (
            "The specified path already exists and is a file. "
            "Please specify a directory."
        )
        raise FileExistsError(msg)

    if not destination.exists():
        msg = (
            "The specified path does not exist. "
            "Please specify an existing directory."
        )
        raise FileNotFoundError(msg)

    target = destination / f"lfadstools_{default_config.name}"
    shutil.copy(default_config, target)
    return target


class RunParams(BaseModel):
    """Hyperparameters of a single LFADS run.

    Only the parameters needed to size batches against the datasets are
    typed here. Any other LFADS hyperparameter in the config is kept as an
    extra field and passed on unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    name: Optional[str] = None
    batch_size: PositiveInt = Field(alias="c_batch_size")
    train_to_test_ratio: NonNegativeFloat = Field(
        default=4.0, alias="trainToTestRatio"
    )


class LfadsConfig(BaseModel):
    """Location of the LFADS scripts on disk."""

    path: pathlib.Path = pathlib.Path(".")
    script: str = "run_lfads.py"
    script_no_controller: str = "run_lfads_nc.py"


class RunConfig(BaseModel):
    """The main config object for a set of runs."""

    model_config = ConfigDict(arbitrary_types_allowed=True)
    path: str
    lfads: LfadsConfig = Field(default_factory=LfadsConfig)
    params: list[RunParams]


def load_run_config(config_file: pathlib.Path) -> RunConfig:
    """Load a run config file.

    Parameters
    ----------
    - `config_file` : `pathlib.Path`
        The path to the TOML file to load.

    Returns
    -------
    - `RunConfig`
        The run config.

    Raises
    ------
    - `pydantic.ValidationError`
        If a run entry is missing its batch size or has invalid values.
    """
    config_dict = toml.load(str(config_file))
    lfads = LfadsConfig(**config_dict.get("lfads", {}))
    params = [RunParams(**p) for p in config_dict.get("params", [])]
    return RunConfig(path=str(config_file), lfads=lfads, params=params)
