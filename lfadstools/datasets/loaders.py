"""Loader functions for datasets stored on disk.

A dataset is a directory that contains an `info.toml` metadata file, a
`spikes.npy` array shaped `(n_trials, n_timesteps, n_channels)`, or both.
"""

import pathlib
from typing import Optional

import numpy as np
import numpy.typing as npt
import toml

from lfadstools.datasets.collection import DatasetCollection
from lfadstools.datasets.models import Dataset, DatasetInfo
from lfadstools.utils.logger import make_logger

logger = make_logger(__name__)

info_file = "info.toml"
spikes_file = "spikes.npy"


def is_dataset_dir(path: pathlib.Path) -> bool:
    """Check whether a directory holds dataset files."""
    return path.is_dir() and (
        (path / info_file).exists() or (path / spikes_file).exists()
    )


def load_info(path: pathlib.Path) -> DatasetInfo:
    """Load the metadata of a dataset.

    Metadata is read from `info.toml`. If a `spikes.npy` file is present,
    the trial and channel counts are taken from its shape instead. The
    array is memory-mapped, so only its header is read.

    Parameters
    ----------
    - `path` : `pathlib.Path`
        The dataset directory.

    Returns
    -------
    - `DatasetInfo`
        The validated metadata.

    Raises
    ------
    - `FileNotFoundError`
        If the directory contains neither metadata file.
    - `ValidationError`
        If the metadata is malformed.
    - `ValueError`
        If the spike array is not three-dimensional.

    Examples
    --------
    ```python
    import pathlib
    from lfadstools.datasets import load_info
    info = load_info(pathlib.Path("path/to/dataset"))
    info.pprint()
    ```
    """
    has_info = (path / info_file).exists()
    has_spikes = (path / spikes_file).exists()

    if not has_info and not has_spikes:
        msg = f"No dataset found in {path}"
        raise FileNotFoundError(msg)

    fields = {}
    if has_info:
        fields = toml.load(str(path / info_file))
        if "date" in fields:
            fields["collection_date"] = fields.pop("date")

    if has_spikes:
        shape = np.load(path / spikes_file, mmap_mode="r").shape
        if len(shape) != 3:
            msg = (
                f"Spike array in {path} must have three dimensions "
                f"(trials, timesteps, channels), got shape {shape}."
            )
            raise ValueError(msg)
        fields["n_trials"] = shape[0]
        fields["n_channels"] = shape[2]

    return DatasetInfo(**fields)


def load_spikes(dataset: Dataset) -> npt.NDArray[np.int_]:
    """Load the full spike array of a dataset.

    Parameters
    ----------
    - `dataset` : `Dataset`
        The dataset to load.

    Returns
    -------
    - `numpy.ndarray`
        Spike counts shaped `(n_trials, n_timesteps, n_channels)`.

    Raises
    ------
    - `FileNotFoundError`
        If the dataset has no spike array.
    """
    if dataset.path is None or not (dataset.path / spikes_file).exists():
        msg = f"No spike data found for dataset {dataset.name}"
        raise FileNotFoundError(msg)
    return np.load(dataset.path / spikes_file)


def load_collection(
    path: pathlib.Path,
    name: Optional[str] = None,
    comment: str = "",
) -> DatasetCollection:
    """Build a collection from all dataset directories in a path.

    Datasets are added in sorted name order. Their info is not loaded.

    Parameters
    ----------
    - `path` : `pathlib.Path`
        Root directory of the collection.
    - `name` : `Optional[str]`
        Name of the collection. Defaults to the leaf of `path`.
    - `comment` : `str`
        Free text comment.

    Returns
    -------
    - `DatasetCollection`
        The collection holding one dataset per dataset directory.

    Raises
    ------
    - `FileNotFoundError`
        If `path` is not a directory.

    Examples
    --------
    ```python
    import pathlib
    from lfadstools.datasets import load_collection
    dc = load_collection(pathlib.Path("path/to/collection"))
    dc.load_info()
    dc.compute_max_batch_size_for_train_to_test_ratio(4)
    ```
    """
    path = pathlib.Path(path)
    if not path.is_dir():
        msg = f"Collection directory {path} does not exist."
        raise FileNotFoundError(msg)

    dc = DatasetCollection(path, name=name, comment=comment)
    for sub in sorted(path.iterdir()):
        if is_dataset_dir(sub):
            Dataset(sub.name, dc, path=sub)

    logger.info(f"Found {dc.n_datasets} datasets in {path}")
    return dc
