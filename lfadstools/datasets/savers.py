"""Functions for exporting datasets in the format read by LFADS."""

import pathlib
from typing import Optional

import h5py
import numpy as np
import numpy.typing as npt

from lfadstools.datasets.loaders import load_spikes
from lfadstools.datasets.models import Dataset
from lfadstools.utils.exceptions import BadOutputDirError
from lfadstools.utils.logger import make_logger

logger = make_logger(__name__)


def _check_output_dir(outfile: pathlib.Path) -> None:
    if not outfile.parent.exists():
        msg = (
            f"Output directory {outfile.parent} does not exist. "
            "Please provide an existing directory."
        )
        raise BadOutputDirError(msg)


def export_spikes(
    outfile: pathlib.Path,
    y_train: npt.NDArray,
    y_test: npt.NDArray,
    **extra: npt.ArrayLike,
) -> pathlib.Path:
    """Export binned spike trains to an HDF5 file that LFADS can read.

    Parameters
    ----------
    - `outfile` : `pathlib.Path`
        File to write. An existing file is overwritten.
    - `y_train` : `numpy.ndarray`
        Spike counts to train the model on, shaped
        `(n_trials, n_timesteps, n_neurons)`.
    - `y_test` : `numpy.ndarray`
        Spike counts to validate the model on, same layout as `y_train`.
    - `**extra` : `numpy.typing.ArrayLike`
        Additional arrays stored as datasets under their keyword. Boolean
        arrays are stored as `uint8`, vectors are stored one-dimensional.

    Returns
    -------
    - `pathlib.Path`
        The absolute path of the written file.

    Raises
    ------
    - `ValueError`
        If the training or validation data are not three-dimensional.
    - `BadOutputDirError`
        If the directory of `outfile` does not exist.

    Examples
    --------
    ```python
    import pathlib
    from lfadstools.datasets import export_spikes
    export_spikes(pathlib.Path("lfads_input.h5"), y_train, y_test,
                  train_inds=train_inds, valid_inds=valid_inds)
    ```
    """
    outfile = pathlib.Path(outfile).expanduser().resolve()
    _check_output_dir(outfile)

    for label, y in (("y_train", y_train), ("y_test", y_test)):
        if np.ndim(y) != 3:
            msg = (
                f"{label} must have three dimensions "
                f"(trials, timesteps, neurons), got {np.ndim(y)}."
            )
            raise ValueError(msg)

    if outfile.exists():
        outfile.unlink()

    with h5py.File(outfile, "w") as f:
        f.create_dataset("train_data", data=np.asarray(y_train, dtype=int))
        f.create_dataset("valid_data", data=np.asarray(y_test, dtype=int))
        for key, value in extra.items():
            data = np.asarray(value)
            if data.dtype == bool:
                data = data.astype(np.uint8)
            if data.ndim > 1 and sum(s > 1 for s in data.shape) <= 1:
                data = data.ravel()
            f.create_dataset(key, data=data)

    logger.info(f"Exported spikes to {outfile}")
    return outfile


def split_trials(
    n_trials: int, train_to_test_ratio: float, seed: Optional[int] = 0
) -> tuple[npt.NDArray[np.int_], npt.NDArray[np.int_]]:
    """Randomly split trial indices into training and validation trials.

    Parameters
    ----------
    - `n_trials` : `int`
        Number of trials to split.
    - `train_to_test_ratio` : `float`
        Ratio of training to validation trials.
    - `seed` : `Optional[int]`
        Seed for the random split.

    Returns
    -------
    - `train_inds` : `numpy.ndarray[int]`
        Sorted indices of training trials.
    - `valid_inds` : `numpy.ndarray[int]`
        Sorted indices of validation trials.
    """
    n_train = int(
        np.floor(n_trials * train_to_test_ratio / (train_to_test_ratio + 1))
    )
    perm = np.random.default_rng(seed).permutation(n_trials)
    return np.sort(perm[:n_train]), np.sort(perm[n_train:])


def split_and_export(
    dataset: Dataset,
    outfile: pathlib.Path,
    train_to_test_ratio: float,
    seed: Optional[int] = 0,
) -> pathlib.Path:
    """Split the spikes of a dataset and export them for LFADS.

    The trial indices of both partitions are stored as `train_inds` and
    `valid_inds` alongside the data.

    Parameters
    ----------
    - `dataset` : `Dataset`
        Dataset whose spikes are exported.
    - `outfile` : `pathlib.Path`
        File to write.
    - `train_to_test_ratio` : `float`
        Ratio of training to validation trials.
    - `seed` : `Optional[int]`
        Seed for the random split.

    Returns
    -------
    - `pathlib.Path`
        The absolute path of the written file.
    """
    spikes = load_spikes(dataset)
    train_inds, valid_inds = split_trials(
        spikes.shape[0], train_to_test_ratio, seed=seed
    )
    return export_spikes(
        outfile,
        spikes[train_inds],
        spikes[valid_inds],
        train_inds=train_inds,
        valid_inds=valid_inds,
    )
