"""The dataset collection: a name-unique registry of datasets.

A `DatasetCollection` holds the datasets that are processed by LFADS as a
cohesive group, either stitched together into one model or fitted
individually. Besides membership bookkeeping it computes the quantities
that depend on all datasets at once, such as the largest batch size every
dataset can supply.
"""

import math
import pathlib
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Protocol, Self, Sequence, Union

import numpy as np
import numpy.typing as npt
import pandas as pd
from rich.console import Console

from lfadstools.datasets.models import Dataset
from lfadstools.utils.exceptions import NotFoundError
from lfadstools.utils.logger import make_logger
from lfadstools.utils.progress import ProgressCallback, no_progress

logger = make_logger(__name__)


class BatchParams(Protocol):
    """Anything that carries a batch size and a train/test ratio."""

    batch_size: int
    train_to_test_ratio: float


@dataclass(frozen=True)
class ByName:
    """Search datasets by their name."""

    names: tuple[str, ...]

    def lookup(self: Self, dc: "DatasetCollection") -> tuple[list, list]:
        positions = {name: i for i, name in enumerate(dc.dataset_names)}
        idx = [positions.get(name, -1) for name in self.names]
        return [i >= 0 for i in idx], idx

    def identifiers(self: Self) -> tuple:
        return self.names


@dataclass(frozen=True)
class ByInstance:
    """Search datasets by identity, not by name."""

    datasets: tuple[Dataset, ...]

    def lookup(self: Self, dc: "DatasetCollection") -> tuple[list, list]:
        positions = {id(ds): i for i, ds in enumerate(dc.datasets)}
        idx = [positions.get(id(ds), -1) for ds in self.datasets]
        return [i >= 0 for i in idx], idx

    def identifiers(self: Self) -> tuple:
        return tuple(ds.name for ds in self.datasets)


@dataclass(frozen=True)
class ByIndex:
    """Positions into the collection, always reported as present.

    Negative positions count from the end and are reported as the
    non-negative position they refer to.
    """

    indices: tuple[int, ...]

    def lookup(self: Self, dc: "DatasetCollection") -> tuple[list, list]:
        n = dc.n_datasets
        idx = [i + n if -n <= i < 0 else i for i in self.indices]
        return [True] * len(idx), idx

    def identifiers(self: Self) -> tuple:
        return self.indices


Search = Union[ByName, ByInstance, ByIndex]
SearchInput = Union[
    Search, str, Dataset, int, Sequence[str], Sequence[Dataset], Sequence[int]
]


def as_search(search: SearchInput) -> Search:
    """Wrap a raw search value into its tagged search variant.

    Parameters
    ----------
    - `search` : `SearchInput`
        A search variant, a name, a dataset, a position, or a sequence of
        one of those.

    Returns
    -------
    - `Search`
        `ByName`, `ByInstance` or `ByIndex`.

    Raises
    ------
    - `TypeError`
        If the sequence mixes kinds or holds anything else.
    """
    if isinstance(search, (ByName, ByInstance, ByIndex)):
        return search
    if isinstance(search, (str, Dataset, int, np.integer)):
        search = [search]

    items = list(search)
    if all(isinstance(s, str) for s in items):
        return ByName(tuple(items))
    if all(isinstance(s, Dataset) for s in items):
        return ByInstance(tuple(items))
    if all(
        isinstance(s, (int, np.integer)) and not isinstance(s, bool)
        for s in items
    ):
        return ByIndex(tuple(int(s) for s in items))

    msg = (
        "Dataset search must be names, Dataset instances or integer "
        "positions, not a mix."
    )
    raise TypeError(msg)


class DatasetCollection:
    """An ordered registry of datasets, unique by name.

    Parameters
    ----------
    - `path` : `Optional[pathlib.Path]`
        Root directory of the collection. Dataset directories are resolved
        relative to it. Can be omitted if datasets are given explicit paths.
    - `name` : `Optional[str]`
        Name of the collection. Defaults to the leaf folder of `path`.
    - `comment` : `str`
        Free text comment.

    Examples
    --------
    ```python
    from lfadstools.datasets import Dataset, DatasetCollection
    dc = DatasetCollection("path/to/collection")
    Dataset("session_01", dc)
    Dataset("session_02", dc)
    dc.load_info()
    max_batch_size, min_trials = (
        dc.compute_max_batch_size_for_train_to_test_ratio(4)
    )
    ```
    """

    def __init__(
        self: Self,
        path: Optional[Union[str, pathlib.Path]] = None,
        name: Optional[str] = None,
        comment: str = "",
    ) -> None:
        self.path = pathlib.Path(path) if path else None
        if name is None:
            name = self.path.name if self.path is not None else ""
        self.name = name
        self.comment = comment
        self._datasets: list[Dataset] = []

    @property
    def datasets(self: Self) -> tuple[Dataset, ...]:
        return tuple(self._datasets)

    @property
    def n_datasets(self: Self) -> int:
        return len(self._datasets)

    @property
    def dataset_names(self: Self) -> list[str]:
        return [ds.name for ds in self._datasets]

    @property
    def info_loaded(self: Self) -> bool:
        """True if the info of every dataset is loaded. Never loads."""
        return all(ds.info_loaded for ds in self._datasets)

    def __len__(self: Self) -> int:
        return len(self._datasets)

    def __iter__(self: Self) -> Iterator[Dataset]:
        return iter(self.datasets)

    def __contains__(self: Self, name: object) -> bool:
        return name in self.dataset_names

    def add_dataset(self: Self, ds: Dataset) -> None:
        """Add a dataset to the collection.

        Datasets register themselves when constructed with a collection,
        so calling this directly is rarely necessary. A dataset with the
        name of an existing one replaces it at the same position.

        Parameters
        ----------
        - `ds` : `Dataset`
            Dataset to add. Its collection is set to this collection.
        """
        names = self.dataset_names
        if ds.name in names:
            logger.info(
                f"Replacing existing dataset with matching name {ds.name}"
            )
            i = names.index(ds.name)
            if self._datasets[i] is not ds:
                self._release(self._datasets[i])
            self._datasets[i] = ds
        else:
            self._datasets.append(ds)
        ds.collection = self

    def _release(self: Self, ds: Dataset) -> None:
        """Detach a removed dataset, keeping the path it resolved to."""
        if ds.collection is self:
            ds.path = ds.path
            ds.collection = None

    def clear_datasets(self: Self) -> None:
        """Remove all datasets from this collection."""
        for ds in self._datasets:
            self._release(ds)
        self._datasets = []

    def ismember_dataset(
        self: Self, search: SearchInput
    ) -> tuple[npt.NDArray[np.bool_], npt.NDArray[np.int_]]:
        """Check which of the searched datasets are in this collection.

        Parameters
        ----------
        - `search` : `SearchInput`
            Names, `Dataset` instances or positions to look for. Instances
            are matched by identity.

        Returns
        -------
        - `tf` : `numpy.ndarray[bool]`
            Whether each searched dataset is in the collection.
        - `idx` : `numpy.ndarray[int]`
            Position of each searched dataset, -1 where it is missing.
        """
        tf, idx = as_search(search).lookup(self)
        return np.array(tf, dtype=bool), np.array(idx, dtype=int)

    def find_dataset(
        self: Self, search: SearchInput
    ) -> tuple[list[Dataset], npt.NDArray[np.int_]]:
        """Return the searched datasets.

        Parameters
        ----------
        - `search` : `SearchInput`
            Names, `Dataset` instances or positions to look for.

        Returns
        -------
        - `datasets` : `list[Dataset]`
            The datasets, in the order they were searched for.
        - `idx` : `numpy.ndarray[int]`
            Their positions in the collection.

        Raises
        ------
        - `NotFoundError`
            If any of the searched datasets is not in the collection.
        """
        search = as_search(search)
        tf, idx = self.ismember_dataset(search)
        if not np.all(tf):
            missing = [
                s for s, found in zip(search.identifiers(), tf) if not found
            ]
            raise NotFoundError(missing)
        return [self._datasets[i] for i in idx], idx

    def match_datasets_by_name(
        self: Self, names: Union[str, Sequence[str]]
    ) -> tuple[list[Dataset], npt.NDArray[np.int_]]:
        """Return the datasets matching the given names.

        Raises
        ------
        - `NotFoundError`
            Listing every name that is not in the collection.
        """
        if isinstance(names, str):
            names = [names]
        return self.find_dataset(ByName(tuple(names)))

    def load_info(
        self: Self,
        reload: bool = False,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        """Load the info of every dataset whose info is not loaded yet.

        Datasets with cached info are left as they are, so calling this
        again without `reload` does not touch the disk.

        Parameters
        ----------
        - `reload` : `bool`
            Load the info of every dataset again, even if cached.
        - `progress` : `Optional[ProgressCallback]`
            Called with (position, total, name) before each dataset is
            loaded. Errors raised by it are logged and ignored.

        Raises
        ------
        - `OSError`
            If a dataset fails to load. The remaining datasets are not
            loaded.
        """
        progress = progress if progress is not None else no_progress
        total = self.n_datasets
        for i, ds in enumerate(self.datasets, start=1):
            try:
                progress(i, total, ds.name)
            except Exception as e:  # noqa: BLE001
                logger.warning(f"Progress reporting failed: {e}")
            ds.load_info(reload=reload)

    def reload_info(
        self: Self, progress: Optional[ProgressCallback] = None
    ) -> None:
        """Load the info of every dataset again."""
        self.load_info(reload=True, progress=progress)

    def filter_datasets(
        self: Self, mask: Union[Sequence[bool], Sequence[int], npt.NDArray]
    ) -> None:
        """Retain a subset of the datasets, keeping their order.

        Parameters
        ----------
        - `mask` : `Union[Sequence[bool], Sequence[int]]`
            Boolean mask with one entry per dataset, or positions of the
            datasets to keep. Positions are kept in collection order and
            repeated positions count once.

        Raises
        ------
        - `ValueError`
            If a boolean mask does not match the number of datasets.
        - `IndexError`
            If a position is out of range.
        """
        mask = np.asarray(mask)
        if mask.dtype == bool:
            if mask.shape != (self.n_datasets,):
                msg = (
                    f"Mask has {mask.size} entries, but the collection holds "
                    f"{self.n_datasets} datasets."
                )
                raise ValueError(msg)
            keep = np.flatnonzero(mask)
        else:
            keep = mask.astype(int).ravel()
            for i in keep:
                if not -self.n_datasets <= i < self.n_datasets:
                    msg = (
                        f"Position {i} is out of range for "
                        f"{self.n_datasets} datasets."
                    )
                    raise IndexError(msg)
            keep = np.unique(keep % max(self.n_datasets, 1))

        kept = set(int(i) for i in keep)
        for i, ds in enumerate(self._datasets):
            if i not in kept:
                self._release(ds)
        self._datasets = [self._datasets[i] for i in keep]

    def filter_having_minimum_trials(self: Self, min_trials: int) -> None:
        """Keep datasets with at least `min_trials` trials.

        Uses the cached trial counts and does not load any info. Datasets
        whose info was never loaded count as having no trials.
        """
        n_trials = np.array([ds.n_trials for ds in self._datasets], dtype=int)
        self.filter_datasets(n_trials >= min_trials)

    def filter_having_minimum_trials_for_batch_size(
        self: Self, run_params: Iterable[BatchParams]
    ) -> int:
        """Keep datasets that support the batch size of every run.

        A dataset supports a run if it can be split into training and
        validation trials by the train/test ratio of the run while the
        training trials still fill a batch.

        Parameters
        ----------
        - `run_params` : `Iterable[BatchParams]`
            Run parameters with `batch_size` and `train_to_test_ratio`.

        Returns
        -------
        - `int`
            The minimum number of trials that was required.

        Raises
        ------
        - `ValueError`
            If no run parameters are given.
        """
        run_params = list(run_params)
        if not run_params:
            msg = "At least one set of run parameters is required."
            raise ValueError(msg)

        min_trials = max(
            math.ceil(p.batch_size * (p.train_to_test_ratio + 1))
            for p in run_params
        )
        self.filter_having_minimum_trials(min_trials)
        return min_trials

    def compute_max_batch_size_for_train_to_test_ratio(
        self: Self, train_to_test_ratio: float
    ) -> tuple[int, int]:
        """Compute the largest batch size every dataset can supply.

        Parameters
        ----------
        - `train_to_test_ratio` : `float`
            Ratio of training to validation trials. A negative ratio leaves
            no feasible batch size.

        Returns
        -------
        - `max_batch_size` : `int`
            Largest feasible batch size. Zero means no batch size is
            feasible.
        - `min_trials` : `int`
            Smallest trial count over all datasets, zero if the collection
            is empty.
        """
        if not self._datasets:
            return 0, 0
        min_trials = min(ds.n_trials for ds in self._datasets)
        if train_to_test_ratio < 0:
            return 0, int(min_trials)
        max_batch_size = math.floor(min_trials / (train_to_test_ratio + 1))
        return int(max_batch_size), int(min_trials)

    def get_dataset_info_table(self: Self) -> pd.DataFrame:
        """Build a table of the datasets and their metadata.

        Loads the info of datasets whose info is not loaded yet.

        Returns
        -------
        - `pandas.DataFrame`
            One row per dataset, indexed by name, with the columns
            `subject`, `date`, `save_tags`, `n_trials` and `n_channels`.
        """
        self.load_info()
        table = pd.DataFrame(
            {
                "subject": [ds.subject for ds in self._datasets],
                "date": [
                    pd.Timestamp(ds.collection_date)
                    if ds.collection_date is not None
                    else pd.NaT
                    for ds in self._datasets
                ],
                "save_tags": [",".join(ds.save_tags) for ds in self._datasets],
                "n_trials": [ds.n_trials for ds in self._datasets],
                "n_channels": [ds.n_channels for ds in self._datasets],
            },
            index=pd.Index(self.dataset_names, name="name"),
        )
        return table

    def copy(self: Self) -> "DatasetCollection":
        """Deep copy the collection.

        Every dataset is cloned and the clones belong to the copy, so
        changing either collection leaves the other one untouched.
        """
        cp = DatasetCollection.__new__(type(self))
        cp.__dict__.update(
            {k: v for k, v in self.__dict__.items() if k != "_datasets"}
        )
        cp._datasets = [ds.copy() for ds in self._datasets]
        for ds in cp._datasets:
            ds.collection = cp
        return cp

    def __copy__(self: Self) -> "DatasetCollection":
        return self.copy()

    def __deepcopy__(self: Self, memo: dict) -> "DatasetCollection":
        cp = self.copy()
        memo[id(self)] = cp
        for old, new in zip(self._datasets, cp._datasets):
            memo[id(old)] = new
        return cp

    def pprint(self: Self, console: Optional[Console] = None) -> None:
        """Print the collection and a line per dataset."""
        console = console if console is not None else Console()
        console.print(
            f'[bold]{type(self).__name__}[/bold] "{self.name}"\n'
            f"  {self.n_datasets} datasets in {self.path}"
        )
        for i, ds in enumerate(self._datasets, start=1):
            console.print(f"  [{i:2d}] {ds.first_line_header()}")

    def __repr__(self: Self) -> str:
        return (
            f"DatasetCollection({self.name!r}, path={self.path}, "
            f"n_datasets={self.n_datasets})"
        )
