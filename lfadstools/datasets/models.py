"""Data classes for datasets that are fed to LFADS."""

import datetime
import pathlib
import weakref
from typing import TYPE_CHECKING, Dict, Optional, Self, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    NonNegativeInt,
    field_validator,
)
from rich.pretty import pprint as rpprint

if TYPE_CHECKING:
    from lfadstools.datasets.collection import DatasetCollection


def _pprint(obj: BaseModel) -> None:
    """Recursively pretty-print the attributes of an object."""

    def collect_vars(obj: BaseModel) -> Optional[Dict[str, str]]:
        """Collect all variables of a BaseModel object."""
        if isinstance(obj, BaseModel):
            result = {}
            for key, value in obj.__dict__.items():
                if not key.startswith("_") and value is not None:
                    if isinstance(value, BaseModel):
                        result[key] = collect_vars(value)
                    else:
                        result[key] = value
            return result
        return None

    return rpprint(collect_vars(obj), expand_all=True)


class DatasetInfo(BaseModel):
    """Metadata of a single dataset.

    All check functions are automatically run when the object is instantiated.

    Parameters
    ----------
    - `subject` : `str`
        Identifier of the recorded subject.
    - `collection_date` : `Optional[datetime.date]`
        Date the data was recorded on.
    - `save_tags` : `list[str]`
        Tags of the saved data blocks that make up the dataset.
    - `n_channels` : `int`
        Number of recorded channels (neurons).
    - `n_trials` : `int`
        Number of trials.

    Methods
    -------
    - `pprint()`
        Pretty-print the attributes of the object.

    Raises
    ------
    - `ValidationError`
        If a count is negative or a field has the wrong type.
    """

    model_config = ConfigDict(frozen=False)
    subject: str = ""
    collection_date: Optional[datetime.date] = None
    save_tags: list[str] = []
    n_channels: NonNegativeInt = 0
    n_trials: NonNegativeInt = 0

    @field_validator("save_tags", mode="before")
    @classmethod
    def _coerce_save_tags(
        cls: type[Self], v: Union[str, int, list, None]
    ) -> list[str]:
        """Accept a single tag or a comma separated string of tags.

        Parameters
        ----------
        - `v` : `Union[str, int, list, None]`
            The raw save tags.

        Returns
        -------
        - `list[str]`
            The save tags as a list of strings.
        """
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        if isinstance(v, int):
            return [str(v)]
        return [str(t) for t in v]

    def pprint(self: Self) -> None:
        """Pretty-print the attributes of the object."""
        _pprint(self)


class Dataset:
    """A named unit of recorded data with lazily loaded metadata.

    Constructing a dataset with a collection registers it into that
    collection. The dataset only keeps a weak reference to the collection,
    which owns it.

    Subclasses can override `read_info` to load metadata from other file
    layouts.

    Parameters
    ----------
    - `name` : `str`
        Name of the dataset, unique within its collection.
    - `collection` : `Optional[DatasetCollection]`
        Collection to add the dataset to.
    - `path` : `Optional[pathlib.Path]`
        Directory holding the data. Defaults to the dataset name inside the
        collection path.

    Examples
    --------
    ```python
    from lfadstools.datasets import Dataset, DatasetCollection
    dc = DatasetCollection("path/to/collection")
    ds = Dataset("session_01", dc)
    ds.load_info()
    ds.n_trials
    ```
    """

    def __init__(
        self: Self,
        name: str,
        collection: Optional["DatasetCollection"] = None,
        path: Optional[pathlib.Path] = None,
    ) -> None:
        self.name = name
        self.info: Optional[DatasetInfo] = None
        self._collection: Optional[weakref.ref] = None
        self.path = path

        if collection is not None:
            collection.add_dataset(self)

    @property
    def path(self: Self) -> Optional[pathlib.Path]:
        """Directory of the dataset.

        Without an explicit path this is the dataset name inside the path of
        the collection that currently holds the dataset.
        """
        if self._path is not None:
            return self._path
        collection = self.collection
        if collection is not None and collection.path is not None:
            return pathlib.Path(collection.path) / self.name
        return None

    @path.setter
    def path(self: Self, value: Optional[pathlib.Path]) -> None:
        self._path = pathlib.Path(value) if value is not None else None

    @property
    def collection(self: Self) -> Optional["DatasetCollection"]:
        """The collection that currently holds this dataset."""
        if self._collection is None:
            return None
        return self._collection()

    @collection.setter
    def collection(self: Self, value: Optional["DatasetCollection"]) -> None:
        self._collection = weakref.ref(value) if value is not None else None

    @property
    def info_loaded(self: Self) -> bool:
        return self.info is not None

    @property
    def subject(self: Self) -> Optional[str]:
        return self.info.subject if self.info is not None else None

    @property
    def collection_date(self: Self) -> Optional[datetime.date]:
        return self.info.collection_date if self.info is not None else None

    @property
    def save_tags(self: Self) -> list[str]:
        return list(self.info.save_tags) if self.info is not None else []

    @property
    def n_channels(self: Self) -> int:
        return self.info.n_channels if self.info is not None else 0

    @property
    def n_trials(self: Self) -> int:
        return self.info.n_trials if self.info is not None else 0

    def read_info(self: Self) -> DatasetInfo:
        """Read the metadata of this dataset from disk.

        Returns
        -------
        - `DatasetInfo`
            The metadata found in the dataset directory.

        Raises
        ------
        - `FileNotFoundError`
            If the dataset has no path or no metadata files.
        """
        from lfadstools.datasets.loaders import load_info

        if self.path is None:
            msg = f"Dataset {self.name} has no path to load info from."
            raise FileNotFoundError(msg)
        return load_info(self.path)

    def load_info(self: Self, reload: bool = False) -> None:
        """Load the metadata unless it is loaded already.

        Parameters
        ----------
        - `reload` : `bool`
            Load the metadata again even if it is cached.
        """
        if self.info is None or reload:
            self.info = self.read_info()

    def reload_info(self: Self) -> None:
        """Load the metadata again, discarding the cached copy."""
        self.load_info(reload=True)

    def first_line_header(self: Self) -> str:
        """Single line summary used when displaying a collection."""
        if not self.info_loaded:
            return f"{self.name} (info not loaded)"
        return (
            f"{self.name} subject {self.subject} "
            f"({self.n_trials} trials, {self.n_channels} channels)"
        )

    def copy(self: Self) -> "Dataset":
        """Clone the dataset without its collection.

        The metadata is copied too, so changing the clone does not change
        this dataset. The clone keeps the path the dataset resolves to now.
        """
        clone = object.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone._collection = None
        clone._path = self.path
        clone.info = (
            self.info.model_copy(deep=True) if self.info is not None else None
        )
        return clone

    def __copy__(self: Self) -> "Dataset":
        return self.copy()

    def __deepcopy__(self: Self, memo: dict) -> "Dataset":
        clone = self.copy()
        memo[id(self)] = clone
        return clone

    def __repr__(self: Self) -> str:
        return f"Dataset({self.name!r}, path={self.path})"
