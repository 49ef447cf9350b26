"""# Datasets.

Classes and functions to collect, inspect and export the datasets that are
fed to LFADS.

The main functionalities include the following:
- lfadstools.datasets.DatasetCollection: A name-unique registry of datasets
that computes quantities across all of them, like the largest batch size
every dataset can supply.
- lfadstools.datasets.load_collection: Build a collection from a directory.
- lfadstools.datasets.export_spikes: Write spike trains to the HDF5 file
read by LFADS.

## Architecture and design principles

- **Ownership**: A `DatasetCollection` owns its datasets. Each `Dataset`
only keeps a weak reference back to the collection that holds it, and only
the collection sets it.
- **Lazy metadata**: The metadata of a dataset (`DatasetInfo`) is read from
disk the first time it is needed and validated on construction.

## Usage

```python
import pathlib
from lfadstools.datasets import load_collection
dc = load_collection(pathlib.Path("path/to/collection"))
dc.load_info()
dc.compute_max_batch_size_for_train_to_test_ratio(4)
```

To keep only the datasets that can feed every run of a run config:
```python
from lfadstools.utils.configfiles import load_run_config
config = load_run_config(pathlib.Path("runconfig.toml"))
dc.filter_having_minimum_trials_for_batch_size(config.params)
dc.get_dataset_info_table()
```
"""

from .collection import ByIndex, ByInstance, ByName, DatasetCollection
from .loaders import load_collection, load_info, load_spikes
from .models import Dataset, DatasetInfo
from .savers import export_spikes, split_and_export, split_trials

__all__ = [
    "ByIndex",
    "ByInstance",
    "ByName",
    "Dataset",
    "DatasetCollection",
    "DatasetInfo",
    "export_spikes",
    "load_collection",
    "load_info",
    "load_spikes",
    "split_and_export",
    "split_trials",
]
