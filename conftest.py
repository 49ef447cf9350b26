"""
This module provides dataset generation functions for the testing suite
of the lfadstools package.
"""
import datetime

import numpy as np
import pytest
import toml

from lfadstools.datasets import Dataset, DatasetCollection, DatasetInfo


def write_dataset(path, n_trials, n_channels=3, n_timesteps=5, **info):
    """Write a dataset directory with spikes and an info file."""
    path.mkdir(parents=True)
    rng = np.random.default_rng(42)
    spikes = rng.poisson(1.0, size=(n_trials, n_timesteps, n_channels))
    np.save(path / "spikes.npy", spikes)
    if info:
        with open(path / "info.toml", "w") as f:
            toml.dump(info, f)
    return path


@pytest.fixture(name="collection_dir")
def fixture_collection_dir(tmp_path):
    """
    Creates a temporary collection directory with three datasets holding
    100, 150 and 80 trials. This is a pytest fixture, so it is automatically
    passed to each test function that uses it.
    """
    root = tmp_path / "collection"
    write_dataset(
        root / "ds_a",
        100,
        subject="M1",
        date=datetime.date(2020, 1, 1),
        save_tags=[1, 2],
    )
    write_dataset(
        root / "ds_b",
        150,
        subject="M1",
        date=datetime.date(2020, 1, 2),
        save_tags="3",
    )
    write_dataset(root / "ds_c", 80, subject="M2")
    # not a dataset, must be skipped
    (root / "notes").mkdir()
    return root


@pytest.fixture(name="collection")
def fixture_collection():
    """
    Creates an in-memory collection with three datasets of 100, 150 and 80
    trials whose info counts as loaded.
    """
    dc = DatasetCollection(name="test_collection")
    for name, n_trials in zip(["A", "B", "C"], [100, 150, 80]):
        ds = Dataset(name, dc)
        ds.info = DatasetInfo(subject="M1", n_trials=n_trials, n_channels=10)
    return dc
