"""
Test loading datasets and collections from disk.
"""

import datetime

import numpy as np
import pytest
from pydantic import ValidationError

from conftest import write_dataset
from lfadstools.datasets import (
    Dataset,
    DatasetCollection,
    DatasetInfo,
    load_collection,
    load_info,
    load_spikes,
)


def test_load_info(collection_dir):
    # Happy path, load mock data
    info = load_info(collection_dir / "ds_a")
    assert isinstance(info, DatasetInfo)
    assert info.subject == "M1"
    assert info.collection_date == datetime.date(2020, 1, 1)
    assert info.save_tags == ["1", "2"]
    assert info.n_trials == 100
    assert info.n_channels == 3


def test_load_info_counts_from_toml(tmp_path):
    path = tmp_path / "ds"
    path.mkdir()
    (path / "info.toml").write_text(
        'subject = "M3"\ndate = "2021-05-06"\nsave_tags = "1, 4"\n'
        "n_trials = 12\nn_channels = 30\n"
    )
    info = load_info(path)
    assert info.collection_date == datetime.date(2021, 5, 6)
    assert info.save_tags == ["1", "4"]
    assert (info.n_trials, info.n_channels) == (12, 30)


def test_load_info_spikes_only(tmp_path):
    path = write_dataset(tmp_path / "ds", 7, n_channels=2)
    info = load_info(path)
    assert info.subject == ""
    assert info.collection_date is None
    assert (info.n_trials, info.n_channels) == (7, 2)


def test_load_info_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_info(tmp_path)


def test_load_info_bad_spikes(tmp_path):
    path = tmp_path / "ds"
    path.mkdir()
    np.save(path / "spikes.npy", np.zeros((4, 5)))
    with pytest.raises(ValueError):
        load_info(path)


def test_load_info_negative_trials(tmp_path):
    path = tmp_path / "ds"
    path.mkdir()
    (path / "info.toml").write_text("n_trials = -1\n")
    with pytest.raises(ValidationError):
        load_info(path)


def test_load_collection(collection_dir):
    dc = load_collection(collection_dir)
    assert isinstance(dc, DatasetCollection)
    assert dc.name == "collection"
    assert dc.path == collection_dir
    assert dc.dataset_names == ["ds_a", "ds_b", "ds_c"]
    assert not dc.info_loaded

    dc.load_info()
    assert dc.info_loaded
    assert [ds.n_trials for ds in dc] == [100, 150, 80]
    assert dc.datasets[1].save_tags == ["3"]
    assert dc.compute_max_batch_size_for_train_to_test_ratio(3) == (20, 80)


def test_load_collection_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_collection(tmp_path / "nothing")


def test_dataset_load_info(collection_dir):
    dc = DatasetCollection(collection_dir)
    ds = Dataset("ds_c", dc)
    assert not ds.info_loaded
    assert ds.n_trials == 0
    assert ds.subject is None
    assert ds.save_tags == []

    ds.load_info()
    assert ds.info_loaded
    assert ds.subject == "M2"
    assert ds.n_trials == 80
    assert "ds_c subject M2 (80 trials, 3 channels)" == ds.first_line_header()


def test_dataset_without_path():
    ds = Dataset("floating")
    with pytest.raises(FileNotFoundError):
        ds.load_info()


def test_dataset_info_table_from_disk(collection_dir):
    dc = load_collection(collection_dir)
    table = dc.get_dataset_info_table()
    assert list(table["n_trials"]) == [100, 150, 80]
    assert list(table["subject"]) == ["M1", "M1", "M2"]
    assert table.loc["ds_a", "save_tags"] == "1,2"
    assert str(table.loc["ds_b", "date"].date()) == "2020-01-02"


def test_load_spikes(collection_dir):
    dc = load_collection(collection_dir)
    spikes = load_spikes(dc.datasets[0])
    assert spikes.shape == (100, 5, 3)

    with pytest.raises(FileNotFoundError):
        load_spikes(Dataset("floating"))


def test_info_pprint(collection_dir, capsys):
    load_info(collection_dir / "ds_b").pprint()
    out = capsys.readouterr().out
    assert "subject" in out
    assert "n_trials" in out
