"""
Test progress reporting and timing helpers.
"""

import io

from rich.console import Console
from rich.progress import Progress

from lfadstools.datasets import Dataset, DatasetCollection, DatasetInfo
from lfadstools.utils.logger import Timer, make_logger
from lfadstools.utils.progress import RichProgress, no_progress


class StaticDataset(Dataset):
    def read_info(self):
        return DatasetInfo(n_trials=5)


def test_no_progress():
    assert no_progress(1, 2, "a") is None


def test_rich_progress():
    console = Console(file=io.StringIO())
    dc = DatasetCollection(name="dc")
    StaticDataset("a", dc)
    StaticDataset("b", dc)

    with RichProgress("Loading", Progress(console=console)) as prog:
        dc.load_info(progress=prog)

    task = prog.progress.tasks[0]
    assert task.total == 2
    assert task.completed == 2
    assert task.description == "Loading: b"


def test_timer():
    out = io.StringIO()
    console = Console(file=out)
    with Timer(console, "counting") as timer:
        sum(range(10))
    assert timer.elapsed >= 0
    assert "counting" in out.getvalue()


def test_make_logger_no_duplicate_handlers(tmp_path):
    logfile = tmp_path / "log.txt"
    logger = make_logger("lfadstools.test", logfile=logfile)
    n_handlers = len(logger.handlers)
    make_logger("lfadstools.test")
    assert len(logger.handlers) == n_handlers

    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in logfile.read_text()
