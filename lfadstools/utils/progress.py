"""Progress reporting for sequential passes over datasets.

A progress callback takes the 1-based position of the current item, the
total number of items and a label describing the item. Passing `None`
wherever a callback is accepted disables reporting.
"""

from typing import Callable, Optional, Self

from rich.progress import Progress, TaskID

ProgressCallback = Callable[[int, int, str], None]


def no_progress(position: int, total: int, label: str) -> None:
    """Ignore progress updates."""


class RichProgress:
    """Adapt a `rich.progress.Progress` bar to the progress callback API.

    Parameters
    ----------
    - `description` : `str`
        Text shown in front of the bar.
    - `progress` : `Optional[Progress]`
        An existing progress display to add the task to. A new one is
        created if omitted.

    Examples
    --------
    ```python
    from lfadstools.utils.progress import RichProgress
    with RichProgress("Loading info") as prog:
        dc.load_info(progress=prog)
    ```
    """

    def __init__(
        self: Self,
        description: str = "Loading info",
        progress: Optional[Progress] = None,
    ) -> None:
        self.description = description
        self.progress = progress if progress is not None else Progress()
        self.task: Optional[TaskID] = None

    def __enter__(self: Self) -> Self:
        self.progress.start()
        return self

    def __exit__(self: Self, *exc: object) -> None:
        self.progress.stop()

    def __call__(self: Self, position: int, total: int, label: str) -> None:
        if self.task is None:
            self.task = self.progress.add_task(self.description, total=total)
        self.progress.update(
            self.task,
            completed=position,
            total=total,
            description=f"{self.description}: {label}",
        )
