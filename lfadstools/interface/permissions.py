"""Change file permissions of run directories shared with other users."""

import pathlib
import subprocess
from typing import Iterable, Union

from lfadstools.utils.logger import make_logger

logger = make_logger(__name__)


def chmod(
    permissions: str,
    paths: Union[str, pathlib.Path, Iterable[Union[str, pathlib.Path]]],
    recursive: bool = False,
    print_error: bool = True,
) -> tuple[int, str]:
    """Run `chmod` on one or more paths.

    Parameters
    ----------
    - `permissions` : `str`
        Mode in any form accepted by `chmod`, e.g. `"g+rwx"` or `"755"`.
        An empty string does nothing.
    - `paths` : `Union[str, pathlib.Path, Iterable]`
        Path or paths to change. They are made absolute first.
    - `recursive` : `bool`
        Pass `-R` to `chmod`.
    - `print_error` : `bool`
        Log a warning if `chmod` fails.

    Returns
    -------
    - `status` : `int`
        Exit status of `chmod`.
    - `output` : `str`
        Combined output of `chmod`.
    """
    if not permissions:
        return 0, ""

    if isinstance(paths, (str, pathlib.Path)):
        paths = [paths]
    files = [str(pathlib.Path(p).expanduser().absolute()) for p in paths]

    cmd = ["chmod"]
    if recursive:
        cmd.append("-R")
    cmd += [permissions, *files]

    result = subprocess.run(
        cmd, capture_output=True, text=True, check=False
    )
    output = result.stdout + result.stderr

    if result.returncode and print_error:
        logger.warning(f"Error running chmod: {output.strip()}")

    return result.returncode, output
