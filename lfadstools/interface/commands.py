"""Build the command lines that invoke the LFADS scripts.

The commands are written to disk and logged, never executed here.
"""

import json
import pathlib
import shlex
from typing import Any, Optional

from lfadstools.utils.configfiles import LfadsConfig
from lfadstools.utils.logger import make_logger

logger = make_logger(__name__)

default_command_file = pathlib.Path("/tmp/lfadspmcmd")

# Parameters that describe the training data and must not be passed again.
dataset_fields = ("dataset_names", "dataset_dims")


def read_parameters(lfads_dir: pathlib.Path) -> dict[str, Any]:
    """Read the hyperparameters saved by a trained LFADS model.

    Parameters
    ----------
    - `lfads_dir` : `pathlib.Path`
        Directory of the trained network.

    Returns
    -------
    - `dict[str, Any]`
        The hyperparameters.

    Raises
    ------
    - `FileNotFoundError`
        If no hyperparameters file is found in the directory.
    """
    files = sorted(pathlib.Path(lfads_dir).glob("hyperparameters*.txt"))
    if len(files) == 0:
        msg = f"No hyperparameters file found in {lfads_dir}"
        raise FileNotFoundError(msg)

    with open(files[0], encoding="utf-8") as f:
        return json.load(f)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def model_parameters_command(
    lfads_dir: pathlib.Path,
    lfads: LfadsConfig,
    **overrides: Any,
) -> str:
    """Build the command that writes the parameters of a trained model.

    Parameters
    ----------
    - `lfads_dir` : `pathlib.Path`
        Directory of the trained network.
    - `lfads` : `LfadsConfig`
        Location of the LFADS scripts.
    - `**overrides` : `Any`
        Hyperparameters to add or replace, e.g. `batch_size=512` or
        `checkpoint_pb_load_name="checkpoint_lve"`. `device` selects the
        GPU through `CUDA_VISIBLE_DEVICES` instead.

    Returns
    -------
    - `str`
        The shell command.
    """
    params = read_parameters(lfads_dir)
    for field in dataset_fields:
        params.pop(field, None)

    use_controller = bool(params.get("ci_enc_dim", 0))
    script = lfads.script if use_controller else lfads.script_no_controller
    script_path = lfads.path.expanduser() / script

    env = ""
    for key, value in overrides.items():
        if key.lower() == "device":
            env = f"CUDA_VISIBLE_DEVICES={int(value)} "
        else:
            params[key] = value

    params["kind"] = "write_model_params"
    options = " ".join(
        f"--{key}={shlex.quote(_format_value(value))}"
        for key, value in params.items()
    )
    return f"{env}python {shlex.quote(str(script_path))} {options}"


def write_model_parameters(
    lfads_dir: pathlib.Path,
    lfads: LfadsConfig,
    command_file: Optional[pathlib.Path] = None,
    **overrides: Any,
) -> str:
    """Write the command that samples the posterior of a trained model.

    See `model_parameters_command` for the parameters. The command is
    written to `command_file` (default `/tmp/lfadspmcmd`) and returned.
    """
    cmd = model_parameters_command(lfads_dir, lfads, **overrides)
    command_file = (
        pathlib.Path(command_file)
        if command_file is not None
        else default_command_file
    )
    command_file.write_text(cmd + "\n", encoding="utf-8")
    logger.info(f"Command written to {command_file}: {cmd}")
    return cmd
