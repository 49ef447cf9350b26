"""Interfaces to the LFADS scripts and the file system around a run."""

from .commands import (
    model_parameters_command,
    read_parameters,
    write_model_parameters,
)
from .permissions import chmod

__all__ = [
    "chmod",
    "model_parameters_command",
    "read_parameters",
    "write_model_parameters",
]
