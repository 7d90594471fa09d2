"""Build GitHub Actions workflows in Python and write them as YAML"""

from ._job import Concurrency, Container, Credentials, Job, RunDefaults
from ._sink import FileSink, LocalFileSink
from ._step import RunStep, Step, UsesStep, step_from_config
from ._validation import SHELLS, PersistenceError, ValidationError
from ._workflow import AUTOGENERATED_HEADER, WORKFLOWS_DIR, Workflow
from ._yaml import multiline

__version__ = "0.1.0"

__all__ = [
    "AUTOGENERATED_HEADER",
    "Concurrency",
    "Container",
    "Credentials",
    "FileSink",
    "Job",
    "LocalFileSink",
    "PersistenceError",
    "RunDefaults",
    "RunStep",
    "SHELLS",
    "Step",
    "UsesStep",
    "ValidationError",
    "WORKFLOWS_DIR",
    "Workflow",
    "multiline",
    "step_from_config",
]
