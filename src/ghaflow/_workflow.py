from __future__ import annotations

import io
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from . import _github_actions as gh
from ._job import Concurrency, Job, RunDefaults
from ._render import render_workflow
from ._sink import FileSink, LocalFileSink
from ._validation import (
    ValidationError,
    is_json_array,
    is_json_object,
    to_json_array_of_strings,
    to_json_object,
)
from ._yaml import create_yaml

logger = logging.getLogger(__name__)

WORKFLOWS_DIR = PurePosixPath(".github", "workflows")

AUTOGENERATED_HEADER = (
    "# This file is autogenerated. Do not modify manually.\n"
    "# Edit the workflow definition and regenerate it instead.\n"
    "\n"
)

EVENT_FILTERS = ("types", "branches", "branches-ignore", "paths", "paths-ignore")

# Trigger: an event, a list of events, or event -> filters
On = str | Sequence[str] | Mapping[str, object]


def check_on(on: object) -> None:  # pylint: disable=invalid-name
    """Checks the workflow trigger

    Raises:
        ValidationError: if it's missing, or an event's filter isn't an array
    """
    # An empty list or mapping counts as given
    if on is None or on == "":
        raise ValidationError("The 'on' property is required at 'workflow'.")
    if isinstance(on, str):
        return
    if is_json_array(on):
        to_json_array_of_strings(on, "on")
        return

    for event, filters in to_json_object(on, "on").items():
        # Events such as `schedule` or a bare `workflow_dispatch` aren't filter maps
        if not is_json_object(filters):
            continue
        for key in EVENT_FILTERS:
            value = filters.get(key)
            if value is not None and not is_json_array(value):
                raise ValidationError(
                    f"The '{key}' property for event '{event}' must be an array."
                )


@dataclass(kw_only=True, slots=True)
class Workflow:
    """A GitHub Actions workflow, written to `.github/workflows/<filename>`

    Jobs are added with `add_job` and written in the order they were added.
    """

    filename: str
    on: On | None = None  # pylint: disable=invalid-name
    name: str | None = None
    env: Mapping[str, str] | None = None
    defaults: RunDefaults | None = None
    concurrency: str | Concurrency | None = None
    jobs: dict[str, Job] = field(default_factory=dict)

    def __post_init__(self):
        check_on(self.on)
        if is_json_object(self.defaults):
            self.defaults = RunDefaults.from_config(self.defaults, "defaults")
        if self.defaults is not None:
            if not isinstance(self.defaults, RunDefaults):
                raise ValidationError(
                    "Expected a RunDefaults or an object at 'defaults'"
                    f" but found {self.defaults.__class__.__name__}"
                )
            self.defaults.validate()
        if is_json_object(self.concurrency):
            self.concurrency = Concurrency.from_config(self.concurrency, "concurrency")
        if self.concurrency is not None and not isinstance(
            self.concurrency, (str, Concurrency)
        ):
            raise ValidationError(
                "Expected a string or an object at 'concurrency'"
                f" but found {self.concurrency.__class__.__name__}"
            )

    @classmethod
    def from_config(cls, filename: str, config: Mapping[str, object]) -> Workflow:
        """Creates a workflow from a mapping using GitHub Actions key names

        Args:
            filename: name of the file under `.github/workflows`
            config: `name`, `on`, `env`, `defaults` and `concurrency`

        Returns:
            the workflow, without jobs

        Raises:
            ValidationError: if the configuration is invalid
        """
        config = to_json_object(config, "workflow")
        check_on(config.get("on"))

        defaults = config.get("defaults")
        concurrency = config.get("concurrency")
        env = config.get("env")
        return cls(
            filename=filename,
            on=config["on"],  # type: ignore
            name=config.get("name"),  # type: ignore
            env=None if env is None else to_json_object(env, "env"),  # type: ignore
            defaults=(
                None
                if defaults is None
                else RunDefaults.from_config(defaults, "defaults")
            ),
            concurrency=(
                None
                if concurrency is None
                else Concurrency.from_config(concurrency, "concurrency")
            ),
        )

    def add_job(self, job_id: str, job: Job) -> None:
        """Adds a job, replacing any job already added with the same id"""
        if self.jobs is None:
            self.jobs = {}
        self.jobs[job_id] = job

    @property
    def path(self) -> PurePosixPath:
        """Where the workflow is written, relative to the repository root"""
        return WORKFLOWS_DIR / self.filename

    def to_dict(self) -> gh.Workflow:
        """Returns the workflow document"""
        return render_workflow(self)

    def to_yaml(self) -> str:
        """Returns the workflow as YAML"""
        logger.debug(
            "Rendering workflow %s with %d jobs", self.filename, len(self.jobs or {})
        )
        stream = io.StringIO()
        create_yaml().dump(self.to_dict(), stream)  # type: ignore
        return stream.getvalue()

    def write_to_file(self, sink: FileSink | None = None) -> PurePosixPath:
        """Writes the workflow with the autogenerated header

        Args:
            sink: where to write, the current working directory when not given

        Returns:
            the path written, relative to the sink

        Raises:
            PersistenceError: (or whatever the sink raises) if it couldn't be written
        """
        if sink is None:
            sink = LocalFileSink()
        path = self.path
        contents = AUTOGENERATED_HEADER + self.to_yaml()
        try:
            sink.ensure_directory(path.parent)
            sink.write_file(path, contents)
        except Exception as err:
            logger.error("Error writing workflow file %s: %s", path, err)
            raise
        logger.info("Wrote %s", path)
        return path
