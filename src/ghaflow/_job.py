from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ._step import RunStep, Step, UsesStep, step_from_config
from ._validation import (
    Value,
    ValidationError,
    check_permissions,
    check_required,
    check_shell,
    is_json_object,
    to_json_array,
    to_json_array_of_strings,
    to_json_object,
    to_string,
)

_JOB_KEYS = (
    "name",
    "environment",
    "needs",
    "permissions",
    "runs-on",
    "outputs",
    "env",
    "defaults",
    "if",
    "steps",
    "timeout-minutes",
    "continue-on-error",
    "container",
    "services",
    "uses",
    "with",
    "secrets",
    "concurrency",
)


@dataclass(frozen=True, slots=True)
class Credentials:
    """Registry credentials for a container image"""

    username: str
    password: str


@dataclass(kw_only=True, slots=True)
class Container:
    """A job container, also the shape of each service container"""

    image: str = ""
    credentials: Credentials | None = None
    env: Mapping[str, str] | None = None
    ports: Sequence[int | str] | None = None
    volumes: Sequence[str] | None = None
    options: str | None = None

    @classmethod
    def from_config(cls, config: object, location: str) -> Container:
        """Creates a container from a mapping using GitHub Actions key names"""
        config = to_json_object(config, location)
        credentials = config.get("credentials")
        if credentials is not None:
            credentials_ = to_json_object(credentials, f"{location}.credentials")
            credentials = Credentials(
                username=to_string(
                    credentials_.get("username"), f"{location}.credentials.username"
                ),
                password=to_string(
                    credentials_.get("password"), f"{location}.credentials.password"
                ),
            )
        ports = config.get("ports")
        volumes = config.get("volumes")
        return cls(
            image=config.get("image", ""),  # type: ignore
            credentials=credentials,  # type: ignore
            env=config.get("env"),  # type: ignore
            ports=None if ports is None else to_json_array(ports, f"{location}.ports"),  # type: ignore
            volumes=(
                None
                if volumes is None
                else to_json_array_of_strings(volumes, f"{location}.volumes")
            ),
            options=config.get("options"),  # type: ignore
        )


@dataclass(frozen=True, slots=True)
class Concurrency:
    """Only one run in `group` at a time, optionally cancelling the older one"""

    group: str
    cancel_in_progress: bool | None = None

    @classmethod
    def from_config(cls, config: object, location: str) -> str | Concurrency:
        """Accepts the group-name shorthand or a `group`/`cancel-in-progress` map"""
        if isinstance(config, (str, Concurrency)):
            return config
        config = to_json_object(config, location)
        return cls(
            group=to_string(config.get("group"), f"{location}.group"),
            cancel_in_progress=config.get("cancel-in-progress"),  # type: ignore
        )


@dataclass(kw_only=True, slots=True)
class RunDefaults:
    """`defaults.run` of a workflow or job"""

    shell: str | None = None
    working_directory: str | None = None
    location: str = field(default="defaults.run", repr=False, compare=False)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Checks the shell is one GitHub Actions supports"""
        check_shell(self.shell, f"{self.location}.shell")

    @classmethod
    def from_config(cls, config: object, location: str) -> RunDefaults:
        """Creates the run defaults from a `defaults` mapping"""
        config = to_json_object(config, location)
        run = to_json_object(config.get("run", {}), f"{location}.run")
        return cls(
            shell=run.get("shell"),  # type: ignore
            working_directory=run.get("working-directory"),  # type: ignore
            location=f"{location}.run",
        )


@dataclass(kw_only=True, slots=True)
class Job:
    """A job of a workflow: a runner selection plus steps or a reusable workflow

    Attributes are named after the GitHub Actions keys, with `-` replaced by `_`
    and a trailing `_` on Python keywords (`if_`, `with_`).
    """

    runs_on: str | Sequence[str] | None = None
    name: str | None = None
    environment: str | None = None
    needs: str | Sequence[str] | None = None
    permissions: str | Mapping[str, str] | None = None
    outputs: Mapping[str, str] | None = None
    env: Mapping[str, str] | None = None
    defaults: RunDefaults | None = None
    if_: str | None = None
    timeout_minutes: int | float | None = None
    continue_on_error: bool | None = None
    container: Container | None = None
    services: Mapping[str, Container] | None = None
    uses: str | None = None
    with_: Mapping[str, Value] | None = None
    secrets: str | Mapping[str, str] | None = None
    concurrency: str | Concurrency | None = None
    steps: list[Step] = field(default_factory=list)
    # Unrecognised config keys, kept but never rendered
    extras: dict[str, object] = field(default_factory=dict)

    def __post_init__(self):
        if self.steps is None:
            self.steps = []
        # Nested settings may be given as mappings with GitHub Actions key names
        if is_json_object(self.defaults):
            self.defaults = RunDefaults.from_config(self.defaults, "job.defaults")
        if is_json_object(self.container):
            self.container = Container.from_config(self.container, "job.container")
        if self.services is not None:
            self.services = {
                service_id: Container.from_config(
                    service, f"job.services.{service_id}"
                )
                if is_json_object(service)
                else service
                for service_id, service in to_json_object(
                    self.services, "job.services"
                ).items()
            }
        if is_json_object(self.concurrency):
            self.concurrency = Concurrency.from_config(
                self.concurrency, "job.concurrency"
            )
        self.validate()

    def add_step(self, step: Step) -> None:
        """Appends a step

        The step isn't validated again here; call `validate` after mutating.
        """
        if self.steps is None:
            self.steps = []
        self.steps.append(step)

    def validate(self) -> None:
        """Checks the job and re-checks each of its steps

        Raises:
            ValidationError: if the job or one of its steps is invalid
        """
        check_required(self.runs_on, "runs-on", "job")
        if not isinstance(self.runs_on, str):
            to_json_array_of_strings(self.runs_on, "job.runs-on")

        if self.needs is not None and not isinstance(self.needs, str):
            to_json_array_of_strings(self.needs, "job.needs")

        if self.permissions is not None:
            check_permissions(self.permissions, "job.permissions")

        if self.defaults is not None:
            _check_type(self.defaults, RunDefaults, "job.defaults")
            self.defaults.validate()

        if self.container is not None:
            _check_type(self.container, Container, "job.container")
            check_required(self.container.image, "image", "job.container")

        for service_id, service in (self.services or {}).items():
            location = f"job.services.{service_id}"
            _check_type(service, Container, location)
            check_required(service.image, "image", location)

        if self.concurrency is not None and not isinstance(self.concurrency, str):
            _check_type(self.concurrency, Concurrency, "job.concurrency")

        for step in self.steps or []:
            step.validate()

    @classmethod
    def from_config(cls, config: Mapping[str, object], location: str = "job") -> Job:
        """Creates a job from a mapping using GitHub Actions key names

        `steps` entries may be steps already or mappings with `run` or `uses`.

        Args:
            config: the job configuration
            location: location of the job to use in exception messages

        Returns:
            the validated job

        Raises:
            ValidationError: if the job or one of its parts is invalid
        """
        config = to_json_object(config, location)

        defaults = config.get("defaults")
        container = config.get("container")
        services = config.get("services")
        concurrency = config.get("concurrency")
        with_ = config.get("with")

        return cls(
            runs_on=config.get("runs-on"),  # type: ignore
            name=config.get("name"),  # type: ignore
            environment=config.get("environment"),  # type: ignore
            needs=config.get("needs"),  # type: ignore
            permissions=config.get("permissions"),  # type: ignore
            outputs=config.get("outputs"),  # type: ignore
            env=config.get("env"),  # type: ignore
            defaults=(
                None
                if defaults is None
                else RunDefaults.from_config(defaults, f"{location}.defaults")
            ),
            if_=config.get("if"),  # type: ignore
            timeout_minutes=config.get("timeout-minutes"),  # type: ignore
            continue_on_error=config.get("continue-on-error"),  # type: ignore
            container=(
                None
                if container is None
                else Container.from_config(container, f"{location}.container")
            ),
            services=(
                None
                if services is None
                else {
                    service_id: Container.from_config(
                        service, f"{location}.services.{service_id}"
                    )
                    for service_id, service in to_json_object(
                        services, f"{location}.services"
                    ).items()
                }
            ),
            uses=config.get("uses"),  # type: ignore
            with_=None if with_ is None else to_json_object(with_, f"{location}.with"),  # type: ignore
            secrets=config.get("secrets"),  # type: ignore
            concurrency=(
                None
                if concurrency is None
                else Concurrency.from_config(concurrency, f"{location}.concurrency")
            ),
            steps=_steps_from_config(config.get("steps"), f"{location}.steps"),
            extras={k: v for k, v in config.items() if k not in _JOB_KEYS},
        )


def _steps_from_config(steps: object, location: str) -> list[Step]:
    if steps is None:
        return []
    return [
        step
        if isinstance(step, (RunStep, UsesStep))
        else step_from_config(step, f"{location}[{i}]")  # type: ignore
        for i, step in enumerate(to_json_array(steps, location))
    ]


def _check_type(obj: object, expected: type, location: str) -> None:
    if not isinstance(obj, expected):
        raise ValidationError(
            f"Expected a {expected.__name__} or an object at '{location}'"
            f" but found {obj.__class__.__name__}"
        )
