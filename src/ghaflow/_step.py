from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar, Literal

from ._validation import (
    Value,
    ValidationError,
    check_required,
    check_shell,
    to_json_object,
    to_string,
)

_COMMON_KEYS = ("if", "name", "env", "continue-on-error", "timeout-minutes")

_Dict = dict[str, object]


@dataclass(kw_only=True, slots=True)
class _BaseStep:
    if_: str | None = None
    name: str | None = None
    env: Mapping[str, str] | None = None
    continue_on_error: bool | None = None
    timeout_minutes: int | float | None = None
    # Unrecognised config keys, kept but never rendered
    extras: dict[str, object] = field(default_factory=dict)


def _common_fields(config: Mapping[str, object], known: tuple[str, ...]) -> _Dict:
    env = config.get("env")
    return {
        "if_": config.get("if"),
        "name": config.get("name"),
        "env": None if env is None else to_json_object(env, "step.env"),
        "continue_on_error": config.get("continue-on-error"),
        "timeout_minutes": config.get("timeout-minutes"),
        "extras": {k: v for k, v in config.items() if k not in known},
    }


@dataclass(kw_only=True, slots=True)
class RunStep(_BaseStep):
    """A step running an inline command"""

    kind: ClassVar[Literal["run"]] = "run"

    run: str = ""
    working_directory: str | None = None
    shell: str | None = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Checks the command is present and the shell is supported

        Raises:
            ValidationError: if the step is invalid
        """
        check_required(self.run, "run", "step")
        to_string(self.run, "step.run")
        check_shell(self.shell, "step.shell")

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> RunStep:
        """Creates a run step from a mapping using GitHub Actions key names"""
        config = to_json_object(config, "step")
        known = (*_COMMON_KEYS, "run", "working-directory", "shell")
        return cls(
            run=config.get("run", ""),  # type: ignore
            working_directory=config.get("working-directory"),  # type: ignore
            shell=config.get("shell"),  # type: ignore
            **_common_fields(config, known),  # type: ignore
        )


@dataclass(kw_only=True, slots=True)
class UsesStep(_BaseStep):
    """A step invoking a packaged action

    `with_` holds the action inputs; `args` and `entrypoint` are ordinary entries.
    """

    kind: ClassVar[Literal["uses"]] = "uses"

    uses: str = ""
    with_: Mapping[str, Value] | None = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Checks the action reference is present

        Raises:
            ValidationError: if the step is invalid
        """
        check_required(self.uses, "uses", "step")
        to_string(self.uses, "step.uses")

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> UsesStep:
        """Creates a uses step from a mapping using GitHub Actions key names"""
        config = to_json_object(config, "step")
        inputs = config.get("with")
        return cls(
            uses=config.get("uses", ""),  # type: ignore
            with_=None if inputs is None else to_json_object(inputs, "step.with"),  # type: ignore
            **_common_fields(config, (*_COMMON_KEYS, "uses", "with")),  # type: ignore
        )


Step = RunStep | UsesStep


def step_from_config(config: Mapping[str, object], location: str = "step") -> Step:
    """Creates whichever step variant the mapping describes

    Args:
        config: the step using GitHub Actions key names
        location: location of the step to use in exception messages

    Returns:
        a `RunStep` if the config has `run`, a `UsesStep` if it has `uses`

    Raises:
        ValidationError: if it has both or neither
    """
    config = to_json_object(config, location)
    has_run = "run" in config
    has_uses = "uses" in config
    if has_run and has_uses:
        raise ValidationError(
            f"A step can't have both 'run' and 'uses' at '{location}'."
        )
    if has_run:
        to_string(config["run"], f"{location}.run")
        return RunStep.from_config(config)
    if has_uses:
        to_string(config["uses"], f"{location}.uses")
        return UsesStep.from_config(config)
    raise ValidationError(f"A step needs either 'run' or 'uses' at '{location}'.")
