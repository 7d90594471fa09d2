"""Shapes of the rendered GitHub Actions workflow document"""

from __future__ import annotations

from typing import TypedDict

_Dict = dict[str, object]

RunDefaults = TypedDict(
    "RunDefaults",
    {
        "shell": str,
        "working-directory": str,
    },
    total=False,
)


class Defaults(TypedDict):
    """`defaults` of a workflow or job"""

    run: RunDefaults


Concurrency = TypedDict(
    "Concurrency",
    {
        "group": str,
        "cancel-in-progress": bool,
    },
    total=False,
)


class Credentials(TypedDict):
    """Registry credentials for a container"""

    username: str
    password: str


class Container(TypedDict, total=False):
    """A job container or service container"""

    image: str
    credentials: Credentials
    env: dict[str, str]
    ports: list[int | str]
    volumes: list[str]
    options: str


Step = TypedDict(
    "Step",
    {
        "if": str,
        "name": str,
        "run": str,
        "working-directory": str,
        "shell": str,
        "uses": str,
        "with": _Dict,
        "env": dict[str, str],
        "continue-on-error": bool,
        "timeout-minutes": int | float,
    },
    total=False,
)

Job = TypedDict(
    "Job",
    {
        "name": str,
        "needs": str | list[str],
        "permissions": str | dict[str, str],
        "runs-on": str | list[str],
        "outputs": dict[str, str],
        "env": dict[str, str],
        "defaults": Defaults,
        "if": str,
        "steps": list[Step],
        "timeout-minutes": int | float,
        "continue-on-error": bool,
        "container": Container,
        "services": dict[str, Container],
        "uses": str,
        "with": _Dict,
        "secrets": str | dict[str, str],
        "concurrency": str | Concurrency,
    },
    total=False,
)

Workflow = TypedDict(
    "Workflow",
    {
        "name": str,
        "on": str | list[str] | _Dict,
        "env": dict[str, str],
        "defaults": Defaults,
        "concurrency": str | Concurrency,
        "jobs": dict[str, Job],
    },
    total=False,
)
