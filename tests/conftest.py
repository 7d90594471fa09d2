import io

import pytest
from ruamel.yaml import YAML

from ghaflow import Job, RunStep, UsesStep, Workflow


def load(text: str) -> dict[str, object]:
    """Parses rendered YAML back into plain Python objects"""
    return YAML(typ="safe").load(io.StringIO(text))


@pytest.fixture
def ci_workflow() -> Workflow:
    workflow = Workflow(
        filename="ci.yml",
        name="CI",
        on={"push": {"branches": ["main"]}, "pull_request": None},
        env={"PYTHONUNBUFFERED": "1"},
    )
    build = Job(runs_on="ubuntu-latest", name="Build")
    build.add_step(UsesStep(uses="actions/checkout@v4"))
    build.add_step(
        UsesStep(uses="actions/setup-python@v5", with_={"python-version": "3.12"})
    )
    build.add_step(RunStep(name="Test", run="pytest", shell="bash"))
    workflow.add_job("build", build)
    return workflow
