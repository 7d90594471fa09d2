from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, assert_never, cast

from . import _github_actions as gh
from ._job import Concurrency, Container, Job, RunDefaults
from ._step import Step
from ._yaml import literal

if TYPE_CHECKING:
    from ._workflow import Workflow


def render_workflow(workflow: Workflow) -> gh.Workflow:
    """Returns the workflow document with only the properties that are set"""
    out: gh.Workflow = {}
    if workflow.name:
        out["name"] = workflow.name
    out["on"] = _plain(workflow.on)  # type: ignore
    if workflow.env:
        out["env"] = _plain(workflow.env)  # type: ignore
    if defaults := _render_defaults(workflow.defaults):
        out["defaults"] = defaults
    if workflow.concurrency:
        out["concurrency"] = _render_concurrency(workflow.concurrency)
    out["jobs"] = {
        job_id: render_job(job) for job_id, job in (workflow.jobs or {}).items()
    }
    return out


# pylint: disable-next=too-many-branches  # one per optional key
def render_job(job: Job) -> gh.Job:
    """Returns the job document with only the properties that are set"""
    out: gh.Job = {}
    if job.name:
        out["name"] = job.name
    if job.needs:
        out["needs"] = _plain(job.needs)  # type: ignore
    if job.permissions:
        out["permissions"] = _plain(job.permissions)  # type: ignore
    out["runs-on"] = _plain(job.runs_on)  # type: ignore
    if job.outputs:
        out["outputs"] = _plain(job.outputs)  # type: ignore
    if job.env:
        out["env"] = _plain(job.env)  # type: ignore
    if defaults := _render_defaults(job.defaults):
        out["defaults"] = defaults
    if job.if_:
        out["if"] = job.if_
    if job.steps:
        out["steps"] = [render_step(step) for step in job.steps]
    if job.timeout_minutes:
        out["timeout-minutes"] = job.timeout_minutes
    if job.continue_on_error:
        out["continue-on-error"] = job.continue_on_error
    if job.container:
        out["container"] = _render_container(job.container)
    if job.services:
        out["services"] = {
            service_id: _render_container(service)
            for service_id, service in job.services.items()
        }
    if job.uses:
        out["uses"] = job.uses
    if job.with_:
        out["with"] = _plain(job.with_)  # type: ignore
    if job.secrets:
        out["secrets"] = _plain(job.secrets)  # type: ignore
    if job.concurrency:
        out["concurrency"] = _render_concurrency(job.concurrency)
    return out


def render_step(step: Step) -> gh.Step:
    """Returns the step document with only the properties that are set"""
    out: gh.Step = {}
    if step.if_:
        out["if"] = step.if_
    if step.name:
        out["name"] = step.name
    match step.kind:
        case "run":
            out["run"] = literal(step.run)
            if step.working_directory:
                out["working-directory"] = step.working_directory
            if step.shell:
                out["shell"] = step.shell
        case "uses":
            out["uses"] = step.uses
            if step.with_:
                out["with"] = _plain(step.with_)  # type: ignore
        case _:
            assert_never(step.kind)
    if step.env:
        out["env"] = _plain(step.env)  # type: ignore
    if step.continue_on_error:
        out["continue-on-error"] = step.continue_on_error
    if step.timeout_minutes:
        out["timeout-minutes"] = step.timeout_minutes
    return out


def _render_defaults(defaults: RunDefaults | None) -> gh.Defaults | None:
    if defaults is None:
        return None
    run: gh.RunDefaults = {}
    if defaults.shell:
        run["shell"] = defaults.shell
    if defaults.working_directory:
        run["working-directory"] = defaults.working_directory
    if not run:
        return None
    return {"run": run}


def _render_concurrency(concurrency: str | Concurrency) -> str | gh.Concurrency:
    if isinstance(concurrency, str):
        return concurrency
    out: gh.Concurrency = {"group": concurrency.group}
    if concurrency.cancel_in_progress is not None:
        out["cancel-in-progress"] = concurrency.cancel_in_progress
    return out


def _render_container(container: Container) -> gh.Container:
    out: gh.Container = {"image": container.image}
    if container.credentials:
        out["credentials"] = {
            "username": container.credentials.username,
            "password": container.credentials.password,
        }
    if container.env:
        out["env"] = _plain(container.env)  # type: ignore
    if container.ports:
        out["ports"] = _plain(container.ports)  # type: ignore
    if container.volumes:
        out["volumes"] = _plain(container.volumes)  # type: ignore
    if container.options:
        out["options"] = container.options
    return out


def _plain(obj: object) -> object:
    """Returns a copy made of plain dicts and lists

    The model's own mappings are never handed to the dumper, so rendering
    can't mutate them and repeated values never become YAML aliases.
    """
    match obj:
        case str() | float() | int() | bool() | None:
            return obj
        case Mapping():
            obj_ = cast(Mapping[str, object], obj)
            return {k: _plain(v) for k, v in obj_.items()}
        case list() | tuple():
            return [_plain(element) for element in obj]
        case _:
            raise TypeError(f"Unsupported value type {obj.__class__.__name__}")
