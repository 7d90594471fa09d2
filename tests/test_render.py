import pytest
from pytest import param

from conftest import load
from ghaflow import (
    Concurrency,
    Container,
    Credentials,
    Job,
    RunDefaults,
    RunStep,
    UsesStep,
    Workflow,
    multiline,
)


def test_run_step_has_no_shell_or_working_directory_unless_set():
    workflow = Workflow(filename="ci.yml", on="push")
    job = Job(runs_on="ubuntu-latest")
    job.add_step(RunStep(run="echo hi"))
    workflow.add_job("build", job)

    document = load(workflow.to_yaml())

    step = document["jobs"]["build"]["steps"][0]  # type: ignore
    assert step["run"] == "echo hi"
    assert "shell" not in step
    assert "working-directory" not in step


def test_minimal_workflow_text():
    workflow = Workflow(filename="ci.yml", on="push")
    job = Job(runs_on="ubuntu-latest")
    job.add_step(RunStep(run="echo hi"))
    workflow.add_job("build", job)

    assert workflow.to_yaml() == (
        "on: push\n"
        "jobs:\n"
        "  build:\n"
        "    runs-on: ubuntu-latest\n"
        "    steps:\n"
        "      - run: echo hi\n"
    )


def test_rendering_twice_gives_identical_text(ci_workflow: Workflow):
    assert ci_workflow.to_yaml() == ci_workflow.to_yaml()


def test_rendering_does_not_change_the_workflow(ci_workflow: Workflow):
    before = repr(ci_workflow)

    ci_workflow.to_yaml()

    assert repr(ci_workflow) == before


def test_top_level_key_order():
    workflow = Workflow(
        filename="ci.yml",
        concurrency="ci",
        defaults=RunDefaults(shell="bash"),
        env={"A": "1"},
        on="push",
        name="CI",
    )

    assert list(workflow.to_dict()) == [
        "name",
        "on",
        "env",
        "defaults",
        "concurrency",
        "jobs",
    ]


def test_workflow_without_jobs_renders_empty_jobs():
    workflow = Workflow(filename="ci.yml", on="push")

    assert workflow.to_dict() == {"on": "push", "jobs": {}}


def test_job_key_order():
    job = Job(
        concurrency=Concurrency(group="g", cancel_in_progress=True),
        secrets={"token": "${{ secrets.TOKEN }}"},
        with_={"level": 1},
        uses="octo/repo/.github/workflows/x.yml@main",
        services={"db": Container(image="postgres:16")},
        container=Container(image="node:18"),
        continue_on_error=True,
        timeout_minutes=5,
        steps=[RunStep(run="make")],
        if_="success()",
        defaults=RunDefaults(working_directory="app"),
        env={"A": "1"},
        outputs={"version": "${{ steps.v.outputs.version }}"},
        runs_on="ubuntu-latest",
        permissions={"contents": "read"},
        needs="lint",
        name="Build",
    )
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", job)

    assert list(workflow.to_dict()["jobs"]["build"]) == [
        "name",
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
    ]


@pytest.mark.parametrize(
    "step, expected_keys",
    [
        param(
            RunStep(
                timeout_minutes=3,
                continue_on_error=True,
                env={"A": "1"},
                shell="bash",
                working_directory="app",
                run="make",
                name="Make",
                if_="always()",
            ),
            [
                "if",
                "name",
                "run",
                "working-directory",
                "shell",
                "env",
                "continue-on-error",
                "timeout-minutes",
            ],
            id="run",
        ),
        param(
            UsesStep(
                timeout_minutes=3,
                continue_on_error=True,
                env={"A": "1"},
                with_={"fetch-depth": 0},
                uses="actions/checkout@v4",
                name="Checkout",
                if_="always()",
            ),
            [
                "if",
                "name",
                "uses",
                "with",
                "env",
                "continue-on-error",
                "timeout-minutes",
            ],
            id="uses",
        ),
    ],
)
def test_step_key_order(step: RunStep | UsesStep, expected_keys: list[str]):
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", Job(runs_on="ubuntu-latest", steps=[step]))

    rendered_step = workflow.to_dict()["jobs"]["build"]["steps"][0]

    assert list(rendered_step) == expected_keys


def test_unset_properties_are_omitted():
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job(
        "build",
        Job(
            runs_on="ubuntu-latest",
            steps=[RunStep(run="make"), UsesStep(uses="actions/checkout@v4")],
        ),
    )

    assert workflow.to_dict() == {
        "on": "push",
        "jobs": {
            "build": {
                "runs-on": "ubuntu-latest",
                "steps": [{"run": "make"}, {"uses": "actions/checkout@v4"}],
            }
        },
    }


@pytest.mark.parametrize(
    "job",
    [
        param(Job(runs_on="ubuntu-latest", name=""), id="empty name"),
        param(Job(runs_on="ubuntu-latest", env={}), id="empty env"),
        param(Job(runs_on="ubuntu-latest", continue_on_error=False), id="false flag"),
        param(Job(runs_on="ubuntu-latest", timeout_minutes=0), id="zero timeout"),
        param(Job(runs_on="ubuntu-latest", steps=[]), id="no steps"),
    ],
)
def test_falsy_properties_are_omitted(job: Job):
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", job)

    assert workflow.to_dict()["jobs"]["build"] == {"runs-on": "ubuntu-latest"}


def test_container_and_services_render():
    job = Job(
        runs_on="ubuntu-latest",
        container=Container(
            image="ghcr.io/acme/build:1",
            credentials=Credentials(username="bot", password="${{ secrets.PAT }}"),
            ports=[80],
        ),
        services={"redis": Container(image="redis:7", options="--health-cmd 'redis-cli ping'")},
    )
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", job)

    document = load(workflow.to_yaml())

    rendered = document["jobs"]["build"]  # type: ignore
    assert rendered["container"] == {
        "image": "ghcr.io/acme/build:1",
        "credentials": {"username": "bot", "password": "${{ secrets.PAT }}"},
        "ports": [80],
    }
    assert rendered["services"] == {
        "redis": {"image": "redis:7", "options": "--health-cmd 'redis-cli ping'"}
    }


def test_concurrency_renders_group_and_flag():
    workflow = Workflow(
        filename="ci.yml",
        on="push",
        concurrency=Concurrency(group="${{ github.ref }}", cancel_in_progress=True),
    )

    assert workflow.to_dict()["concurrency"] == {
        "group": "${{ github.ref }}",
        "cancel-in-progress": True,
    }


def test_trigger_filters_render(ci_workflow: Workflow):
    document = load(ci_workflow.to_yaml())

    assert document["on"] == {"push": {"branches": ["main"]}, "pull_request": None}


def test_long_command_is_not_wrapped():
    command = "docker build " + " ".join(f"--build-arg ARG_{i}=value_{i}" for i in range(30))
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", Job(runs_on="ubuntu-latest", steps=[RunStep(run=command)]))

    text = workflow.to_yaml()

    assert f"- run: {command}\n" in text


def test_multiline_command_is_a_block_scalar():
    command = "npm ci\nnpm test\n"
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", Job(runs_on="ubuntu-latest", steps=[RunStep(run=command)]))

    text = workflow.to_yaml()

    assert "- run: |\n" in text
    assert load(text)["jobs"]["build"]["steps"][0]["run"] == command  # type: ignore


def test_shared_values_are_not_aliased():
    env = {"NODE_VERSION": "18"}
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("a", Job(runs_on="ubuntu-latest", env=env))
    workflow.add_job("b", Job(runs_on="ubuntu-latest", env=env))

    text = workflow.to_yaml()

    assert "&" not in text
    assert "*" not in text
    assert load(text)["jobs"]["b"]["env"] == env  # type: ignore


def test_uses_inputs_keep_nested_values():
    step = UsesStep(
        uses="docker://alpine:3",
        with_={"args": "echo hi", "entrypoint": "/bin/sh", "retries": 2, "debug": True},
    )
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", Job(runs_on="ubuntu-latest", steps=[step]))

    rendered = load(workflow.to_yaml())["jobs"]["build"]["steps"][0]  # type: ignore

    assert rendered["with"] == {
        "args": "echo hi",
        "entrypoint": "/bin/sh",
        "retries": 2,
        "debug": True,
    }


def test_extras_are_not_rendered():
    step = RunStep.from_config({"run": "make", "id": "build"})
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", Job(runs_on="ubuntu-latest", steps=[step]))

    assert workflow.to_dict()["jobs"]["build"]["steps"] == [{"run": "make"}]


def test_multiline_helper_dedents_script():
    script = multiline(
        """\
        set -e
        make build
        """
    )
    workflow = Workflow(filename="ci.yml", on="push")
    workflow.add_job("build", Job(runs_on="ubuntu-latest", steps=[RunStep(run=script)]))

    rendered = load(workflow.to_yaml())["jobs"]["build"]["steps"][0]  # type: ignore

    assert rendered["run"] == "set -e\nmake build\n"


@pytest.mark.parametrize(
    "defaults",
    [param({}, id="no run"), param({"run": {}}, id="empty run")],
)
def test_empty_defaults_are_omitted(defaults: dict[str, object]):
    workflow = Workflow.from_config("ci.yml", {"on": "push", "defaults": defaults})
    workflow.add_job(
        "build", Job.from_config({"runs-on": "ubuntu-latest", "defaults": defaults})
    )

    document = workflow.to_dict()

    assert "defaults" not in document
    assert "defaults" not in document["jobs"]["build"]
    assert "run: {}" not in workflow.to_yaml()
