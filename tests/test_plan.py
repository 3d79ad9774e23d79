from pathlib import Path

import pytest

from jobmatrix import job, matrix, sh, sql
from jobmatrix.errors import UnboundPlaceholderError
from jobmatrix.plan import load_workflow, plan_job, plan_workflow

WORKFLOW = """\
from jobmatrix import wf, job, sh, sql, matrix


def workflow():
    return wf(
        job("seed", sh("seed", "./seed.sh"), matrix=matrix(day=["mon", "tue"])),
        job("check", sql("count", "select count(*) from t where day = :day"), matrix=matrix(day=["mon"])),
    )
"""


def _write(tmp_path: Path, text: str, name: str = "my_workflow.py") -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_plan_shell_step_env():
    j = job("seed", sh("seed", "./seed.sh", cwd="db"), env={"LEVEL": "1"}, matrix=matrix(x=["1", "2"]))
    got = plan_job(j)

    assert [si.env for si in got] == [
        {"LEVEL": "1", "PGQ_INSTANCE_X": "1"},
        {"LEVEL": "1", "PGQ_INSTANCE_X": "2"},
    ]
    assert all(si.run == "./seed.sh" and si.cwd == "db" for si in got)
    assert [si.index for si in got] == [0, 1]


def test_plan_instance_env_overrides_job_env():
    j = job("seed", sh("seed", "true"), env={"PGQ_INSTANCE_X": "job"}, matrix=matrix(x=["inst"]))
    assert plan_job(j)[0].env == {"PGQ_INSTANCE_X": "inst"}


def test_plan_sql_step():
    j = job("load", sql("load", "select f(:x, :y)"), matrix=matrix(x=["1", "2"], y=["3"]))
    got = plan_job(j)

    assert [(si.run, si.args) for si in got] == [
        ("select f($1, $2)", ["1", "3"]),
        ("select f($1, $2)", ["2", "3"]),
    ]
    assert all(si.env == {} for si in got)


def test_plan_is_step_major():
    j = job("x", sh("a", "echo a"), sql("b", "select :n"), matrix=matrix(n=["1", "2"]))
    got = plan_job(j)
    assert [(si.step, si.index) for si in got] == [("a", 0), ("a", 1), ("b", 0), ("b", 1)]


def test_plan_step_instances_do_not_share_arguments():
    j = job("x", sh("a", "echo a"), sh("b", "echo b"), matrix=matrix(n=["1"]))
    a, b = plan_job(j)
    a.arguments["n"] = "changed"
    assert b.arguments == {"n": "1"}


def test_plan_unbound_placeholder():
    j = job("x", sql("q", "select :missing"), matrix=matrix(n=["1"]))
    with pytest.raises(UnboundPlaceholderError):
        plan_job(j)
    assert plan_job(j, strict=False)[0].run == "select :missing"


def test_plan_empty_value_list_has_no_instances():
    j = job("x", sh("a", "echo"), matrix=matrix(n=[]))
    assert plan_job(j) == []


def test_to_dict():
    j = job("x", sql("q", "select :n"), matrix=matrix(n=["1"]))
    assert plan_job(j)[0].to_dict() == {
        "job": "x",
        "step": "q",
        "kind": "sql",
        "index": 0,
        "arguments": {"n": "1"},
        "run": "select $1",
        "cwd": None,
        "env": {},
        "args": ["1"],
    }


def test_load_workflow_function(tmp_path: Path):
    jobs = load_workflow(_write(tmp_path, WORKFLOW))
    assert [j.name for j in jobs] == ["seed", "check"]


def test_load_workflow_jobs_constant(tmp_path: Path):
    text = "from jobmatrix import job, sh\nJOBS = [job('a', sh('s', 'true'))]\n"
    assert [j.name for j in load_workflow(_write(tmp_path, text))] == ["a"]


def test_load_workflow_missing(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_workflow(tmp_path / "nope.py")


def test_load_workflow_not_python(tmp_path: Path):
    with pytest.raises(ValueError):
        load_workflow(_write(tmp_path, "JOBS = []", name="wf.yaml"))


def test_load_workflow_wrong_type(tmp_path: Path):
    with pytest.raises(TypeError):
        load_workflow(_write(tmp_path, "JOBS = 'nope'\n"))


def test_load_workflow_duplicate_names(tmp_path: Path):
    text = "from jobmatrix import job, sh\nJOBS = [job('a', sh('s', 'true')), job('a', sh('s', 'true'))]\n"
    with pytest.raises(ValueError, match="Duplicate"):
        load_workflow(_write(tmp_path, text))


def test_plan_workflow_only(tmp_path: Path):
    jobs = load_workflow(_write(tmp_path, WORKFLOW))
    got = plan_workflow(jobs, only=["check"])
    assert list(got) == ["check"]
    assert got["check"][0].run == "select count(*) from t where day = $1"

    with pytest.raises(ValueError, match="Unknown job"):
        plan_workflow(jobs, only=["nope"])
