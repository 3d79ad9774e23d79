# src/jobmatrix/dsl.py
from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from .matrix import MatrixArgs
from .model import STEP_KINDS, Job, Step


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def sh(name: str, cmd: str, *, cwd: str | None = None) -> Step:
    """Create a shell step."""
    return Step(name=name, run=cmd, cwd=cwd, kind="sh")


def sql(name: str, query: str) -> Step:
    """Create a query step. Use :name placeholders for matrix arguments."""
    return Step(name=name, run=query, kind="sql")


# ---------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------

def matrix(**args: Iterable[Any]) -> MatrixArgs:
    """
    Build matrix arguments; values are forced to str.

    Example:
        job("load", sql("load", "select load(:day, :shard)"),
            matrix=matrix(day=["mon", "tue"], shard=range(4)))
    """
    return MatrixArgs(args)


# ---------------------------------------------------------------------
# Functional Job helper
# ---------------------------------------------------------------------

def job(
    name: str,
    *steps: Step,  # allow: job("x", sh(...), sql(...))
    steps_list: Optional[List[Step]] = None,  # allow: job("x", steps_list=[...])
    env: Optional[Dict[str, str]] = None,
    matrix: Optional[Dict[str, Iterable[Any]]] = None,
    cwd: str | None = None,  # default cwd applied to shell steps missing cwd
) -> Job:
    steps_final: List[Step] = []
    if steps_list:
        steps_final.extend(list(steps_list))
    steps_final.extend(list(steps))

    if not steps_final:
        raise ValueError(f"job({name!r}) must have at least one step")

    for s in steps_final:
        if s.kind not in STEP_KINDS:
            raise ValueError(f"job({name!r}) step {s.name!r} has unknown kind {s.kind!r}")

    if cwd is not None:
        steps_final = [
            s if s.cwd is not None or s.kind != "sh" else replace(s, cwd=cwd)
            for s in steps_final
        ]

    return Job(
        name=name,
        steps=steps_final,
        # force values to str for env compatibility
        env={k: str(v) for k, v in (env or {}).items()},
        matrix=MatrixArgs(matrix or {}),
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, name: str):
        self.name = name
        self._steps: list[Step] = []
        self._env: dict[str, str] = {}
        self._matrix = MatrixArgs()

    def define_step(self, name: str, run: str, cwd: str | None = None):
        self._steps.append(sh(name, run, cwd=cwd))
        return self

    def define_query(self, name: str, query: str):
        self._steps.append(sql(name, query))
        return self

    def with_env(self, **env):
        self._env.update({k: str(v) for k, v in env.items()})
        return self

    def with_matrix(self, arg: str, *values: Any):
        self._matrix[arg] = list(self._matrix.get(arg, [])) + list(values)
        return self

    def build(self) -> Job:
        return job(self.name, steps_list=self._steps, env=self._env, matrix=self._matrix)


def build(name: str) -> JobBuilder:
    """Convenience: build('load').define_query(...).with_matrix('day', 'mon').build()"""
    return JobBuilder(name)


# ---------------------------------------------------------------------
# Workflow helper (single-file story)
# ---------------------------------------------------------------------

def wf(*jobs: Job) -> List[Job]:
    """
    Workflow definition helper.

        from jobmatrix import wf, job, sh, sql, matrix

        def workflow():
            return wf(
                job("seed", sh("seed", "./seed.sh $PGQ_INSTANCE_DAY"), matrix=matrix(day=["mon", "tue"])),
                job("check", sql("count", "select count(*) from t where day = :day"), matrix=matrix(day=["mon"])),
            )
    """
    return list(jobs)
