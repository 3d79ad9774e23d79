# plan.py
from __future__ import annotations

import runpy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .matrix import InstanceArguments
from .model import Job, Step
from .ui.console import get_console


@dataclass
class StepInstance:
    """
    One step of one job bound to one instance of the job's matrix.

    Shell steps: `run` is the command, `env` holds job env + PGQ_INSTANCE_* vars.
    Query steps: `run` is the rewritten query ($1, $2, ...), `args` the values.
    """
    job: str
    step: str
    kind: str
    index: int
    arguments: InstanceArguments
    run: str
    cwd: str | None = None
    env: Dict[str, str] = field(default_factory=dict)
    args: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "job": self.job,
            "step": self.step,
            "kind": self.kind,
            "index": self.index,
            "arguments": dict(self.arguments),
            "run": self.run,
            "cwd": self.cwd,
            "env": dict(self.env),
            "args": list(self.args),
        }


# ----------------------------------------------------------------------
# Workflow loading
# ----------------------------------------------------------------------

def load_workflow(path: str | Path) -> List[Job]:
    """
    Load a workflow Python file.

    Supported formats:
      1) def workflow() -> List[Job]
      2) JOBS = [Job, ...]

    Returns:
      List[Job]
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise ValueError(f"Workflow must be a .py file, got: {wf_path.name}")

    module_name = f"jobmatrix_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    jobs = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        jobs = globals_dict["workflow"]()
    elif "JOBS" in globals_dict:
        jobs = globals_dict["JOBS"]

    if not isinstance(jobs, list) or not all(isinstance(j, Job) for j in jobs):
        raise TypeError(
            "Workflow must return/define a List[Job]. "
            "Define workflow() -> List[Job] or JOBS = [Job, ...]."
        )

    names = [j.name for j in jobs]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise ValueError(f"Duplicate job names found: {dupes}")

    return jobs


# ----------------------------------------------------------------------
# Planning
# ----------------------------------------------------------------------

def plan_step(job: Job, step: Step, index: int, ia: InstanceArguments, *, strict: bool = True) -> StepInstance:
    if step.kind == "sql":
        query, args = ia.parse_query(step.run, strict=strict)
        return StepInstance(
            job=job.name, step=step.name, kind=step.kind, index=index,
            arguments=ia, run=query, args=args,
        )

    env = dict(job.env)
    env.update(ia.as_env_dict())
    return StepInstance(
        job=job.name, step=step.name, kind=step.kind, index=index,
        arguments=ia, run=step.run, cwd=step.cwd, env=env,
    )


def plan_job(job: Job, *, strict: bool = True) -> List[StepInstance]:
    """
    Every step is planned once per instance, step by step; instances of
    one step are independent of each other.
    """
    instances = job.matrix.instances()
    get_console().print_debug(f"[{job.name}] matrix {dict(job.matrix)} -> {len(instances)} instance(s)")

    planned: List[StepInstance] = []
    for step in job.steps:
        for index, ia in enumerate(instances):
            # each step instance gets its own copy of the arguments
            planned.append(plan_step(job, step, index, ia.clone(), strict=strict))
    return planned


def plan_workflow(jobs: List[Job], *, only: Optional[List[str]] = None, strict: bool = True) -> Dict[str, List[StepInstance]]:
    """
    Plan every job (or just the ones named in `only`), keyed by job name,
    in workflow order.
    """
    if only:
        known = {j.name for j in jobs}
        missing = [n for n in only if n not in known]
        if missing:
            raise ValueError(f"Unknown job(s) {missing}. Known jobs: {sorted(known)}")
        jobs = [j for j in jobs if j.name in only]

    return {j.name: plan_job(j, strict=strict) for j in jobs}
