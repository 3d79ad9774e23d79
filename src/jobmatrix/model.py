# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from .matrix import MatrixArgs

STEP_KINDS = ("sh", "sql")


@dataclass(frozen=True)
class Step:
    """
    A single command (step) inside a job.

    kind="sh":  `run` is a shell command, instances get PGQ_INSTANCE_* env vars
    kind="sql": `run` is a query with :name placeholders
    """
    name: str
    run: str
    cwd: str | None = None
    kind: str = "sh"


@dataclass
class Job:
    """A job: steps run once per instance of its matrix."""
    name: str
    steps: list[Step]

    env: Dict[str, str] = field(default_factory=dict)
    matrix: MatrixArgs = field(default_factory=MatrixArgs)

    def __post_init__(self) -> None:
        if not isinstance(self.matrix, MatrixArgs):
            self.matrix = MatrixArgs(self.matrix)
