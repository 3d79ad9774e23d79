from .dsl import job, sh, sql, matrix, wf, JobBuilder, build
from .matrix import MATRIX_INSTANCE_PREFIX, MatrixArgs, MatrixArgValues, InstanceArguments, Instances
from .model import Job, Step
from .plan import StepInstance, load_workflow, plan_job, plan_workflow

__all__ = [
    "job", "sh", "sql", "matrix", "wf", "JobBuilder", "build",
    "MATRIX_INSTANCE_PREFIX", "MatrixArgs", "MatrixArgValues", "InstanceArguments", "Instances",
    "Job", "Step", "StepInstance", "load_workflow", "plan_job", "plan_workflow",
]
