# jobmatrix_workflow.py
# Example workflow: seed one partition per day/region, then check each one
from __future__ import annotations
from jobmatrix import wf, job, sh, sql, matrix

PARTITIONS = matrix(day=["mon", "tue", "wed"], region=["eu", "us"])


def workflow():
    return wf(
        # Shell job - 6 instances, each sees PGQ_INSTANCE_DAY / PGQ_INSTANCE_REGION
        job(
            "seed",
            sh("Create partition", "./scripts/create_partition.sh", cwd="db"),
            sh("Load fixtures", "./scripts/load.sh \"$PGQ_INSTANCE_REGION\" \"$PGQ_INSTANCE_DAY\"", cwd="db"),
            env={"PGAPPNAME": "jobmatrix-seed"},
            matrix=PARTITIONS,
        ),

        # Query job - :day / :region become $1 / $2
        job(
            "check",
            sql(
                "Row count",
                "select count(*) from events where day = :day and region = :region",
            ),
            matrix=PARTITIONS,
        ),

        # No matrix - runs once
        job(
            "vacuum",
            sql("Vacuum", "vacuum analyze events"),
        ),
    )
