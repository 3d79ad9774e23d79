from __future__ import annotations
import os


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() not in ("", "0", "false", "no", "off")


WORKFLOW_FILE = os.environ.get("JOBMATRIX_WORKFLOW", "jobmatrix_workflow.py")
STRICT_PLACEHOLDERS = _flag("JOBMATRIX_STRICT_PLACEHOLDERS", "1")
DEBUG = _flag("JOBMATRIX_DEBUG", "0")
