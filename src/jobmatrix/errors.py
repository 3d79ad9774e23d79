# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(eq=False)
class MatrixError(Exception):
    """
    Structured error raised while rendering an instance.

    Carries enough context for clean CLI output without a traceback:
      - code: stable machine-readable identifier (E_...)
      - arg: the argument / placeholder name involved, if any
      - details: extra key=value lines
    """
    code: str
    message: str
    arg: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.code}: {self.message}"]
        if self.arg is not None:
            lines.append(f"arg={self.arg}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class UnboundPlaceholderError(MatrixError):
    """A :name placeholder in a query has no value in the instance."""


class PlaceholderCollisionError(MatrixError):
    """Two argument names cannot be told apart as placeholders."""


class EnvNameCollisionError(MatrixError):
    """Two argument names map onto the same environment variable."""
