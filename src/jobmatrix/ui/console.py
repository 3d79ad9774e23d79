"""Console output formatting utilities for jobmatrix."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from jobmatrix.matrix import Instances
    from jobmatrix.plan import StepInstance


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_instances(self, instances: Instances, fmt: str = "text", query: Optional[str] = None, strict: bool = True) -> None:
        """
        Print one line per instance.

        Args:
            instances: The exploded instance set
            fmt: "text" ({ 'x': 1 }), "env" (PGQ_INSTANCE_X=1 ...) or "json"
            query: Optional query template, rendered per instance as $n + args
            strict: Fail on placeholders without a value
        """
        for ia in instances:
            if query is not None:
                parsed, args = ia.parse_query(query, strict=strict)
                if fmt == "json":
                    print(json.dumps({"query": parsed, "args": args}))
                else:
                    print(f"{parsed}  args: {args}")
            elif fmt == "env":
                print(" ".join(ia.as_env()))
            elif fmt == "json":
                print(json.dumps(dict(ia), sort_keys=True))
            else:
                print(str(ia))

    def print_job(self, name: str, instance_count: int) -> None:
        """Print job header for a plan."""
        print(f"\nJOB: {name} ({instance_count} instance(s))")

    def print_step_instance(self, si: StepInstance) -> None:
        """Print a single planned step instance."""
        if si.kind == "sql":
            print(f"  [{si.step} #{si.index}] {si.run}  args: {si.args}")
        else:
            env = " ".join(f"{k}={v}" for k, v in si.env.items())
            prefix = f"{env} " if env else ""
            print(f"  [{si.step} #{si.index}] {prefix}{si.run}")

    def print_plan_summary(self, job_count: int, step_instance_count: int) -> None:
        """Print final plan summary."""
        print("\n" + "=" * 40)
        print("PLAN")
        print("=" * 40)
        print(f"  Jobs: {job_count}")
        print(f"  Step instances: {step_instance_count}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
