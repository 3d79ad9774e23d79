# cli.py
from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from jobmatrix import settings
from jobmatrix.errors import MatrixError
from jobmatrix.matrix import MatrixArgs
from jobmatrix.plan import load_workflow, plan_workflow
from jobmatrix.ui.console import Console, get_console, set_console


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    Resolve the workflow file from the --workflow argument or the default.

    Raises:
        SystemExit: If the workflow file cannot be found
    """
    console = get_console()

    workflow_path = Path(workflow_arg or settings.WORKFLOW_FILE)
    if not workflow_path.exists() and workflow_path.suffix != ".py":
        workflow_path = Path(str(workflow_path) + ".py")
    if not workflow_path.exists():
        console.print_error(
            "Workflow file not found",
            f"Could not find workflow file: {workflow_path}",
            suggestion="Create a workflow file or specify a different path:\n  jobmatrix plan --workflow my_workflow.py",
        )
        sys.exit(1)
    return workflow_path


def _fail(exc: Exception) -> None:
    console = get_console()
    if isinstance(exc, MatrixError):
        lines = str(exc).split("\n")
        console.print_error("Cannot render instance", lines[0], details=lines[1:] or None)
    else:
        console.print_exception(exc)
    sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=settings.DEBUG,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """jobmatrix: explode matrix arguments into step instances."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("-a", "--arg", "args", multiple=True, help="Matrix argument as name=v1,v2 (repeatable)")
@click.option(
    "--format", "fmt",
    type=click.Choice(["text", "env", "json"]),
    default="text",
    show_default=True,
    help="How to print each instance",
)
@click.option("--query", default=None, help="Query template with :name placeholders to render per instance")
@click.option("--strict/--no-strict", default=settings.STRICT_PLACEHOLDERS, show_default=True,
              help="Fail on :name placeholders without a value")
@click.pass_context
def explode(ctx, args, fmt, query, strict):
    """Print every instance of a matrix given on the command line."""
    console = get_console()

    try:
        mas = MatrixArgs.from_pairs(args)
    except ValueError as e:
        console.print_error(
            "Invalid matrix argument",
            str(e),
            suggestion="Pass arguments as:\n  jobmatrix explode -a x=1,2 -a y=3,4",
        )
        sys.exit(2)

    console.print_debug(f"matrix {dict(mas)} -> {mas.size()} instance(s)")

    try:
        console.print_instances(mas.instances(), fmt=fmt, query=query, strict=strict)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        _fail(e)


@cli.command()
@click.option(
    "--workflow",
    default=None,
    help=f"Workflow file path (defaults to {settings.WORKFLOW_FILE})",
)
@click.option("--job", "jobs", multiple=True, help="Only plan this job (repeatable)")
@click.option(
    "--format", "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
)
@click.option("--strict/--no-strict", default=settings.STRICT_PLACEHOLDERS, show_default=True,
              help="Fail on :name placeholders without a value")
@click.pass_context
def plan(ctx, workflow, jobs, fmt, strict):
    """Print every step instance of a workflow."""
    console = get_console()

    workflow_path = discover_workflow(workflow)

    try:
        loaded = load_workflow(workflow_path)
        console.print_debug(f"Loaded {len(loaded)} job(s) from {workflow_path}")
        planned = plan_workflow(loaded, only=list(jobs) or None, strict=strict)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        _fail(e)
        return

    if fmt == "json":
        out = {name: [si.to_dict() for si in sis] for name, sis in planned.items()}
        click.echo(json.dumps(out, indent=2))
        return

    by_name = {j.name: j for j in loaded}
    for name, sis in planned.items():
        console.print_job(name, by_name[name].matrix.size())
        for si in sis:
            console.print_step_instance(si)
    console.print_plan_summary(len(planned), sum(len(sis) for sis in planned.values()))


def main():
    cli()


if __name__ == "__main__":
    main()
