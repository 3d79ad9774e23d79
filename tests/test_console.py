from jobmatrix import job, matrix, sh, sql
from jobmatrix.matrix import MatrixArgs
from jobmatrix.plan import plan_job
from jobmatrix.ui.console import Console, get_console, set_console


def test_print_instances_env(capsys):
    Console().print_instances(MatrixArgs({"x": ["1", "2"]}).instances(), fmt="env")
    assert capsys.readouterr().out.splitlines() == ["PGQ_INSTANCE_X=1", "PGQ_INSTANCE_X=2"]


def test_print_step_instance(capsys):
    console = Console()
    j = job("x", sh("a", "run.sh"), sql("b", "select :n"), matrix=matrix(n=["1"]))
    for si in plan_job(j):
        console.print_step_instance(si)
    assert capsys.readouterr().out.splitlines() == [
        "  [a #0] PGQ_INSTANCE_N=1 run.sh",
        "  [b #0] select $1  args: ['1']",
    ]


def test_debug_only_when_enabled(capsys):
    Console().print_debug("hidden")
    Console(debug=True).print_debug("shown")
    assert capsys.readouterr().err == "[DEBUG] shown\n"


def test_global_console():
    console = Console(debug=True)
    set_console(console)
    assert get_console() is console
    set_console(Console())
