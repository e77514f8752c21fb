"""Shared fixtures: tiny stand-in solver scripts run with the current interpreter."""

import sys
import textwrap

import pytest


ECHO_SOLVER = textwrap.dedent('''
    import sys

    while True:
        line = sys.stdin.readline()
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        if line.lower() == "exit":
            break
        if line.lower().startswith("fail"):
            sys.stderr.write("ERROR: cannot execute " + line + "\\n")
            sys.stderr.flush()
            continue
        sys.stdout.write("Completed " + line + "\\n")
        sys.stdout.flush()
''')

RESULTS_WRITER = textwrap.dedent('''
    import sys

    with open("tmp_disp.out", "w") as f:
        for i in range(1, 6):
            f.write("{} {} {}\\n".format(0.1 * i, 0.2 * i, 0.3 * i))
    with open("tmp_forc.out", "w") as f:
        for i in range(1, 6):
            f.write("{} {} {}\\n".format(10.0 * i, 20.0 * i, 30.0 * i))
    print("analysis done: " + sys.argv[0])
''')


@pytest.fixture
def python_exe():
    return sys.executable


@pytest.fixture
def echo_solver(tmp_path):
    """Interactive solver: echoes 'Completed <cmd>' per stdin line, errors for 'fail...'."""
    path = tmp_path / "echo_solver.py"
    path.write_text(ECHO_SOLVER, encoding="utf-8")
    return str(path)


@pytest.fixture
def results_writer(tmp_path):
    """Static solver: writes tmp_disp.out / tmp_forc.out (5x3) in its cwd and exits."""
    path = tmp_path / "write_results.py"
    path.write_text(RESULTS_WRITER, encoding="utf-8")
    return str(path)


@pytest.fixture
def missing_exe(tmp_path):
    return str(tmp_path / "no_such_dir" / "OpenSees-missing")
