import subprocess
import sys
from pathlib import Path

import pytest

from stadium_gates.app import main

ROOT = Path(__file__).resolve().parents[1]


def run_module(*args):
    return subprocess.run(
        [sys.executable, "-m", "stadium_gates.app", *args],
        capture_output=True,
        text=True,
        check=False,
        cwd=ROOT,
    )


def test_app_help_runs():
    proc = run_module("-h")
    assert proc.returncode == 0
    out = proc.stdout + proc.stderr
    assert "main entrypoint" in out
    assert "run" in out
    assert "arrive" in out


def test_run_help_runs():
    proc = run_module("run", "-h")
    assert proc.returncode == 0
    out = proc.stdout + proc.stderr
    assert "--population" in out
    assert "--gates" in out
    assert "--mqtt-host" in out


def test_run_with_piped_serials():
    proc = subprocess.run(
        [sys.executable, "-m", "stadium_gates.app", "run", "--tick-seconds", "0.01"],
        input="1000005\n1000005\n",
        capture_output=True,
        text=True,
        check=False,
        cwd=ROOT,
        timeout=30,
    )
    assert proc.returncode == 0
    assert "===== METRICS =====" in proc.stdout


def test_bad_configuration_exits():
    with pytest.raises(SystemExit):
        main(["run", "--gates", "0"])
