from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

SRC = Path(__file__).resolve().parents[2] / "src"


def _run(args: list[str]) -> subprocess.CompletedProcess[str]:
    env = {**os.environ, "PYTHONPATH": os.pathsep.join(filter(None, [str(SRC), os.environ.get("PYTHONPATH")]))}
    return subprocess.run(args, capture_output=True, text=True, check=False, env=env)


def test_cli_help_smoke():
    cmds = [
        [sys.executable, "-m", "relayai.apps.diagnostics_cli", "--help"],
        [sys.executable, "-m", "relayai.apps.api_server", "--help"],
    ]
    for cmd in cmds:
        proc = _run(cmd)
        assert proc.returncode == 0, proc.stderr
