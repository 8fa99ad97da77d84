"""End-to-end test: two bot processes play a full game over TCP."""

from __future__ import annotations

import os
import re
import subprocess
import sys
from pathlib import Path
from types import TracebackType
from typing import List, Optional, Type
from typing_extensions import Literal

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1].joinpath("src")


class BotProcess:
    """Context manager that runs `python -m salvo.bot` with extra flags."""

    def __init__(self, *args: str) -> None:
        self.args = list(args)
        self.proc: Optional[subprocess.Popen[str]] = None

    def __enter__(self) -> "BotProcess":
        env = {**os.environ, "PYTHONPATH": str(PACKAGE_ROOT), "PYTHONUNBUFFERED": "1"}
        self.proc = subprocess.Popen(
            [sys.executable, "-m", "salvo.bot", *self.args],
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
        return self

    def readline(self) -> str:
        assert self.proc and self.proc.stdout
        return self.proc.stdout.readline()

    def finish(self, timeout: float = 20) -> List[str]:
        assert self.proc
        out, _ = self.proc.communicate(timeout=timeout)
        return out.splitlines()

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        if self.proc and self.proc.poll() is None:
            self.proc.terminate()
            self.proc.wait(timeout=5)
        return False


@pytest.mark.timeout(40)  # type: ignore[arg-type]
def test_two_bots_play_to_completion() -> None:
    with BotProcess("--host", "--bind", "127.0.0.1", "--port", "0", "--seed", "1", "-q") as host:
        banner = host.readline()
        match = re.search(r"Server bound on 127\.0\.0\.1:(\d+), waiting for connection\.", banner)
        assert match, f"unexpected host output: {banner!r}"
        port = match.group(1)

        with BotProcess("--join", f"127.0.0.1:{port}", "--seed", "2", "-q") as joiner:
            join_out = joiner.finish()
            host_out = host.finish()

    assert joiner.proc.returncode == 0
    assert host.proc.returncode == 0
    verdicts = sorted(line for line in host_out + join_out if line in {"YOU WON", "YOU LOST"})
    assert verdicts == ["YOU LOST", "YOU WON"]


@pytest.mark.timeout(20)  # type: ignore[arg-type]
def test_join_without_host_exits_with_error() -> None:
    import socket

    with socket.socket() as spare:
        spare.bind(("127.0.0.1", 0))
        port = spare.getsockname()[1]

    with BotProcess("--join", f"127.0.0.1:{port}", "-q") as joiner:
        out = joiner.finish()
    assert joiner.proc.returncode == 1
    assert any(line.startswith("[ERROR]") for line in out)


def test_package_readme_is_the_project_readme() -> None:
    root = PACKAGE_ROOT.parent
    (line,) = [l for l in (root / "pyproject.toml").read_text().splitlines() if l.startswith("readme")]
    readme = line.split("=", 1)[1].strip().strip('"')
    assert readme == "README.md"
    assert (root / readme).read_text().startswith("# salvo")
