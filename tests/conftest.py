from __future__ import annotations

import os
import signal
from typing import Any

import pytest


class FakeProcess:
    groups: dict[int, FakeProcess] = {}

    def __init__(self, pid: int, *, exits_on_interrupt: bool = False) -> None:
        self.pid = pid
        self.returncode: int | None = None
        self.exits_on_interrupt = exits_on_interrupt
        self.signals: list[int] = []
        self.killed = False
        FakeProcess.groups[pid] = self

    def poll(self) -> int | None:
        return self.returncode

    def send_signal(self, sig: int) -> None:
        self.signals.append(sig)
        if self.exits_on_interrupt and sig == signal.SIGINT:
            self.returncode = -sig

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9

    def wait(self) -> int:
        if self.returncode is None:
            self.returncode = 0
        return self.returncode

    def finish(self, code: int = 0) -> None:
        self.returncode = code


class FakeSpawner:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.processes: list[FakeProcess] = []
        self.exits_on_interrupt = False

    def __call__(self, command: list[str], **kwargs: Any) -> FakeProcess:
        self.calls.append({"command": command, **kwargs})
        process = FakeProcess(
            1000 + len(self.processes), exits_on_interrupt=self.exits_on_interrupt
        )
        self.processes.append(process)
        return process


class FakeSurfaceLog:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.clears = 0

    def echo(self, message: str = "", nl: bool = True, **kwargs: Any) -> None:
        _ = nl, kwargs
        self.lines.append(message)

    def clear(self) -> None:
        self.clears += 1


@pytest.fixture(autouse=True)
def fake_process_groups(monkeypatch: pytest.MonkeyPatch) -> dict[int, FakeProcess]:
    """Route group signals for fake pids to the fake; real pids reach the OS."""
    real_killpg = os.killpg
    FakeProcess.groups = {}

    def killpg(pgid: int, sig: int) -> None:
        process = FakeProcess.groups.get(pgid)
        if process is None:
            real_killpg(pgid, sig)
            return
        if process.returncode is not None:
            raise ProcessLookupError(f"no process group {pgid}")
        if sig == signal.SIGKILL:
            process.kill()
        else:
            process.send_signal(sig)

    monkeypatch.setattr(os, "killpg", killpg)
    return FakeProcess.groups


@pytest.fixture
def spawner() -> FakeSpawner:
    return FakeSpawner()


@pytest.fixture
def sleeps() -> list[float]:
    return []
