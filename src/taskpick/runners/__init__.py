from taskpick.runners.base import Runner, RunnerError, stop_process
from taskpick.runners.executor import Executor
from taskpick.runners.log import CapturedLogRunner
from taskpick.runners.slots import ProcessSlot, SlotRegistry
from taskpick.runners.surfaces import LogSurface, OutputSurface, RawTerminalSurface, TerminalSurface
from taskpick.runners.terminal import KILL_PROMPT, RawTerminalRunner, TerminalRunner

__all__ = [
    "KILL_PROMPT",
    "CapturedLogRunner",
    "Executor",
    "LogSurface",
    "OutputSurface",
    "ProcessSlot",
    "RawTerminalRunner",
    "RawTerminalSurface",
    "Runner",
    "RunnerError",
    "SlotRegistry",
    "TerminalRunner",
    "TerminalSurface",
    "stop_process",
]
