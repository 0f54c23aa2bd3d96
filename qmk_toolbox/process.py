#!/usr/bin/env python3

import io
import os
import shlex
import signal
import subprocess
import threading
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

from .catalog import Invocation
from .paths import ToolPaths
from .printing import MessageType, Printer
from .scanner import OutputScanner


# How long readers may keep draining output after a timed out tool is killed
KILL_GRACE = 1.0


@dataclass
class RunResult:
    """What happened when an invocation was run.

    The exit code is kept for reference only. Several flashing tools exit
    with 0 after a failed write, so failures come from the output scan.
    """
    invocation: Invocation
    started: bool = False
    returncode: Optional[int] = None
    timed_out: bool = False
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.started and not self.timed_out and not self.failures


class ProcessRunner:
    """Runs flashing tools from the tool directory, one at a time."""

    def __init__(self, printer: Printer, paths: ToolPaths, timeout: Optional[float] = None):
        self.printer = printer
        self.paths = paths
        self.timeout = timeout
        self.scanner = OutputScanner(printer)
        self._lock = threading.Lock()

    def run(self, invocation: Invocation) -> RunResult:
        """
        Run one invocation and block until the tool exits.

        Both output pipes are read on their own threads while this thread
        waits for the process.

        Args:
            invocation: Program and arguments to run

        Returns:
            RunResult for the invocation
        """
        with self._lock:
            return self._run(invocation)

    def _run(self, invocation: Invocation) -> RunResult:
        executable = self.paths.executable(invocation.program)
        cwd = invocation.cwd or str(self.paths.tool_dir)
        result = RunResult(invocation)

        command_line = " ".join([executable.name] + [shlex.quote(arg) for arg in invocation.args])
        self.printer.print(command_line, MessageType.COMMAND)

        try:
            process = subprocess.Popen(
                [str(executable)] + list(invocation.args),
                cwd=cwd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=self._own_session(),
            )
        except OSError as e:
            self.printer.print(f"Could not start {executable.name}: {e}", MessageType.ERROR)
            return result

        result.started = True

        readers = [
            threading.Thread(target=self._consume, args=(process.stdout, result), daemon=True),
            threading.Thread(target=self._consume, args=(process.stderr, result), daemon=True),
        ]
        for reader in readers:
            reader.start()

        try:
            result.returncode = process.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            self._kill(process)
            result.returncode = process.wait()
            result.timed_out = True
            self.printer.print(f"{executable.name} timed out after {self.timeout}s", MessageType.ERROR)

        for reader in readers:
            reader.join(KILL_GRACE if result.timed_out else None)
        process.stdin.close()

        self.printer.debug(f"{executable.name} exited with code {result.returncode}")
        return result

    def _own_session(self) -> bool:
        """Timed runs get their own process group so the whole tree can be killed."""
        return self.timeout is not None and os.name == "posix"

    def _kill(self, process: subprocess.Popen):
        if self._own_session():
            try:
                os.killpg(process.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
        else:
            process.kill()

    def _consume(self, stream: BinaryIO, result: RunResult):
        """Read one output pipe until the tool closes it.

        Lines end at LF, CRLF or a bare CR, so progress bars redrawn with
        carriage returns come through one update at a time.
        """
        with io.TextIOWrapper(stream, encoding="utf-8", errors="replace", newline=None) as text:
            for raw in text:
                line = raw.rstrip("\n")
                signature = self.scanner.feed(line)
                if signature:
                    result.failures.append(signature)
