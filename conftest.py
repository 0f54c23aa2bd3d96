import sys
import threading
from pathlib import Path

import pytest

from qmk_toolbox.catalog import Chipset
from qmk_toolbox.paths import ToolPaths
from qmk_toolbox.printing import MessageType, Printer
from qmk_toolbox.process import RunResult


posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake tools are shebang scripts")


class RecordingPrinter(Printer):
    """Keeps every message in order instead of printing it."""

    def __init__(self):
        super().__init__()
        self.events = []
        self._events_lock = threading.Lock()

    def print(self, text, message_type=MessageType.INFO):
        with self._events_lock:
            self.events.append(("print", text, message_type))

    def print_response(self, text, message_type=MessageType.INFO):
        with self._events_lock:
            self.events.append(("response", text, message_type))

    def messages(self, message_type=None):
        return [text for kind, text, kind_type in self.events
                if kind == "print" and (message_type is None or kind_type is message_type)]

    def responses(self):
        return [text for kind, text, _ in self.events if kind == "response"]


class RecordingRunner:
    def __init__(self):
        self.invocations = []

    def run(self, invocation):
        self.invocations.append(invocation)
        return RunResult(invocation, started=True, returncode=0)


class FakeDetector:
    def __init__(self, *chipsets: Chipset):
        self.chipsets = set(chipsets)
        self.queries = []

    def can_flash(self, chipset):
        self.queries.append(chipset)
        return chipset in self.chipsets


def write_tool(tool_dir: Path, name: str, body: str) -> Path:
    """Write an executable Python script standing in for a flashing tool."""
    path = tool_dir / name
    path.write_text(f"#!{sys.executable}\nimport os, sys, time\n{body}\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def printer():
    return RecordingPrinter()


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def tool_paths(tmp_path):
    return ToolPaths(tmp_path, system="Linux")
