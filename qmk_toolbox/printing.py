#!/usr/bin/env python3

import sys
import threading
from enum import Enum
from typing import Optional, TextIO


class MessageType(Enum):
    """Severity tags understood by the output sink."""
    INFO = "info"
    COMMAND = "command"
    ERROR = "error"
    BOOTLOADER = "bootloader"


PREFIXES = {
    MessageType.INFO: "*** ",
    MessageType.COMMAND: ">>> ",
    MessageType.ERROR: "  ! ",
    MessageType.BOOTLOADER: "*** ",
}

RESPONSE_INDENT = "    "


class Printer:
    """Writes toolbox messages and raw tool output to the console.

    Tool output arrives from two reader threads at once, so every write
    goes through a lock.
    """

    def __init__(self, stream: Optional[TextIO] = None, verbose: bool = False):
        self.stream = stream
        self.verbose = verbose
        self._lock = threading.Lock()

    def print(self, text: str, message_type: MessageType = MessageType.INFO):
        """Print a toolbox message with its severity prefix."""
        prefix = PREFIXES[message_type]
        self._write("\n".join(prefix + line for line in text.splitlines() or [""]))

    def print_response(self, text: str, message_type: MessageType = MessageType.INFO):
        """Print one line of output captured from an external tool."""
        indent = PREFIXES[message_type] if message_type is MessageType.ERROR else RESPONSE_INDENT
        self._write(indent + text.rstrip("\r\n"))

    def debug(self, text: str):
        if self.verbose:
            self._write(f"DEBUG: {text}")

    def _write(self, line: str):
        with self._lock:
            print(line, file=self.stream or sys.stdout, flush=True)
