#!/usr/bin/env python3

from typing import Optional

from .printing import MessageType, Printer


# Some tools exit with status 0 even when the image did not fit
FAILURE_SIGNATURES = (
    "Bootloader and code overlap.",  # dfu-programmer
    "exceeds remaining flash size!",  # bootloadHID
    "Not enough bytes in device info report",  # bootloadHID
)

TOO_LARGE_MESSAGE = "File is too large for device"


def scan_line(line: str) -> Optional[str]:
    """Return the failure signature contained in a line of tool output, if any."""
    for signature in FAILURE_SIGNATURES:
        if signature in line:
            return signature
    return None


class OutputScanner:
    """Forwards tool output to the printer and flags known failure messages."""

    def __init__(self, printer: Printer):
        self.printer = printer

    def feed(self, line: str) -> Optional[str]:
        self.printer.print_response(line, MessageType.INFO)

        signature = scan_line(line)
        if signature:
            self.printer.print(TOO_LARGE_MESSAGE, MessageType.ERROR)
        return signature
