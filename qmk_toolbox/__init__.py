"""
QMK Toolbox - Firmware flashing for keyboard bootloaders

Picks the external flashing tool that matches the bootloader chipset of
the attached keyboard, runs it and streams its output, flagging failures
the tool's exit code does not report.

Modules:
- catalog: Chipsets, operations and the command line each tool needs
- process: Run one flashing tool while reading both of its output pipes
- scanner: Detect known failure messages in tool output
- flash: Dispatch flash, reset and EEPROM reset to the attached chipsets
- usb: Detect HID-class bootloaders
- paths: Locate the tool directory and the files it must contain
- printing: Console output with message severities
- cli: Command-line interface and main entry point
"""

__version__ = "1.0.0"
__author__ = "QMK Toolbox"

from .catalog import Chipset, Operation, Invocation, Plan, FirmwareFormatError, build_plan
from .flash import flash_firmware, FlashManager
from .process import ProcessRunner, RunResult
from .printing import MessageType, Printer
from .usb import UsbDetector
from .cli import main

__all__ = [
    'Chipset',
    'Operation',
    'Invocation',
    'Plan',
    'FirmwareFormatError',
    'build_plan',
    'flash_firmware',
    'FlashManager',
    'ProcessRunner',
    'RunResult',
    'MessageType',
    'Printer',
    'UsbDetector',
    'main'
]
