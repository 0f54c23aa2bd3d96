#!/usr/bin/env python3

from typing import List, Optional

from .catalog import Chipset, FirmwareFormatError, Operation, Plan, build_plan, supported_chipsets
from .paths import ToolPaths
from .printing import MessageType, Printer
from .process import ProcessRunner, RunResult
from .usb import UsbDetector


class FlashManager:
    """Manages firmware flashing for keyboards sitting in their bootloader.

    More than one chipset can be flashable at the same time. Each one the
    detector reports is handled independently, in catalog order.
    """

    def __init__(self, printer: Optional[Printer] = None, detector=None,
                 paths: Optional[ToolPaths] = None, runner: Optional[ProcessRunner] = None,
                 timeout: Optional[float] = None):
        self.printer = printer or Printer()
        self.paths = paths or ToolPaths()
        self.detector = detector or UsbDetector(self.printer)
        self.runner = runner or ProcessRunner(self.printer, self.paths, timeout)
        self.results: List[RunResult] = []
        self._caterina_port = ""

    @property
    def caterina_port(self) -> str:
        """Serial port used by avr109, avrisp, usbtiny and SAM-BA bootloaders."""
        return self._caterina_port

    @caterina_port.setter
    def caterina_port(self, port: str):
        self._caterina_port = port

    def set_caterina_port(self, port: str):
        self.caterina_port = port

    def flash(self, mcu: str, file: str):
        """
        Flash a firmware image on every flashable chipset.

        Args:
            mcu: Target MCU identifier, e.g. "atmega32u4"
            file: Path to the firmware image
        """
        self._dispatch(Operation.FLASH, mcu, file)

    def reset(self, mcu: str):
        """Leave the bootloader and start the application."""
        self._dispatch(Operation.RESET, mcu)

    def eeprom_reset(self, mcu: str):
        """Write the default EEPROM image, clearing persisted keyboard settings."""
        self._dispatch(Operation.EEPROM_RESET, mcu)

    def _dispatch(self, operation: Operation, mcu: str, file: Optional[str] = None):
        self.results = []

        for chipset in supported_chipsets(operation):
            if not self.detector.can_flash(chipset):
                continue

            self.printer.debug(f"{operation.value} via {chipset.value}")
            try:
                plan = build_plan(chipset, operation, mcu, file, self.caterina_port)
            except FirmwareFormatError as e:
                self.printer.print(str(e), MessageType.ERROR)
                continue

            self._execute(plan)

    def _execute(self, plan: Plan):
        """Run the steps of a plan strictly one after another."""
        for step in plan.steps:
            self.results.append(self.runner.run(step))

        if plan.done_message:
            self.printer.print(plan.done_message, MessageType.BOOTLOADER)

    def get_mcu_list(self) -> List[str]:
        """Read the MCU identifiers offered for selection, in file order."""
        with open(self.paths.mcu_list_file(), 'r') as f:
            return f.read().splitlines()

    def validate_flash_environment(self) -> bool:
        """Validate that every tool and data file is in the tool directory."""
        missing = self.paths.missing_resources()
        for name in missing:
            self.printer.print(f"Missing {name} in {self.paths.tool_dir}", MessageType.ERROR)
        return not missing


def flash_firmware(mcu: str, file: str, chipsets: List[Chipset], port: str = "",
                   paths: Optional[ToolPaths] = None) -> List[RunResult]:
    """Convenience function to flash a firmware image on known chipsets."""
    printer = Printer()
    manager = FlashManager(printer, UsbDetector(printer, chipsets), paths)
    manager.caterina_port = port
    manager.flash(mcu, file)
    return manager.results
