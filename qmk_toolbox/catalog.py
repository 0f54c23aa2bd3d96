#!/usr/bin/env python3

"""
Command catalog: which external tool to run, and with which arguments,
for every bootloader chipset and toolbox operation.

Nothing in here touches the filesystem or starts a process. Program names
are platform independent; ToolPaths turns them into real executables.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Callable, Dict, Optional, Tuple


class Chipset(Enum):
    """Bootloader families the toolbox knows how to talk to."""
    DFU = "dfu"
    HALFKAY = "halfkay"
    CATERINA = "caterina"
    STM32 = "stm32"
    KIIBOHD = "kiibohd"
    AVRISP = "avrisp"
    USBASP = "usbasp"
    USBTINY = "usbtiny"
    BOOTLOADHID = "bootloadhid"
    ATMEL_SAMBA = "atmel-samba"


class Operation(Enum):
    FLASH = "flash"
    RESET = "reset"
    EEPROM_RESET = "eeprom-reset"


class ToolboxError(Exception):
    """Base class for errors raised inside the toolbox."""


class FirmwareFormatError(ToolboxError):
    """The firmware file cannot be handled by the chipset's flashing tool."""


DFU_PROGRAMMER = "dfu-programmer"
AVRDUDE = "avrdude"
TEENSY_LOADER = "teensy_loader_cli"
DFU_UTIL = "dfu-util"
BOOTLOADHID = "bootloadHID"
MDLOADER = "mdloader"

RESET_EEPROM_IMAGE = "reset.eep"
FLASH_COMPLETE = "Flash complete"
BIN_ONLY_MESSAGE = "Only firmware files in .bin format can be flashed with dfu-util!"


@dataclass(frozen=True)
class Invocation:
    """A single external program call."""
    program: str
    args: Tuple[str, ...]
    cwd: Optional[str] = None


@dataclass(frozen=True)
class Plan:
    """Ordered invocations for one chipset, plus an optional closing message."""
    steps: Tuple[Invocation, ...]
    done_message: Optional[str] = None


def _call(program: str, *args: str) -> Invocation:
    return Invocation(program, tuple(args))


def _require_bin(file: str):
    if PurePath(file).suffix.lower() != ".bin":
        raise FirmwareFormatError(BIN_ONLY_MESSAGE)


def _avrdude(mcu: str, programmer: str, memory: str, image: str, port: Optional[str]) -> Invocation:
    args = ["-p", mcu, "-c", programmer, "-U", f"{memory}:w:{image}:i"]
    if port is not None:
        args += ["-P", port]
    return _call(AVRDUDE, *args)


# Flash

def _flash_dfu(mcu, file, port):
    return Plan((
        _call(DFU_PROGRAMMER, mcu, "erase", "--force"),
        _call(DFU_PROGRAMMER, mcu, "flash", file),
        _call(DFU_PROGRAMMER, mcu, "reset"),
    ))


def _flash_caterina(mcu, file, port):
    return Plan((_avrdude(mcu, "avr109", "flash", file, port),))


def _flash_halfkay(mcu, file, port):
    return Plan((_call(TEENSY_LOADER, f"-mmcu={mcu}", file, "-v"),))


def _flash_stm32(mcu, file, port):
    _require_bin(file)
    return Plan((_call(DFU_UTIL, "-a", "0", "-d", "0483:df11", "-s", "0x08000000:leave", "-D", file),))


def _flash_kiibohd(mcu, file, port):
    _require_bin(file)
    return Plan((_call(DFU_UTIL, "-D", file),))


def _flash_avrisp(mcu, file, port):
    return Plan((_avrdude(mcu, "avrisp", "flash", file, port),), FLASH_COMPLETE)


def _flash_usbasp(mcu, file, port):
    # USBasp is a plain USB programmer, no serial port involved
    return Plan((_avrdude(mcu, "usbasp", "flash", file, None),), FLASH_COMPLETE)


def _flash_usbtiny(mcu, file, port):
    return Plan((_avrdude(mcu, "usbtiny", "flash", file, port),), FLASH_COMPLETE)


def _flash_bootloadhid(mcu, file, port):
    return Plan((_call(BOOTLOADHID, "-r", file),))


def _flash_atmel_samba(mcu, file, port):
    return Plan((_call(MDLOADER, "-p", port, "-D", file),))


# Reset

def _reset_dfu(mcu, file, port):
    return Plan((_call(DFU_PROGRAMMER, mcu, "reset"),))


def _reset_halfkay(mcu, file, port):
    return Plan((_call(TEENSY_LOADER, f"-mmcu={mcu}", "-bv"),))


def _reset_bootloadhid(mcu, file, port):
    return Plan((_call(BOOTLOADHID, "-r"),))


# EEPROM reset

def _eeprom_reset_dfu(mcu, file, port):
    return Plan((_call(DFU_PROGRAMMER, mcu, "flash", "--force", "--eeprom", RESET_EEPROM_IMAGE),))


def _eeprom_reset_caterina(mcu, file, port):
    return Plan((_avrdude(mcu, "avr109", "eeprom", RESET_EEPROM_IMAGE, port),))


def _eeprom_reset_usbasp(mcu, file, port):
    return Plan((_avrdude(mcu, "usbasp", "eeprom", RESET_EEPROM_IMAGE, port),))


Builder = Callable[[str, Optional[str], str], Plan]

# Insertion order is the order chipsets are tried in
CATALOG: Dict[Operation, Dict[Chipset, Builder]] = {
    Operation.FLASH: {
        Chipset.DFU: _flash_dfu,
        Chipset.CATERINA: _flash_caterina,
        Chipset.HALFKAY: _flash_halfkay,
        Chipset.STM32: _flash_stm32,
        Chipset.KIIBOHD: _flash_kiibohd,
        Chipset.AVRISP: _flash_avrisp,
        Chipset.USBASP: _flash_usbasp,
        Chipset.USBTINY: _flash_usbtiny,
        Chipset.BOOTLOADHID: _flash_bootloadhid,
        Chipset.ATMEL_SAMBA: _flash_atmel_samba,
    },
    Operation.RESET: {
        Chipset.DFU: _reset_dfu,
        Chipset.HALFKAY: _reset_halfkay,
        Chipset.BOOTLOADHID: _reset_bootloadhid,
    },
    Operation.EEPROM_RESET: {
        Chipset.DFU: _eeprom_reset_dfu,
        Chipset.CATERINA: _eeprom_reset_caterina,
        Chipset.USBASP: _eeprom_reset_usbasp,
    },
}


def supported_chipsets(operation: Operation) -> Tuple[Chipset, ...]:
    """Chipsets that define the operation, in the order they are tried."""
    return tuple(CATALOG[operation])


def build_plan(chipset: Chipset, operation: Operation, mcu: str,
               file: Optional[str] = None, port: str = "") -> Optional[Plan]:
    """
    Build the invocations needed to run an operation on a chipset.

    Args:
        chipset: Bootloader family of the attached device
        operation: Flash, Reset or EepromReset
        mcu: Target MCU identifier, e.g. "atmega32u4"
        file: Firmware image path (flash only)
        port: Serial port used by avrdude and mdloader based chipsets

    Returns:
        The plan, or None when the chipset has no such operation

    Raises:
        FirmwareFormatError: If the firmware file is not usable with the tool
    """
    builder = CATALOG[operation].get(chipset)
    if builder is None:
        return None
    if operation is Operation.FLASH and file is None:
        raise ValueError("A firmware file is required to flash")
    return builder(mcu, file, port)
