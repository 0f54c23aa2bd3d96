#!/usr/bin/env python3

import sys
import argparse
from typing import List, Optional

from .catalog import Chipset, Operation, supported_chipsets
from .flash import FlashManager
from .paths import ToolPaths
from .printing import MessageType, Printer
from .usb import UsbDetector


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qmk-toolbox",
        description="QMK Toolbox - flash keyboard firmware through the matching bootloader tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s firmware.hex --mcu atmega32u4 --chipset caterina --port /dev/ttyACM0
  %(prog)s firmware.hex --mcu atmega32u4          # Flash whatever HID bootloader is attached
  %(prog)s --reset --mcu atmega32u4 --chipset dfu
  %(prog)s --eeprom-reset --mcu atmega32u4 --chipset dfu
  %(prog)s --mcu-list                             # List known MCUs
  %(prog)s --validate                             # Check the tool directory
        """
    )

    parser.add_argument(
        'file',
        nargs='?',
        help='Firmware file to flash'
    )

    parser.add_argument(
        '--mcu', '-m',
        default='atmega32u4',
        help='Target MCU (default: atmega32u4)'
    )

    parser.add_argument(
        '--chipset', '-c',
        action='append',
        default=[],
        choices=[chipset.value for chipset in Chipset],
        help='Treat this bootloader as attached (repeatable)'
    )

    parser.add_argument(
        '--port', '-p',
        default='',
        help='Serial port of a Caterina, AVRISP, USBtiny or SAM-BA bootloader'
    )

    mode = parser.add_mutually_exclusive_group()

    mode.add_argument(
        '--reset', '-r',
        action='store_true',
        help='Exit the bootloader without flashing'
    )

    mode.add_argument(
        '--eeprom-reset', '-e',
        action='store_true',
        help='Clear the EEPROM by writing the default image'
    )

    mode.add_argument(
        '--mcu-list',
        action='store_true',
        help='Print the list of known MCUs'
    )

    mode.add_argument(
        '--detect',
        action='store_true',
        help='List HID bootloaders currently attached'
    )

    mode.add_argument(
        '--validate',
        action='store_true',
        help='Validate the tool directory and exit'
    )

    parser.add_argument(
        '--tool-dir',
        help='Directory holding the flashing tools (overrides QMK_TOOLBOX_DIR)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        help='Kill a flashing tool that runs longer than this many seconds'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point for QMK Toolbox."""
    parser = build_parser()
    args = parser.parse_args(argv)

    printer = Printer(verbose=args.verbose)
    printer.debug(f"CLI main() called with arguments: {argv if argv is not None else sys.argv[1:]}")

    try:
        paths = ToolPaths(args.tool_dir)
        detector = UsbDetector(printer, [Chipset(value) for value in args.chipset])
        manager = FlashManager(printer, detector, paths, timeout=args.timeout)
        manager.caterina_port = args.port

        if args.mcu_list:
            return show_mcu_list(manager)
        elif args.validate:
            return validate_environment(manager)
        elif args.detect:
            return detect_bootloaders(detector)

        if args.reset:
            operation = Operation.RESET
        elif args.eeprom_reset:
            operation = Operation.EEPROM_RESET
        else:
            operation = Operation.FLASH
            if not args.file:
                parser.print_help()
                print("\nError: No firmware file specified.")
                return 1

        detector.refresh()
        if not any(detector.can_flash(chipset) for chipset in supported_chipsets(operation)):
            printer.print(f"No bootloader attached that supports {operation.value}", MessageType.ERROR)
            return 0

        if operation is Operation.RESET:
            manager.reset(args.mcu)
        elif operation is Operation.EEPROM_RESET:
            manager.eeprom_reset(args.mcu)
        else:
            manager.flash(args.mcu, args.file)
        return 0

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def show_mcu_list(manager: FlashManager) -> int:
    """Print every MCU identifier from the MCU list file."""
    try:
        mcus = manager.get_mcu_list()
    except OSError as e:
        print(f"Error reading MCU list: {e}")
        return 1

    for mcu in mcus:
        print(mcu)
    return 0


def validate_environment(manager: FlashManager) -> int:
    """Validate that the flash environment is ready."""
    print(f"Validating tool directory {manager.paths.tool_dir}...")

    if manager.validate_flash_environment():
        print("✓ Environment is ready for flashing")
        return 0
    else:
        print("✗ Environment validation failed")
        return 1


def detect_bootloaders(detector: UsbDetector) -> int:
    """Enumerate HID devices and report attached bootloaders."""
    found = detector.refresh()
    if not found:
        print("No HID bootloader attached")
    return 0


def run_as_module():
    """Entry point when run as python -m qmk_toolbox."""
    sys.exit(main())


if __name__ == "__main__":
    sys.exit(main())
