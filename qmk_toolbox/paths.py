#!/usr/bin/env python3

import os
import platform
from pathlib import Path
from typing import List, Optional


TOOL_DIR_ENV = "QMK_TOOLBOX_DIR"

TOOLS = [
    "dfu-programmer",
    "avrdude",
    "teensy_loader_cli",
    "dfu-util",
    "bootloadHID",
    "mdloader",
]

DATA_FILES = [
    "avrdude.conf",
    "mcu-list.txt",
    "reset.eep",
    "applet-flash-samd51j18a.bin",
]

WINDOWS_LIBRARIES = [
    "libusb-1.0.dll",
    "libusb0.dll",
]

# Tools whose Windows build ships under a different name
WINDOWS_NAMES = {
    "mdloader": "mdloader_windows.exe",
}

MCU_LIST = "mcu-list.txt"


class ToolPaths:
    """Locates the directory holding the flashing tools and their data files."""

    def __init__(self, tool_dir: Optional[Path] = None, system: Optional[str] = None):
        self.system = system or platform.system()
        if tool_dir is None:
            tool_dir = self._default_tool_dir()
        self.tool_dir = Path(tool_dir)

    def _default_tool_dir(self) -> Path:
        """Find the per-user application data directory for this platform."""
        override = os.environ.get(TOOL_DIR_ENV)
        if override:
            return Path(override).expanduser()

        home = Path.home()
        if self.system == "Windows":
            local = os.environ.get("LOCALAPPDATA")
            base = Path(local) if local else home / "AppData" / "Local"
            return base / "QMK Toolbox"
        elif self.system == "Darwin":
            return home / "Library" / "Application Support" / "QMK Toolbox"
        else:
            xdg = os.environ.get("XDG_DATA_HOME")
            base = Path(xdg) if xdg else home / ".local" / "share"
            return base / "qmk_toolbox"

    def executable_name(self, program: str) -> str:
        """Platform-specific file name of a tool."""
        if self.system == "Windows":
            return WINDOWS_NAMES.get(program, f"{program}.exe")
        return program

    def executable(self, program: str) -> Path:
        return self.tool_dir / self.executable_name(program)

    def resources(self) -> List[str]:
        """All files the flashing tools need in the tool directory."""
        names = [self.executable_name(tool) for tool in TOOLS] + DATA_FILES
        if self.system == "Windows":
            names += WINDOWS_LIBRARIES
        return names

    def missing_resources(self) -> List[str]:
        return [name for name in self.resources() if not (self.tool_dir / name).exists()]

    def mcu_list_file(self) -> Path:
        return self.tool_dir / MCU_LIST
