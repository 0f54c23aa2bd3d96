import io
from pathlib import Path

from qmk_toolbox.paths import TOOL_DIR_ENV, ToolPaths
from qmk_toolbox.printing import MessageType, Printer


def test_message_prefixes():
    stream = io.StringIO()
    printer = Printer(stream)

    printer.print("DFU device connected", MessageType.BOOTLOADER)
    printer.print("dfu-programmer atmega32u4 reset", MessageType.COMMAND)
    printer.print("File is too large for device", MessageType.ERROR)
    printer.print_response("Validating...  Success\n")

    assert stream.getvalue().splitlines() == [
        "*** DFU device connected",
        ">>> dfu-programmer atmega32u4 reset",
        "  ! File is too large for device",
        "    Validating...  Success",
    ]


def test_multiline_messages_keep_prefix():
    stream = io.StringIO()
    Printer(stream).print("one\ntwo", MessageType.ERROR)

    assert stream.getvalue() == "  ! one\n  ! two\n"


def test_debug_only_when_verbose():
    quiet, loud = io.StringIO(), io.StringIO()

    Printer(quiet).debug("hidden")
    Printer(loud, verbose=True).debug("shown")

    assert quiet.getvalue() == ""
    assert loud.getvalue() == "DEBUG: shown\n"


def test_windows_executable_names(tmp_path):
    paths = ToolPaths(tmp_path, system="Windows")

    assert paths.executable("avrdude") == tmp_path / "avrdude.exe"
    assert paths.executable("mdloader") == tmp_path / "mdloader_windows.exe"
    assert "libusb0.dll" in paths.resources()


def test_posix_executable_names(tmp_path):
    paths = ToolPaths(tmp_path, system="Darwin")

    assert paths.executable("teensy_loader_cli") == tmp_path / "teensy_loader_cli"
    assert "libusb0.dll" not in paths.resources()


def test_tool_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(TOOL_DIR_ENV, str(tmp_path))

    assert ToolPaths(system="Linux").tool_dir == tmp_path


def test_default_linux_tool_dir(tmp_path, monkeypatch):
    monkeypatch.delenv(TOOL_DIR_ENV, raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert ToolPaths(system="Linux").tool_dir == Path(tmp_path) / "qmk_toolbox"


def test_missing_resources(tmp_path):
    paths = ToolPaths(tmp_path, system="Linux")
    (tmp_path / "avrdude").write_text("")
    (tmp_path / "reset.eep").write_text("")

    missing = paths.missing_resources()

    assert "avrdude" not in missing
    assert "reset.eep" not in missing
    assert "dfu-util" in missing
