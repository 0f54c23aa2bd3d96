import pytest

from conftest import posix_only, write_tool

from qmk_toolbox import usb
from qmk_toolbox.cli import main


@pytest.fixture(autouse=True)
def no_hid_devices(monkeypatch):
    class NoDevices:
        @staticmethod
        def enumerate(vendor_id=0, product_id=0):
            return []

    monkeypatch.setattr(usb, "HID_AVAILABLE", True)
    monkeypatch.setattr(usb, "hid", NoDevices, raising=False)


def test_mcu_list(tmp_path, capsys):
    (tmp_path / "mcu-list.txt").write_text("atmega32u4\nat90usb1286\n")

    assert main(["--mcu-list", "--tool-dir", str(tmp_path)]) == 0
    assert capsys.readouterr().out.split() == ["atmega32u4", "at90usb1286"]


def test_mcu_list_missing_file(tmp_path, capsys):
    assert main(["--mcu-list", "--tool-dir", str(tmp_path)]) == 1
    assert "Error reading MCU list" in capsys.readouterr().out


def test_validate_reports_missing_tools(tmp_path, capsys):
    assert main(["--validate", "--tool-dir", str(tmp_path)]) == 1
    out = capsys.readouterr().out
    assert "Missing reset.eep" in out
    assert "Environment validation failed" in out


def test_flash_requires_a_file(tmp_path, capsys):
    assert main(["--chipset", "dfu", "--tool-dir", str(tmp_path)]) == 1
    assert "No firmware file specified" in capsys.readouterr().out


def test_no_bootloader_attached(tmp_path, capsys):
    assert main(["kb.hex", "--tool-dir", str(tmp_path)]) == 0
    assert "No bootloader attached that supports flash" in capsys.readouterr().out


def test_modes_are_exclusive(tmp_path):
    with pytest.raises(SystemExit):
        main(["--reset", "--eeprom-reset", "--tool-dir", str(tmp_path)])


@posix_only
def test_flash_caterina(tmp_path, capsys):
    write_tool(tmp_path, "avrdude", "print('avrdude done.  Thank you.')")

    code = main(["firmware.hex", "--mcu", "atmega32u4", "--chipset", "caterina",
                 "--port", "/dev/ttyACM0", "--tool-dir", str(tmp_path)])

    out = capsys.readouterr().out
    assert code == 0
    assert ">>> avrdude -p atmega32u4 -c avr109 -U flash:w:firmware.hex:i -P /dev/ttyACM0" in out
    assert "    avrdude done.  Thank you." in out


@posix_only
def test_reset_dfu_verbose(tmp_path, capsys):
    write_tool(tmp_path, "dfu-programmer", "sys.exit(1)")

    code = main(["--reset", "--chipset", "dfu", "--tool-dir", str(tmp_path), "--verbose"])

    out = capsys.readouterr().out
    assert code == 0
    assert ">>> dfu-programmer atmega32u4 reset" in out
    assert "DEBUG: dfu-programmer exited with code 1" in out
