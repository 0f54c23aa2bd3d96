#!/usr/bin/env python3

from typing import Dict, Iterable, Optional, Set, Tuple

from .catalog import Chipset
from .printing import MessageType, Printer

# Try to import hid library, fall back gracefully if not available
try:
    import hid
    HID_AVAILABLE = True
except ImportError:
    HID_AVAILABLE = False


# Bootloaders that enumerate as HID devices, keyed by (VID, PID)
HID_BOOTLOADERS: Dict[Tuple[int, int], Chipset] = {
    (0x16C0, 0x0478): Chipset.HALFKAY,
    (0x16C0, 0x05DF): Chipset.BOOTLOADHID,
}

CHIPSET_NAMES = {
    Chipset.DFU: "DFU",
    Chipset.HALFKAY: "Halfkay",
    Chipset.CATERINA: "Caterina",
    Chipset.STM32: "STM32",
    Chipset.KIIBOHD: "Kiibohd",
    Chipset.AVRISP: "AVRISP",
    Chipset.USBASP: "USBasp",
    Chipset.USBTINY: "USBtiny",
    Chipset.BOOTLOADHID: "BootloadHID",
    Chipset.ATMEL_SAMBA: "Atmel SAM-BA",
}


def classify(vendor_id: int, product_id: int) -> Optional[Chipset]:
    """Map a USB vendor/product ID pair to a bootloader chipset."""
    return HID_BOOTLOADERS.get((vendor_id, product_id))


class UsbDetector:
    """Tracks which bootloader chipsets are currently available for flashing.

    HID-class bootloaders are found by enumerating HID devices. Chipsets
    whose bootloaders are serial or vendor-class devices are added
    explicitly by the caller.
    """

    def __init__(self, printer: Optional[Printer] = None, chipsets: Iterable[Chipset] = ()):
        self.printer = printer or Printer()
        self.forced: Set[Chipset] = set(chipsets)
        self.detected: Set[Chipset] = set()

    def add(self, chipset: Chipset):
        self.forced.add(chipset)

    def refresh(self) -> Set[Chipset]:
        """Enumerate HID devices and record the bootloaders found."""
        if not HID_AVAILABLE:
            self.printer.print("Warning: hidapi library not available. Install with: pip install hidapi",
                               MessageType.INFO)
            self.detected = set()
            return set()

        found = set()
        for device_info in hid.enumerate():
            chipset = classify(device_info.get('vendor_id', 0), device_info.get('product_id', 0))
            if chipset is None or chipset in found:
                continue
            found.add(chipset)
            self.printer.print(f"{CHIPSET_NAMES[chipset]} device connected "
                               f"({device_info['vendor_id']:04X}:{device_info['product_id']:04X})",
                               MessageType.BOOTLOADER)

        self.detected = found
        return found

    def can_flash(self, chipset: Chipset) -> bool:
        return chipset in self.forced or chipset in self.detected
