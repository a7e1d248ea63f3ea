"""
Data models and enums for Android USB Options.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

# Serial number as printed by `adb devices`
DeviceId = str
DeviceList = List[DeviceId]


class DeviceState(Enum):
    DEVICE = "device"
    UNAUTHORIZED = "unauthorized"
    OFFLINE = "offline"
    RECOVERY = "recovery"
    SIDELOAD = "sideload"
    BOOTLOADER = "bootloader"
    NO_PERMISSIONS = "no permissions"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: str) -> "DeviceState":
        token = token.strip()
        for state in cls:
            if state.value == token:
                return state
        # "no permissions (user not in plugdev group); see ..."
        if token.startswith(cls.NO_PERMISSIONS.value):
            return cls.NO_PERMISSIONS
        return cls.UNKNOWN


class PresenceState(Enum):
    ABSENT = "absent"
    PRESENT = "present"


@dataclass(frozen=True)
class DeviceEntry:
    """One line of `adb devices` output."""
    serial: DeviceId
    state: DeviceState
    raw_state: str = ""


@dataclass(frozen=True)
class UsbFunction:
    """A USB gadget function the device can be switched to."""
    label: str
    mode: str


USB_FUNCTIONS: Tuple[UsbFunction, ...] = (
    UsbFunction("Transferring Files", "mtp"),
    UsbFunction("USB tethering", "rndis"),
    UsbFunction("MIDI", "midi"),
    UsbFunction("Transferring images", "ptp"),
    UsbFunction("Charge phone", "sec_charging"),
)


def find_usb_function(key: str) -> Optional[UsbFunction]:
    """Look up a catalog entry by mode token or by label (case-insensitive)."""
    key = key.strip()
    for func in USB_FUNCTIONS:
        if func.mode == key:
            return func
    for func in USB_FUNCTIONS:
        if func.label.lower() == key.lower():
            return func
    return None


@dataclass(frozen=True)
class DeviceConnected:
    devices: Tuple[DeviceId, ...]


@dataclass(frozen=True)
class DeviceDisconnected:
    pass
