"""
Core module for Android USB Options.
Contains models, configuration, command helpers, trigger sources, the
device monitor and the indicator slot.
"""
from .models import (
    DeviceState, PresenceState, DeviceEntry, UsbFunction, USB_FUNCTIONS,
    DeviceConnected, DeviceDisconnected, find_usb_function,
)
from .config import (
    ADB_BINARY, ADB_DEVICES, SVC_SET_FUNCTIONS, ANY_DEVICE, SETTLE_DELAY,
    EVENT_SOURCE, POLL_INTERVAL,
)
from .exceptions import AndroidUsbOptionsError, CommandExecutionError
from .command import run_command, parse_device_list, parse_device_entries
from .events import EventSource, UdevEventSource, IntervalEventSource, create_event_source
from .monitor import DeviceSessionMonitor
from .indicator import Indicator, IndicatorSlot, MenuItem

__all__ = [
    # Models
    "DeviceState",
    "PresenceState",
    "DeviceEntry",
    "UsbFunction",
    "USB_FUNCTIONS",
    "DeviceConnected",
    "DeviceDisconnected",
    "find_usb_function",
    # Config
    "ADB_BINARY",
    "ADB_DEVICES",
    "SVC_SET_FUNCTIONS",
    "ANY_DEVICE",
    "SETTLE_DELAY",
    "EVENT_SOURCE",
    "POLL_INTERVAL",
    # Errors
    "AndroidUsbOptionsError",
    "CommandExecutionError",
    # Commands
    "run_command",
    "parse_device_list",
    "parse_device_entries",
    # Classes
    "EventSource",
    "UdevEventSource",
    "IntervalEventSource",
    "create_event_source",
    "DeviceSessionMonitor",
    "Indicator",
    "IndicatorSlot",
    "MenuItem",
]
