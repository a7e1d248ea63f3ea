"""
Configuration and constants for Android USB Options.
"""
import os
import shutil

ADB_BINARY = os.environ.get("ANDROID_USB_OPTIONS_ADB") or shutil.which("adb") or "adb"

# Fixed command lines
ADB_DEVICES = [ADB_BINARY, "devices"]
SVC_SET_FUNCTIONS = ["shell", "svc", "usb", "setFunctions"]

# Target token meaning "whichever device adb picks"
ANY_DEVICE = "any"

# State token adb prints for an authorized, online device
CONNECTED_STATE = "device"

# Seconds to wait after a USB event before polling; adb needs a moment
# to report a device that was just plugged in.
SETTLE_DELAY = float(os.environ.get("ANDROID_USB_OPTIONS_SETTLE_DELAY", "2.0"))

# None = wait for the command forever
COMMAND_TIMEOUT = None

# Trigger source: "udev" (hotplug events) or "interval" (fixed timer)
EVENT_SOURCE = os.environ.get("ANDROID_USB_OPTIONS_EVENTS", "udev")
POLL_INTERVAL = 5.0  # seconds, interval source only

# udev filter for USB hotplug
UDEV_SUBSYSTEM = "usb"
UDEV_DEVICE_TYPE = "usb_device"
UDEV_ACTIONS = ("add", "remove")

# Indicator presentation
INDICATOR_TITLE = "Android USB Options Indicator"
INDICATOR_ICON = "smartphone"

# Logging
LOG_LEVEL = os.environ.get("ANDROID_USB_OPTIONS_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
