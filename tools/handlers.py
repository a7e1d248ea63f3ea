"""
MCP Tool definitions for Android USB Options.

The indicator shown in the desktop panel becomes a set of tools: a client
can see whether a device is attached, read the USB function menu and pick
an entry from it.
"""
from typing import List

from mcp.server.fastmcp import FastMCP

from core.config import ANY_DEVICE
from core.exceptions import CommandExecutionError
from core.indicator import IndicatorSlot
from core.models import DeviceEntry, DeviceState
from core.monitor import DeviceSessionMonitor

# Guidance per adb state
_STATE_HINTS = {
    DeviceState.UNAUTHORIZED: "Accept USB debugging prompt on device",
    DeviceState.OFFLINE: "Reconnect device",
    DeviceState.NO_PERMISSIONS: "Check udev rules / plugdev group",
}


def format_device_entries(entries: List[DeviceEntry]) -> str:
    if not entries:
        return ("STATUS: NO_DEVICES\nNo devices found.\n"
                "Action: Connect device and enable USB debugging.")

    lines = [f"STATUS: FOUND_{len(entries)}_DEVICE(S)", ""]
    for entry in entries:
        line = f"  {entry.serial}: {entry.state.value.upper()}"
        if entry.state == DeviceState.UNKNOWN and entry.raw_state:
            line += f" ({entry.raw_state})"
        hint = _STATE_HINTS.get(entry.state)
        if hint:
            line += f" - {hint}"
        lines.append(line)
    return "\n".join(lines)


def format_status(monitor: DeviceSessionMonitor, slot: IndicatorSlot) -> str:
    devices = monitor.devices
    lines = [
        f"STATUS: {monitor.state.name}",
        f"Devices: {', '.join(devices) if devices else '(none)'}",
        f"Indicator: {'SHOWN' if slot.is_visible else 'HIDDEN'}",
    ]
    return "\n".join(lines)


def format_menu(slot: IndicatorSlot) -> str:
    indicator = slot.indicator
    if indicator is None:
        return ("STATUS: NO_INDICATOR\nNo Android device connected.\n"
                "Action: Connect device, then call refresh_devices.")

    lines = ["STATUS: INDICATOR", f"Title: {indicator.title}", f"Icon: {indicator.icon}", "Menu:"]
    for item in indicator.menu:
        lines.append(f"  {item.mode}: {item.label}")
    return "\n".join(lines)


def activate_menu_item(slot: IndicatorSlot, mode: str, device_serial: str = ANY_DEVICE) -> str:
    indicator = slot.indicator
    if indicator is None:
        return ("STATUS: ERROR\nReason: No Android device connected.\n"
                "Action: Connect device, then call refresh_devices.")
    try:
        item = indicator.activate(mode, device_serial or ANY_DEVICE)
    except KeyError:
        valid = ", ".join(i.mode for i in indicator.menu)
        return f"STATUS: ERROR\nReason: Unknown USB function '{mode}'.\nAction: Use one of: {valid}"

    return (f"STATUS: REQUESTED\nFunction: {item.mode} ({item.label})\n"
            f"Device: {device_serial or ANY_DEVICE}\n"
            "If the device does not switch, pick the entry again.")


def register_tools(mcp: FastMCP, monitor: DeviceSessionMonitor, slot: IndicatorSlot):
    """Register all MCP tools with the server."""

    # ==================== TOOL 1: list_devices ====================
    @mcp.tool()
    async def list_devices() -> str:
        """
        List every device adb reports, with its state.

        Unauthorized and offline devices are listed too, with the action
        needed to make them usable.
        """
        try:
            entries = await monitor.list_device_entries()
        except CommandExecutionError as e:
            return f"STATUS: ERROR\nReason: {e}\nAction: Check that adb is installed and on PATH."
        return format_device_entries(entries)

    # ==================== TOOL 2: device_status ====================
    @mcp.tool()
    async def device_status() -> str:
        """
        Current presence state as of the last poll.

        Returns PRESENT/ABSENT, the connected serials and whether the
        USB options indicator is shown.
        """
        return format_status(monitor, slot)

    # ==================== TOOL 3: usb_functions ====================
    @mcp.tool()
    async def usb_functions() -> str:
        """
        The USB options menu. Only available while a device is connected.
        """
        return format_menu(slot)

    # ==================== TOOL 4: set_usb_function ====================
    @mcp.tool()
    async def set_usb_function(mode: str, device_serial: str = ANY_DEVICE) -> str:
        """
        Switch the connected device to a USB function.

        Args:
            mode: mtp, rndis, midi, ptp or sec_charging (menu labels work too)
            device_serial: Target serial, or "any" for the only connected device

        The switch runs in the background; failures are logged, not returned.
        """
        return activate_menu_item(slot, mode, device_serial)

    # ==================== TOOL 5: refresh_devices ====================
    @mcp.tool()
    async def refresh_devices() -> str:
        """
        Poll adb now instead of waiting for the next USB event.
        If a poll is already running, waits for the follow-up poll it queues.
        """
        await monitor.poll()
        return format_status(monitor, slot)
