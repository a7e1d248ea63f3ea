"""
Indicator presentation: a slot that holds at most one indicator with the
USB function menu, shown while a device is present.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .config import ANY_DEVICE, INDICATOR_ICON, INDICATOR_TITLE
from .models import (
    USB_FUNCTIONS, DeviceConnected, DeviceDisconnected, DeviceId, UsbFunction,
    find_usb_function,
)
from utils.logging import get_logger

logger = get_logger(__name__)

ModeSwitch = Callable[[str, DeviceId], object]


@dataclass(frozen=True)
class MenuItem:
    label: str
    mode: str


class Indicator:
    """The indicator and its menu. Activating an item requests a mode switch."""

    def __init__(self, request_mode_switch: ModeSwitch,
                 functions: Sequence[UsbFunction] = USB_FUNCTIONS,
                 title: str = INDICATOR_TITLE, icon: str = INDICATOR_ICON):
        self.title = title
        self.icon = icon
        self._request_mode_switch = request_mode_switch
        self.menu: List[MenuItem] = [MenuItem(f.label, f.mode) for f in functions]
        self.destroyed = False

    def activate(self, key: str, device: DeviceId = ANY_DEVICE) -> MenuItem:
        """
        Activate the menu item matching `key` (mode token or label).

        Raises KeyError if nothing matches, RuntimeError once destroyed.
        """
        if self.destroyed:
            raise RuntimeError("Indicator has been destroyed")
        func = find_usb_function(key)
        item = next((i for i in self.menu if func and i.mode == func.mode), None)
        if item is None:
            raise KeyError(key)
        logger.info("Menu item '%s' activated", item.label)
        self._request_mode_switch(item.mode, device)
        return item

    def destroy(self) -> None:
        self.destroyed = True
        self.menu = []


class IndicatorSlot:
    """
    Holds 0 or 1 Indicator. Wire it to a monitor with attach(); it creates
    the indicator on DeviceConnected and destroys it on DeviceDisconnected.
    """

    def __init__(self, request_mode_switch: ModeSwitch):
        self._request_mode_switch = request_mode_switch
        self._indicator: Optional[Indicator] = None

    @classmethod
    def attach(cls, monitor) -> "IndicatorSlot":
        slot = cls(monitor.request_mode_switch)
        monitor.on_connected(slot.handle_connected)
        monitor.on_disconnected(slot.handle_disconnected)
        return slot

    @property
    def indicator(self) -> Optional[Indicator]:
        return self._indicator

    @property
    def is_visible(self) -> bool:
        return self._indicator is not None

    def handle_connected(self, event: DeviceConnected) -> None:
        if self._indicator is not None:
            return
        self._indicator = Indicator(self._request_mode_switch)
        logger.info("Indicator shown")

    def handle_disconnected(self, event: DeviceDisconnected) -> None:
        if self._indicator is None:
            return
        self._indicator.destroy()
        self._indicator = None
        logger.info("Indicator removed")
