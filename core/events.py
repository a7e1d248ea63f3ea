"""
Trigger sources that tell the monitor when to look for devices again.

A source hands out handler ids from connect() and takes them back in
disconnect(); callbacks receive the action string ("add", "remove", "tick").
"""
import asyncio
import itertools
from typing import Callable, Dict, Optional, Protocol

import pyudev

from .config import POLL_INTERVAL, UDEV_ACTIONS, UDEV_DEVICE_TYPE, UDEV_SUBSYSTEM
from utils.logging import get_logger

logger = get_logger(__name__)

TriggerCallback = Callable[[str], None]


class EventSource(Protocol):
    def connect(self, callback: TriggerCallback) -> int: ...

    def disconnect(self, handler_id: int) -> None: ...


class _CallbackRegistry:
    """Handler-id bookkeeping shared by the concrete sources."""

    def __init__(self):
        self._callbacks: Dict[int, TriggerCallback] = {}
        self._ids = itertools.count(1)

    def connect(self, callback: TriggerCallback) -> int:
        first = not self._callbacks
        handler_id = next(self._ids)
        self._callbacks[handler_id] = callback
        if first:
            try:
                self._open()
            except Exception:
                del self._callbacks[handler_id]
                raise
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        if self._callbacks.pop(handler_id, None) is None:
            return
        if not self._callbacks:
            self._close()

    @property
    def connected(self) -> int:
        return len(self._callbacks)

    def emit(self, action: str) -> None:
        for callback in list(self._callbacks.values()):
            try:
                callback(action)
            except Exception:
                logger.exception("Trigger callback failed on '%s'", action)

    def _open(self) -> None:
        pass

    def _close(self) -> None:
        pass


class UdevEventSource(_CallbackRegistry):
    """
    USB hotplug events from udev, read on the asyncio loop.

    The netlink monitor is opened when the first callback connects and
    released when the last one disconnects. connect() must run on the loop.
    """

    def __init__(self, subsystem: str = UDEV_SUBSYSTEM, device_type: str = UDEV_DEVICE_TYPE,
                 actions=UDEV_ACTIONS):
        super().__init__()
        self.subsystem = subsystem
        self.device_type = device_type
        self.actions = tuple(actions)
        self._monitor: Optional[pyudev.Monitor] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _open(self) -> None:
        context = pyudev.Context()
        monitor = pyudev.Monitor.from_netlink(context)
        monitor.filter_by(subsystem=self.subsystem, device_type=self.device_type)
        monitor.start()

        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(monitor.fileno(), self._drain)
        self._monitor = monitor
        logger.info("Listening for udev %s/%s events", self.subsystem, self.device_type)

    def _close(self) -> None:
        if self._monitor is not None and self._loop is not None:
            self._loop.remove_reader(self._monitor.fileno())
        self._monitor = None
        self._loop = None

    def _drain(self) -> None:
        if self._monitor is None:
            return
        while True:
            device = self._monitor.poll(timeout=0)
            if device is None:
                return
            if device.action not in self.actions:
                continue
            logger.debug("udev %s %s", device.action, device.sys_path)
            self.emit(device.action)


class IntervalEventSource(_CallbackRegistry):
    """Emits "tick" every `interval` seconds. For hosts without udev."""

    def __init__(self, interval: float = POLL_INTERVAL):
        super().__init__()
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    def _open(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._run())

    def _close(self) -> None:
        if self._task is not None:
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.emit("tick")


def create_event_source(kind: str) -> EventSource:
    """Build the trigger source named in configuration."""
    if kind == "udev":
        return UdevEventSource()
    if kind == "interval":
        return IntervalEventSource()
    raise ValueError(f"Unknown event source '{kind}' (expected 'udev' or 'interval')")
