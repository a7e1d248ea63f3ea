"""
DeviceSessionMonitor: tracks whether an Android device is attached and
switches its USB function on request.
"""
import asyncio
from typing import Awaitable, Callable, List, Optional, Set

from .command import parse_device_entries, parse_device_list, run_command
from .config import (
    ADB_BINARY, ADB_DEVICES, ANY_DEVICE, COMMAND_TIMEOUT, SETTLE_DELAY,
    SVC_SET_FUNCTIONS,
)
from .events import EventSource
from .exceptions import CommandExecutionError
from .models import (
    DeviceConnected, DeviceDisconnected, DeviceEntry, DeviceId, DeviceList,
    PresenceState, find_usb_function,
)
from utils.logging import get_logger

logger = get_logger(__name__)

CommandRunner = Callable[..., Awaitable[str]]
ConnectedListener = Callable[[DeviceConnected], None]
DisconnectedListener = Callable[[DeviceDisconnected], None]


class DeviceSessionMonitor:
    """
    Polls `adb devices` and keeps a two-state presence (ABSENT/PRESENT).

    Listeners registered with on_connected()/on_disconnected() are told about
    transitions only. Polls are serialised: a poll requested while another is
    running is folded into one follow-up poll.
    """

    def __init__(
        self,
        event_source: Optional[EventSource] = None,
        runner: Optional[CommandRunner] = None,
        settle_delay: float = SETTLE_DELAY,
        adb_binary: str = ADB_BINARY,
        timeout: Optional[float] = COMMAND_TIMEOUT,
    ):
        self._event_source = event_source
        self._runner = runner or run_command
        self.settle_delay = settle_delay
        self._adb = adb_binary
        self._timeout = timeout

        self._state = PresenceState.ABSENT
        self._devices: DeviceList = []
        self._connected_listeners: List[ConnectedListener] = []
        self._disconnected_listeners: List[DisconnectedListener] = []

        self._handler_id: Optional[int] = None
        self._tasks: Set[asyncio.Task] = set()
        self._polling = False
        self._repoll = False
        self._done: Optional[asyncio.Future] = None

    # ==================== State ====================

    @property
    def state(self) -> PresenceState:
        return self._state

    @property
    def is_present(self) -> bool:
        return self._state == PresenceState.PRESENT

    @property
    def devices(self) -> DeviceList:
        """Devices seen by the last successful poll (a copy)."""
        return list(self._devices)

    @property
    def is_running(self) -> bool:
        return self._handler_id is not None

    def on_connected(self, callback: ConnectedListener) -> None:
        self._connected_listeners.append(callback)

    def on_disconnected(self, callback: DisconnectedListener) -> None:
        self._disconnected_listeners.append(callback)

    # ==================== Lifecycle ====================

    async def start(self) -> None:
        """Subscribe to the event source and run the startup poll."""
        if self._event_source is not None and self._handler_id is None:
            self._handler_id = self._event_source.connect(self._on_trigger)
        logger.info("Device monitor started (settle delay %.1fs)", self.settle_delay)
        await self.poll()

    async def stop(self) -> None:
        """Unsubscribe and drop any scheduled polls or mode switches."""
        if self._event_source is not None and self._handler_id is not None:
            self._event_source.disconnect(self._handler_id)
        self._handler_id = None

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("Device monitor stopped")

    def _on_trigger(self, action: str) -> None:
        logger.debug("USB event '%s', polling in %.1fs", action, self.settle_delay)
        self.schedule_poll()

    def schedule_poll(self, delay: Optional[float] = None) -> asyncio.Task:
        """Poll after `delay` seconds (default: settle delay). Must be called on the loop."""
        if delay is None:
            delay = self.settle_delay
        return self._spawn(self._delayed_poll(delay))

    async def _delayed_poll(self, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        await self.poll()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ==================== Device listing ====================

    async def _adb_devices(self) -> str:
        argv = list(ADB_DEVICES)
        argv[0] = self._adb
        return await self._runner(argv, timeout=self._timeout)

    async def list_connected_devices(self) -> DeviceList:
        """
        Serials of all connected, authorized devices.

        Raises CommandExecutionError if adb cannot be run.
        """
        return parse_device_list(await self._adb_devices())

    async def list_device_entries(self) -> List[DeviceEntry]:
        """Every device adb reports, with its state. Raises CommandExecutionError."""
        return parse_device_entries(await self._adb_devices())

    async def poll(self) -> PresenceState:
        """
        List devices and apply the result. Returns the resulting state.

        If a poll is already running, one follow-up poll is queued and this
        call returns the state after that follow-up has been applied.
        """
        if self._polling:
            self._repoll = True
            return await asyncio.shield(self._done)

        self._polling = True
        self._done = asyncio.get_running_loop().create_future()
        try:
            while True:
                self._repoll = False
                try:
                    devices = await self.list_connected_devices()
                except CommandExecutionError as e:
                    # Unknown is not absent: keep the last known state
                    logger.warning("Device poll failed, keeping state %s: %s",
                                   self._state.value, e)
                else:
                    self._apply(devices)
                if not self._repoll:
                    break
        finally:
            self._polling = False
            if not self._done.done():
                self._done.set_result(self._state)
        return self._state

    def _apply(self, devices: DeviceList) -> None:
        previous = self._state
        self._devices = list(devices)
        self._state = PresenceState.PRESENT if devices else PresenceState.ABSENT

        if previous == PresenceState.ABSENT and self._state == PresenceState.PRESENT:
            logger.info("Device connected: %s", ", ".join(devices))
            self._emit(self._connected_listeners, DeviceConnected(tuple(devices)))
        elif previous == PresenceState.PRESENT and self._state == PresenceState.ABSENT:
            logger.info("Device disconnected")
            self._emit(self._disconnected_listeners, DeviceDisconnected())

    def _emit(self, listeners, event) -> None:
        for listener in list(listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, type(event).__name__)

    # ==================== Mode switch ====================

    def _set_functions_argv(self, mode: str, device: DeviceId) -> List[str]:
        argv = [self._adb]
        if device and device != ANY_DEVICE:
            argv += ["-s", device]
        return argv + SVC_SET_FUNCTIONS + [mode]

    async def set_usb_function(self, mode: str, device: DeviceId = ANY_DEVICE) -> None:
        """
        Switch the device's USB function. Never raises: failures are logged,
        the user can simply pick the entry again.
        """
        func = find_usb_function(mode)
        if func is None or func.mode != mode:
            logger.error("Unknown USB function '%s', not sent", mode)
            return

        argv = self._set_functions_argv(mode, device)
        try:
            await self._runner(argv, timeout=self._timeout)
        except CommandExecutionError as e:
            logger.warning("USB function switch to '%s' on %s failed: %s", mode, device, e)
            return
        logger.info("USB function set to '%s' on %s", mode, device)

    def request_mode_switch(self, mode: str, device: DeviceId = ANY_DEVICE) -> asyncio.Task:
        """Fire-and-forget set_usb_function(). Must be called on the loop."""
        return self._spawn(self.set_usb_function(mode, device))
