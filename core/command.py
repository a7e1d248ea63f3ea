"""
External command invocation and `adb devices` parsing.
"""
import asyncio
from typing import List, Optional

from .config import CONNECTED_STATE
from .exceptions import CommandExecutionError
from .models import DeviceEntry, DeviceList, DeviceState
from utils.logging import get_logger

logger = get_logger(__name__)


async def run_command(argv: List[str], timeout: Optional[float] = None) -> str:
    """
    Run a command without blocking the event loop and return its stdout, stripped.

    Raises CommandExecutionError if the process cannot be started, does not
    finish within `timeout`, or exits non-zero.
    """
    logger.debug("exec: %s", " ".join(argv))
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (OSError, ValueError) as e:
        # ValueError: argv contains a NUL byte
        raise CommandExecutionError(f"Error executing {argv[0]}: {e}", argv) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError as e:
        await _reap(process)
        raise CommandExecutionError(f"Timed out after {timeout}s: {' '.join(argv)}", argv) from e
    except BaseException:
        # Cancelled (monitor stopping): never leave adb running
        await _reap(process)
        raise

    out = stdout.decode("utf-8", errors="replace").strip()
    if process.returncode != 0:
        err = stderr.decode("utf-8", errors="replace").strip()
        raise CommandExecutionError(
            f"Error executing {argv[0]} (exit {process.returncode}): {err or out}",
            argv,
            process.returncode,
        )
    return out


def _device_lines(output: str) -> List[List[str]]:
    # First line is the "List of devices attached" header
    return [line.split("\t") for line in output.splitlines()[1:]]


def parse_device_entries(output: str) -> List[DeviceEntry]:
    """All well-formed `<serial>\\t<state>` lines, whatever the state."""
    entries = []
    for parts in _device_lines(output):
        if len(parts) < 2 or not parts[0].strip():
            continue
        entries.append(DeviceEntry(
            serial=parts[0].strip(),
            state=DeviceState.from_token(parts[1]),
            raw_state=parts[1].strip(),
        ))
    return entries


def parse_device_list(output: str) -> DeviceList:
    """Serials of the devices adb reports as connected and authorized."""
    return [parts[0] for parts in _device_lines(output)
            if len(parts) >= 2 and parts[1] == CONNECTED_STATE]


async def _reap(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()
