"""
Android USB Options - MCP Server
Entry point for the MCP server.
"""
from contextlib import asynccontextmanager

from mcp.server.fastmcp import FastMCP

from core.config import EVENT_SOURCE, LOG_FORMAT, LOG_LEVEL, SETTLE_DELAY
from core.events import create_event_source
from core.indicator import IndicatorSlot
from core.monitor import DeviceSessionMonitor
from utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

monitor = DeviceSessionMonitor(create_event_source(EVENT_SOURCE), settle_delay=SETTLE_DELAY)
slot = IndicatorSlot.attach(monitor)


@asynccontextmanager
async def lifespan(server: FastMCP):
    """Run the device monitor for as long as the server is up."""
    await monitor.start()
    try:
        yield {"monitor": monitor, "slot": slot}
    finally:
        await monitor.stop()


# Create MCP server instance
mcp = FastMCP("AndroidUsbOptions", lifespan=lifespan)

from tools import register_tools
register_tools(mcp, monitor, slot)


def main():
    """Main entry point for script execution."""
    setup_logging(LOG_LEVEL, LOG_FORMAT)
    logger.info("Starting Android USB Options server (events: %s)", EVENT_SOURCE)
    mcp.run()


if __name__ == "__main__":
    main()
