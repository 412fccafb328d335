"""Command-line entrypoint that brings the configured driver up and down."""

import asyncio
import logging

from cloud_drivers.app_logging import configure_logging
from cloud_drivers.containers import build_container

_logger = logging.getLogger(__name__)


async def run() -> str:
    """Initialize the configured driver once, then release it."""
    container = build_container()
    driver = container.driver
    try:
        await driver.initialize()
        _logger.info("Driver %s ready", driver.name())
        return driver.name()
    finally:
        await container.close_resources()


def main() -> None:
    """Run the startup check and report the active driver."""
    configure_logging()
    name = asyncio.run(run())
    print(f"Cloud Drivers: {name} driver initialized")


if __name__ == "__main__":
    main()
