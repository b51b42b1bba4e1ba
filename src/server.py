"""Protean Engine runner for the storefront domain.

In production (``PROTEAN_ENV=production``) events are processed
asynchronously: the Engine delivers OrderStatusChanged, TrackingUpdated and
cancellation events to the notification handlers.

Usage:
    python src/server.py
    python src/server.py --test-mode   # Drain pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


async def run(test_mode: bool):
    from storefront.domain import storefront

    storefront.init()
    engine = Engine(storefront, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(args.test_mode))


if __name__ == "__main__":
    main()
