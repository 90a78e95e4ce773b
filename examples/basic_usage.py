#!/usr/bin/env python3
"""
Basic usage example.

Publishes an event on a public channel and an end-to-end encrypted event
on a private-encrypted channel, then prints channel occupancy.

Required environment variables:
    PUSHER_APP_ID
    PUSHER_KEY
    PUSHER_SECRET
    PUSHER_CLUSTER
    PUSHER_ENCRYPTION_MASTER_KEY_BASE64  (for the encrypted channel)
"""

import asyncio
import logging

from channels_secure import ChannelsClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def main() -> None:
    async with ChannelsClient() as client:
        await client.trigger("notifications", "alert", {"message": "hello"})
        logger.info("published on channel=notifications")

        await client.trigger("private-encrypted-ops", "deploy", {"build": 42})
        logger.info("published on channel=private-encrypted-ops")

        result = await client.get_channels({"filter_by_prefix": "presence-"})
        logger.info("occupied presence channels=%s", list(result["channels"]))


if __name__ == "__main__":
    asyncio.run(main())
