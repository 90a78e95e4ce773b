#!/usr/bin/env python3
"""
Channel authorization and webhook endpoint example.

Serves two endpoints with aiohttp:
    POST /channels/auth  - authorizes private, presence and encrypted channels
    POST /webhooks       - verifies and decodes webhooks

Environment variables required:
    PUSHER_APP_ID
    PUSHER_KEY
    PUSHER_SECRET
    PUSHER_ENCRYPTION_MASTER_KEY_BASE64  (for private-encrypted-* channels)
"""

import logging

from aiohttp import web

from channels_secure import ChannelsClient, ChannelsError, SignatureError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

client = ChannelsClient()


async def channel_auth(request: web.Request) -> web.Response:
    """Authorize a subscription for the connecting socket."""
    form = await request.post()
    channel = str(form.get("channel_name", ""))
    socket_id = str(form.get("socket_id", ""))

    try:
        if channel.startswith("presence-"):
            # Replace with your own session lookup
            body = client.presence_auth(channel, socket_id, "123", {"name": "Alice"})
        else:
            body = client.authorize_channel(channel, socket_id)
    except ChannelsError as e:
        logger.warning(f"Refused authorization for {channel}: {e}")
        return web.Response(status=403, text=str(e))

    return web.Response(text=body, content_type="application/json")


async def webhook(request: web.Request) -> web.Response:
    """Verify and log a webhook call."""
    body = await request.read()

    try:
        hook = client.webhook(request.headers, body)
    except SignatureError as e:
        logger.warning(str(e))
        return web.Response(status=401)

    for event in hook.events:
        logger.info(f"webhook event={event.get('name')} channel={event.get('channel')}")
    return web.Response(text="ok")


def main() -> None:
    app = web.Application()
    app.router.add_post("/channels/auth", channel_auth)
    app.router.add_post("/webhooks", webhook)
    web.run_app(app, port=8000)


if __name__ == "__main__":
    main()
