"""Run the webhook application under uvicorn."""

import uvicorn

from channel_feed.api.app import create_app
from channel_feed.config import ChannelFeedConfig


def main() -> None:
    config = ChannelFeedConfig()
    uvicorn.run(
        create_app(),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
