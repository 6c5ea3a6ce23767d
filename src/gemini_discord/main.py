"""
Entry point: load configuration, configure logging and run the Discord bot.
"""

import logging
import os
import sys

from dotenv import load_dotenv

from . import __version__
from .bot.client import AnswerBot
from .config import Settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main():
    """Main entry point."""
    load_dotenv()
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    settings = Settings.from_env()
    settings.log_warnings()

    if not settings.discord_token:
        logger.error("No DISCORD_TOKEN found in environment. Please check your .env file.")
        sys.exit(1)

    logger.info(f"Starting Gemini Discord Bot v{__version__}")
    try:
        bot = AnswerBot(settings)
        bot.run(settings.discord_token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Bot error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
