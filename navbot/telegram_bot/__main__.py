"""
Telegram Bot Entry Point
========================

Usage:
    navbot
    navbot --debug
    python -m navbot.telegram_bot --config ./config.yaml
"""

import argparse
import logging
import sys


def setup_logging(level: str = "INFO", fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"):
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every Bot API request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run the navbot Telegram bot")
    parser.add_argument("--config", "-c", help="Path to config file (default: ~/.navbot/config.yaml)")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--token", help="Telegram bot token (overrides .env)")
    parser.add_argument("--init-config", action="store_true", help="Write the default config file and exit")

    args = parser.parse_args(argv)

    from ..config.loader import ConfigLoader
    from ..core.foundation.exceptions import ConfigurationError

    loader = ConfigLoader(args.config)
    if args.init_config:
        setup_logging()
        loader.create_default_config()
        return 0

    config = loader.load()
    if args.token:
        config.telegram.token = args.token
    if args.debug:
        config.debug = True
        config.logging.level = "DEBUG"

    setup_logging(config.logging.level, config.logging.format)
    logger = logging.getLogger(__name__)

    try:
        loader.validate(config)

        from .bot import TelegramBotHandler

        bot = TelegramBotHandler(config)

        logger.info("Starting navbot...")
        bot.run()

    except KeyboardInterrupt:
        logger.info("Bot stopped by user.")
        return 0
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except ImportError as e:
        logger.error(f"Missing dependency: {e}\n" "Install with: pip install python-telegram-bot")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
