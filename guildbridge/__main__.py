"""Entry point: ``python -m guildbridge`` or the ``guildbridge`` script."""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from guildbridge import __version__
from guildbridge.config.loader import load_config, validate_config
from guildbridge.errors import ConfigError, FatalConnectionError


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="guildbridge", description="Minecraft guild chat bridge for Discord")
    parser.add_argument("-c", "--config", type=Path, help="Path to config.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging("DEBUG" if args.verbose else config.logging.level)

    try:
        validate_config(config)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    from guildbridge.bridge import Bridge

    logger.info(f"Starting guildbridge {__version__}")
    try:
        asyncio.run(Bridge(config).run())
    except FatalConnectionError as e:
        logger.error(f"Giving up: {e}")
        return 1
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
