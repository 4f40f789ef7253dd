"""CLI entry point."""

import asyncio
import os
import sys
from pathlib import Path

from client import Client
from cli.config import Config
from cli.repl import repl_loop
from common.exceptions import ConfigError
from common.logging_config import setup_logging

CONFIG_PATH = Path.home() / '.bridgefetch' / 'config.json'


async def run(config: Config) -> None:
    client = Client(config.get_client_options())
    await repl_loop(client)


def main() -> None:
    """Entry point for CLI."""
    log_level = 'DEBUG' if '--debug' in sys.argv else os.getenv('LOG_LEVEL', 'WARNING')

    logger = setup_logging('cli', log_level=log_level)

    if '--debug' in sys.argv:
        logger.info("Debug logging enabled")
        sys.argv.remove('--debug')

    logger.info("CLI starting...")
    try:
        asyncio.run(run(Config(CONFIG_PATH)))
    except ConfigError as e:
        print(f"Invalid configuration in {CONFIG_PATH}: {e}")
        sys.exit(2)
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
