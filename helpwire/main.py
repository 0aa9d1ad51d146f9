"""Console entry point for helpwire.

Initializes logging in two phases (defaults then config-driven),
creates the Bot, loads the Helper module, and feeds lines read from
stdin to it as chat messages. Replies are printed to stdout.

Key functions:
    main: Async entry point.
    run: Synchronous wrapper for the ``helpwire`` console script.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from .logging_config import setup_logging


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="helpwire", description=__doc__.splitlines()[0])
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="directory holding settings.yaml and .env")
    parser.add_argument("--channel", default=None,
                        help="treat input as said in this channel (default: private)")
    parser.add_argument("--nick", default="console", help="sender name of input lines")
    return parser.parse_args(argv)


async def _print_reply(target: str, message: str) -> None:
    print(f"-> {target}: {message}", flush=True)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main async entry point. Returns the process exit code."""
    args = _parse_args(argv)

    # Phase 1: defaults, cache_logger_on_first_use=False
    setup_logging()
    logger = structlog.get_logger("helpwire")

    from .bot import Bot
    from .config import Config
    from .exceptions import ConfigurationError, ModuleLoadError
    from .help import Helper

    try:
        config = Config(args.config_dir)
    except ConfigurationError as e:
        logger.error("helpwire_config_failed", error=str(e))
        return 1
    config.validate()

    # Phase 2: reconfigure with real config
    setup_logging(config)

    bot = Bot(config, send_message=_print_reply)
    try:
        bot.load_module(Helper, strict=True)
    except ModuleLoadError as e:
        logger.error("helpwire_startup_failed", error=str(e), cause=str(e.__cause__))
        return 1

    logger.info("helpwire_started", trigger=bot.helper.trigger, channel=args.channel)

    loop = asyncio.get_running_loop()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            line = line.rstrip("\n")
            if line:
                await bot.handle_text(args.nick, line, channel=args.channel)
    finally:
        bot.unload_module(Helper.name)
        logger.info("helpwire_stopped")
    return 0


def run():
    """Synchronous entry point for the ``helpwire`` console script."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
