"""
Price Input - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line runner for a single price input.

- Loads configuration from a YAML file or the environment
- Lets flags override individual settings
- Initializes the input once, then gathers once or on an interval
- Prints the sample configuration

============================================================
USAGE
============================================================
python -m price_input.cli --base-asset BTC --quote-asset USDT --once
python -m price_input.cli --config binance.yaml --interval 10
python -m price_input.cli --sample-config

============================================================
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
import time
from typing import List, Optional

from price_input import __version__
from price_input.accumulator import LoggingAccumulator, MemoryAccumulator
from price_input.base import BasePriceInput
from price_input.exceptions import ConfigurationError, InitializationError
from price_input.models import CollectorConfig, parse_duration, sample_config
from price_input.registry import get_default_registry


logger = logging.getLogger(__name__)


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="price-input",
        description="Poll the spot price of one trading pair and emit it as a metric",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from --config when given, otherwise from the
PRICE_INPUT_* environment variables (a .env file is honoured).
Flags override either source.

Examples:
  %(prog)s --base-asset BTC --quote-asset USDT --once
  %(prog)s --config binance.yaml --interval 10
  %(prog)s --sample-config > binance.yaml
        """
    )

    # --------------------------------------------------------
    # Configuration
    # --------------------------------------------------------
    config_group = parser.add_argument_group("Configuration")

    config_group.add_argument(
        "--config", "-c",
        type=str,
        metavar="PATH",
        help="YAML configuration file",
    )

    config_group.add_argument(
        "--input",
        type=str,
        default="binance",
        help="Registered input to run (default: binance)",
    )

    config_group.add_argument(
        "--base-asset",
        type=str,
        help="Base asset, e.g. BTC",
    )

    config_group.add_argument(
        "--quote-asset",
        type=str,
        help="Quote asset, e.g. USDT",
    )

    config_group.add_argument(
        "--timeout",
        type=str,
        metavar="DURATION",
        help="Per-request timeout, e.g. 5s or 500ms; 0 disables it",
    )

    config_group.add_argument(
        "--base-url",
        type=str,
        help="API root the endpoints are resolved against",
    )

    # --------------------------------------------------------
    # Execution Options
    # --------------------------------------------------------
    execution_group = parser.add_argument_group("Execution Options")

    execution_group.add_argument(
        "--once",
        action="store_true",
        help="Gather a single cycle, print the metric as JSON and exit",
    )

    execution_group.add_argument(
        "--interval",
        type=float,
        default=10.0,
        metavar="SECONDS",
        help="Gather interval in seconds (default: 10)",
    )

    execution_group.add_argument(
        "--cycles",
        type=int,
        default=0,
        help="Stop after this many cycles (default: 0 = run until interrupted)",
    )

    # --------------------------------------------------------
    # Logging Options
    # --------------------------------------------------------
    logging_group = parser.add_argument_group("Logging Options")

    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    # --------------------------------------------------------
    # Version/Info
    # --------------------------------------------------------
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--sample-config",
        action="store_true",
        help="Print the sample configuration and exit",
    )

    return parser


def validate_args(args: argparse.Namespace) -> List[str]:
    """Validate CLI arguments, return list of errors."""
    errors = []

    if args.interval <= 0:
        errors.append("--interval must be positive")

    if args.cycles < 0:
        errors.append("--cycles cannot be negative")

    return errors


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace) -> CollectorConfig:
    """
    Build collector configuration from file/environment plus flags.

    Raises:
        ConfigurationError: If the file or a flag value is unusable
    """
    config = CollectorConfig.from_yaml(args.config) if args.config else CollectorConfig.from_env()

    overrides = {}
    if args.base_asset is not None:
        overrides["base_asset"] = args.base_asset
    if args.quote_asset is not None:
        overrides["quote_asset"] = args.quote_asset
    if args.timeout is not None:
        overrides["timeout"] = parse_duration(args.timeout)
    if args.base_url is not None:
        overrides["base_url"] = args.base_url

    return dataclasses.replace(config, **overrides) if overrides else config


def setup_logging(level: str) -> None:
    """Configure root logging for the runner."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ============================================================
# RUNNERS
# ============================================================

async def run_once(price_input: BasePriceInput) -> int:
    """Gather one cycle, print the metric as JSON, report errors on stderr."""
    acc = MemoryAccumulator()
    await price_input.gather(acc)

    for metric in acc.metrics:
        print(json.dumps(metric.to_dict()))
    for error in acc.errors:
        print(f"Error: {error}", file=sys.stderr)

    return 1 if acc.errors else 0


async def run_interval(price_input: BasePriceInput, interval: float, cycles: int = 0) -> int:
    """Gather every `interval` seconds; cycles=0 runs until cancelled."""
    acc = LoggingAccumulator()
    completed = 0

    while cycles == 0 or completed < cycles:
        started = time.monotonic()
        await price_input.gather(acc)
        completed += 1

        if cycles and completed >= cycles:
            break
        await asyncio.sleep(max(0.0, interval - (time.monotonic() - started)))

    logger.info(
        f"[{price_input.name}] Stopped after {completed} cycles "
        f"({acc.metric_count} metrics, {acc.error_count} errors)"
    )
    return 0


# ============================================================
# MAIN ENTRY POINT
# ============================================================

async def async_main(args: argparse.Namespace) -> int:
    """
    Async main entry point.

    Returns:
        Exit code
    """
    try:
        config = build_config(args)
        price_input = get_default_registry().create(args.input, config)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    async with price_input:
        try:
            await price_input.initialize()
        except (ConfigurationError, InitializationError) as e:
            logger.error(f"Initialization failed: {e}")
            return 1

        if args.once:
            return await run_once(price_input)
        return await run_interval(price_input, args.interval, args.cycles)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.sample_config:
        print(sample_config(), end="")
        return 0

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    setup_logging(args.log_level)

    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
