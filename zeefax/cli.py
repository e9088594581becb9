"""Command-line interface for zeefax."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import pprint
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .aggregator import build_aggregator
from .api import feeds_endpoint
from .config import AppConfig, load_categories, parse_app_config
from .grid import footer_row
from .navigation import HOME_PAGE, Navigator
from .pages import build_page
from .renderers import render_html, render_text

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Fetch the configured feeds and show a teletext page."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the main configuration XML file. Defaults to built-in settings.",
    )
    parser.add_argument(
        "--page",
        type=int,
        default=HOME_PAGE,
        help="Page number to display (100 home, 199 about).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the aggregated dataset as JSON instead of a page.",
    )
    parser.add_argument(
        "--html",
        metavar="PATH",
        help="Also write the page as a standalone HTML file to PATH.",
    )

    # Overrides for logging/debugging
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )
    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config) if args.config else AppConfig()

        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file
        configure_logging(log_level, log_file)

        logger.info(
            "Active Configuration:\n%s", pprint.pformat(dataclasses.asdict(app_config))
        )

        categories = load_categories(app_config)
        navigator = Navigator(categories)
        aggregator = build_aggregator(app_config, categories)
        if args.json:
            response = asyncio.run(feeds_endpoint(aggregator))
            print(json.dumps(response.body, indent=2, ensure_ascii=False))
            return 0 if response.status == 200 else 1
        dataset = asyncio.run(aggregator.fetch_all())
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    now = datetime.now().astimezone()
    rows = build_page(args.page, dataset, now, navigator, app_config.cache_ttl)
    footer = footer_row(*navigator.adjacent(args.page))

    if args.html:
        html_path = Path(args.html)
        html_path.write_text(render_html(rows, footer), encoding="utf-8")
        logger.info("Wrote page %d to %s", args.page, html_path)

    print(render_text(rows, footer))
    return 0
