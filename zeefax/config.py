"""Configuration loading for categories and runtime settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import IO, List, Optional, Tuple, Union
from xml.etree import ElementTree as ET

from .models import CategoryConfig, FeedSource
from .palette import Color

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 9.0
CACHE_TTL = timedelta(minutes=15)
MAX_ITEMS_PER_SOURCE = 20
MAX_ITEMS_PER_CATEGORY = 30


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    categories_file: Optional[str] = None
    timeout: float = REQUEST_TIMEOUT
    cache_ttl: timedelta = CACHE_TTL
    max_items_per_source: int = MAX_ITEMS_PER_SOURCE
    max_items_per_category: int = MAX_ITEMS_PER_CATEGORY
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _require(outline: ET.Element, name: str) -> str:
    value = (outline.attrib.get(name) or "").strip()
    if not value:
        label = outline.attrib.get("text") or outline.attrib.get("key") or "?"
        raise ValueError(f"Category '{label}' is missing the '{name}' attribute.")
    return value


def _parse_category(outline: ET.Element) -> CategoryConfig:
    key = _require(outline, "key")
    name = _require(outline, "text")
    raw_page = _require(outline, "page")
    try:
        page = int(raw_page)
    except ValueError:
        raise ValueError(f"Category '{key}' has a non-numeric page: {raw_page!r}") from None

    sources: List[FeedSource] = []
    for child in outline.findall("outline"):
        url = child.attrib.get("xmlUrl")
        if child.attrib.get("type") != "rss" or not url:
            logger.debug("Ignoring non-feed outline under category '%s'", key)
            continue
        title = child.attrib.get("title") or child.attrib.get("text") or url
        sources.append(FeedSource(url=url, name=title))

    category = CategoryConfig(
        key=key,
        page=page,
        name=name,
        short_name=outline.attrib.get("short") or name.upper(),
        color=Color.parse(outline.attrib.get("color", "white")),
        sources=tuple(sources),
    )
    logger.debug(
        "Registered category '%s' at page %d with %d sources",
        key,
        page,
        len(sources),
    )
    return category


def parse_categories_config(path: Union[str, IO[bytes]]) -> Tuple[CategoryConfig, ...]:
    """Parse an OPML-style categories file into category definitions."""
    logger.info("Loading category configuration from %s", getattr(path, "name", path))
    tree = ET.parse(path)
    body = tree.getroot().find("body")
    if body is None:
        raise ValueError("Categories file is missing the <body> section.")

    categories = tuple(_parse_category(outline) for outline in body.findall("outline"))
    logger.info("Loaded %d categories from configuration", len(categories))
    return categories


@lru_cache(maxsize=1)
def load_default_categories() -> Tuple[CategoryConfig, ...]:
    """Return the categories bundled with the package."""
    resource = resources.files(__package__) / "data" / "categories.xml"
    with resource.open("rb") as handle:
        return parse_categories_config(handle)


def load_categories(app_config: AppConfig) -> Tuple[CategoryConfig, ...]:
    if app_config.categories_file:
        return parse_categories_config(app_config.categories_file)
    return load_default_categories()


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    root = ET.parse(config_path).getroot()

    categories_node = root.find("categories")
    categories_file = (
        _resolve_path(config_path, categories_node.text.strip())
        if categories_node is not None and categories_node.text
        else None
    )

    try:
        timeout = float(root.findtext("timeout", str(REQUEST_TIMEOUT)))
        ttl_minutes = float(
            root.findtext("cache-ttl-minutes", str(CACHE_TTL.total_seconds() / 60))
        )
        per_source = int(root.findtext("max-items-per-source", str(MAX_ITEMS_PER_SOURCE)))
        per_category = int(
            root.findtext("max-items-per-category", str(MAX_ITEMS_PER_CATEGORY))
        )
    except ValueError as exc:
        raise ValueError(f"Invalid numeric setting in {config_path}: {exc}") from exc

    if timeout <= 0 or ttl_minutes < 0:
        raise ValueError("<timeout> must be positive and <cache-ttl-minutes> non-negative.")

    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        categories_file=categories_file,
        timeout=timeout,
        cache_ttl=timedelta(minutes=ttl_minutes),
        max_items_per_source=per_source,
        max_items_per_category=per_category,
        logging=logging_config,
    )
