"""Feed catalog: which feed URLs to query for a (sources, category) selection."""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import yaml

from ..exceptions import ConfigError

__all__ = ["ALL_CATEGORY", "FeedCatalog", "load_catalog", "CATALOG_FILE"]

logger = logging.getLogger(__name__)

CATALOG_FILE = Path(__file__).parent / "feeds.yaml"
ALL_CATEGORY = "all"


class FeedCatalog:
    """
    Static mapping from (source, category) to feed endpoint URLs.

    Each source maps category names to a single URL, plus an ``all`` list
    that is queried when no specific category is selected.
    """

    def __init__(self, feeds: dict[str, dict]):
        self._feeds = _validate(feeds)

    def resolve(self, sources: Iterable[str], category: str) -> list[str]:
        """
        Resolve the feed URLs for a selection.

        Args:
            sources: Active source ids, in display order
            category: Category name, or "all"

        Returns:
            Feed URLs. For "all", each source's full list concatenated in
            source order (not deduplicated). Otherwise one URL per source
            that defines the category; sources without it are skipped.
        """
        endpoints: list[str] = []
        for source in sources:
            feeds = self._feeds.get(source)
            if feeds is None:
                logger.warning(f"Unknown news source: {source}")
                continue
            if category == ALL_CATEGORY:
                endpoints.extend(feeds.get(ALL_CATEGORY, []))
            elif category in feeds:
                endpoints.append(feeds[category])
        return endpoints

    def sources(self) -> list[str]:
        return list(self._feeds)

    def categories(self, source: Optional[str] = None) -> list[str]:
        """Category names in configured order (excluding "all")."""
        names: list[str] = []
        selected = [source] if source else self.sources()
        for name in selected:
            for category in self._feeds.get(name, {}):
                if category != ALL_CATEGORY and category not in names:
                    names.append(category)
        return names

    def to_dict(self) -> dict[str, dict]:
        return {
            source: {
                category: list(value) if isinstance(value, list) else value
                for category, value in feeds.items()
            }
            for source, feeds in self._feeds.items()
        }


def load_catalog(path: Optional[Union[str, Path]] = None) -> FeedCatalog:
    """Load the feed catalog from YAML (defaults to the packaged feeds.yaml)."""
    catalog_path = Path(path) if path else CATALOG_FILE
    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read feed catalog {catalog_path}: {e}") from e
    return FeedCatalog(data)


def _validate(feeds: dict) -> dict[str, dict]:
    if not isinstance(feeds, dict):
        raise ConfigError("Feed catalog must map source names to categories")

    validated: dict[str, dict] = {}
    for source, categories in feeds.items():
        if not isinstance(categories, dict):
            raise ConfigError(f"Source {source!r} must map categories to URLs")
        entry: dict = {}
        for category, value in categories.items():
            if category == ALL_CATEGORY:
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"Source {source!r}: 'all' must be a list of URLs")
                entry[category] = list(value)
            elif isinstance(value, str):
                entry[str(category)] = value
            else:
                raise ConfigError(f"Source {source!r}: category {category!r} must be one URL")
        entry.setdefault(ALL_CATEGORY, [])
        validated[str(source)] = entry
    return validated
