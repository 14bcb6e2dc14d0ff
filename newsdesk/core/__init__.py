"""Core utilities for NewsDesk."""

from .dates import MIN_DATETIME, parse_pub_date
from .ids import derive_article_id
from .io import load_json, load_json_or_empty_dict, save_json

__all__ = [
    # IDs
    "derive_article_id",
    # I/O
    "load_json",
    "save_json",
    "load_json_or_empty_dict",
    # Dates
    "parse_pub_date",
    "MIN_DATETIME",
]
