"""NewsDesk - multi-source RSS aggregation with caching, search and pagination."""

__version__ = "0.3.0"
