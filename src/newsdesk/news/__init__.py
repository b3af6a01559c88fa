"""News provider module."""

from newsdesk.news.base import NewsProvider
from newsdesk.news.worldnews import WorldNewsProvider

__all__ = [
    "NewsProvider",
    "WorldNewsProvider",
]
