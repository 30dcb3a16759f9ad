"""
NewsHarvest Storage Layer
=========================

Article store contract and its SQLite implementation.
"""

from .article_repository import ArticleStore, SQLiteArticleRepository

__all__ = [
    "ArticleStore",
    "SQLiteArticleRepository",
]
