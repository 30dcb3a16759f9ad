"""
NewsHarvest Data Models
======================

Pydantic models shared by the normalizer, the ingestion runner and the
article store.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field, model_validator


class StoreResult(str, Enum):
    """Outcome of submitting one article to the store."""
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"


class Article(BaseModel):
    """Canonical article produced from one raw feed item.

    Immutable once built. ``url_hash`` is present exactly when
    ``canonical_url`` is, and is the store's dedup key.
    """
    title: str = Field(default="", description="Trimmed title, empty when the item had none")
    canonical_url: Optional[str] = Field(default=None, description="URL chosen as the article identity")
    url_hash: Optional[str] = Field(default=None, description="SHA-1 hex digest of canonical_url")
    published_at: Optional[datetime] = Field(default=None, description="Publication timestamp")
    image_url: Optional[str] = Field(default=None, description="Lead image URL")
    excerpt: Optional[str] = Field(default=None, description="Bounded preview text")
    content_html: Optional[str] = Field(default=None, description="Sanitized body HTML")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_hash_pairing(self):
        """Reject a hash without a URL or a URL without a hash."""
        if (self.canonical_url is None) != (self.url_hash is None):
            raise ValueError("url_hash must be present if and only if canonical_url is")
        return self

    @property
    def has_storage_keys(self) -> bool:
        """Whether the article carries every field the store requires."""
        return bool(self.title and self.canonical_url and self.url_hash)

    def to_row(self) -> Dict[str, Any]:
        """Column values for the ``articles`` table."""
        return {
            "title": self.title,
            "canonical_url": self.canonical_url,
            "url_hash": self.url_hash,
            "excerpt": self.excerpt,
            "content_html": self.content_html,
            "image_url": self.image_url,
            "published_at": self.published_at.isoformat() if self.published_at else None,
        }

    def __str__(self) -> str:
        return f"Article({self.title[:50]}...)"
