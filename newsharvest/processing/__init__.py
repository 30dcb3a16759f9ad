"""
NewsHarvest Processing Module
=============================

Feed retrieval and the ingestion run that ties fetching, normalization
and storage together.
"""

from .feed_fetcher import FeedFetcher, FeedDocument
from .ingestion_runner import IngestionRunner, FetchOutcome, RunSummary

__all__ = [
    'FeedFetcher',
    'FeedDocument',
    'IngestionRunner',
    'FetchOutcome',
    'RunSummary',
]
