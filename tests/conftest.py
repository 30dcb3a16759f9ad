"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for NewsHarvest tests.
"""

import pytest
import tempfile
import os
import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
_TEST_DIR = Path(tempfile.gettempdir()) / "newsharvest_tests"
os.environ["NEWSHARVEST_DATABASE__PATH"] = str(_TEST_DIR / "newsharvest_test.db")
os.environ["NEWSHARVEST_LOGGING__FILE_PATH"] = str(_TEST_DIR / "newsharvest_test.log")
os.environ["NEWSHARVEST_LOGGING__CONSOLE_LOGGING"] = "false"
os.environ["NEWSHARVEST_FETCH__BACKOFF_BASE_SECONDS"] = "0"


SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:media="http://search.yahoo.com/mrss/">
    <channel>
        <title>Test RSS Feed</title>
        <link>https://example.com</link>
        <description>Test feed for validation</description>
        <item>
            <title>  First Article  </title>
            <link>https://example.com/a</link>
            <guid>https://example.com/a</guid>
            <description>Short summary of the first article</description>
            <content:encoded><![CDATA[<p>Hello <script>alert(1)</script>world</p><img src="https://cdn.example.com/body.jpg">]]></content:encoded>
            <pubDate>Thu, 05 Sep 2024 12:00:00 GMT</pubDate>
            <enclosure url="https://cdn.example.com/enclosure.jpg" type="image/jpeg" length="1024"/>
        </item>
        <item>
            <title>Second Article</title>
            <guid isPermaLink="false">id-123</guid>
            <description>Second article without a link</description>
            <pubDate>Fri, 06 Sep 2024 08:30:00 GMT</pubDate>
        </item>
        <item>
            <description>An item with neither title nor link</description>
        </item>
    </channel>
</rss>"""


SAMPLE_ATOM = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
    <title>Test Atom Feed</title>
    <link href="https://atom.example.com/"/>
    <updated>2024-09-05T12:00:00Z</updated>
    <id>urn:uuid:60a76c80-d399-11d9-b93c-0003939e0af6</id>
    <entry>
        <title>Atom Entry</title>
        <link href="https://atom.example.com/entry"/>
        <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
        <updated>2024-09-05T12:00:00Z</updated>
        <summary>Atom entry summary</summary>
    </entry>
</feed>"""


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def temp_db():
    """Create a temporary database with the article schema."""
    from newsharvest.database.schema import DatabaseSchema

    with tempfile.TemporaryDirectory() as tmp_dir:
        db_path = str(Path(tmp_dir) / "test.db")
        schema = DatabaseSchema(db_path)
        schema.create_tables()
        yield db_path


@pytest.fixture
def db_connection(temp_db):
    """Pooled connection manager over the temporary database."""
    from newsharvest.database.connection import DatabaseConnection

    db = DatabaseConnection(temp_db, pool_size=2)
    yield db
    db.close_all_connections()


@pytest.fixture
def article_repository(db_connection):
    from newsharvest.storage.article_repository import SQLiteArticleRepository

    return SQLiteArticleRepository(db_connection)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_rss():
    return SAMPLE_RSS


@pytest.fixture
def sample_atom():
    return SAMPLE_ATOM


@pytest.fixture
def sample_items():
    """Raw items shaped the way the feed fetcher emits them."""
    return [
        {
            "title": "  Breaking News  ",
            "link": "https://example.com/a",
            "guid": "https://example.com/a",
            "iso_date": "2024-09-05T12:00:00+00:00",
            "pub_date": "Thu, 05 Sep 2024 12:00:00 GMT",
            "content:encoded": "<p>Full <b>story</b></p><script>x()</script>",
            "content_snippet": "Full story",
            "enclosure": {"url": "https://cdn.example.com/a.jpg", "type": "image/jpeg"},
        },
        {
            "title": "Guid Only",
            "guid": "id-123",
            "summary": "Summary text",
        },
        {
            "description": "Nothing useful here",
        },
    ]
