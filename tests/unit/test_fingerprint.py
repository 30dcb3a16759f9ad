"""
URL Fingerprint Tests
=====================
"""

from newsharvest.normalization.fingerprint import URL_HASH_LENGTH, is_url_hash, url_fingerprint


class TestUrlFingerprint:
    """Test dedup key derivation."""

    def test_known_digest(self):
        assert url_fingerprint("https://example.com/a") == "c4ed1c218d14a0f15bba7044693ec4b0d68e0a63"

    def test_deterministic_and_hex(self):
        first = url_fingerprint("https://example.com/a")
        second = url_fingerprint("https://example.com/a")
        assert first == second
        assert len(first) == URL_HASH_LENGTH
        assert is_url_hash(first)

    def test_distinct_urls_distinct_hashes(self):
        assert url_fingerprint("https://example.com/a") != url_fingerprint("https://example.com/b")

    def test_no_url_no_hash(self):
        assert url_fingerprint(None) is None
        assert url_fingerprint("") is None

    def test_is_url_hash_rejects_other_values(self):
        assert not is_url_hash(None)
        assert not is_url_hash("abc")
        assert not is_url_hash("Z" * 40)
