"""
Content Sanitizer Tests
=======================

Tests for the allow-list HTML sanitizer.
"""

import pytest

from newsharvest.normalization.content_sanitizer import ContentSanitizer, sanitize_content


class TestContentSanitizer:
    """Test HTML allow-listing."""

    @pytest.fixture
    def sanitizer(self):
        return ContentSanitizer()

    def test_script_removed_sibling_paragraph_kept(self, sanitizer):
        result = sanitizer.sanitize("<p>Keep me</p><script>alert(1)</script>")
        assert result == "<p>Keep me</p>"

    def test_script_content_does_not_leak(self, sanitizer):
        result = sanitizer.sanitize("<p>Hello <script>alert(1)</script>world</p>")
        assert "alert" not in result
        assert result == "<p>Hello world</p>"

    def test_disallowed_tags_are_unwrapped(self, sanitizer):
        result = sanitizer.sanitize("<div><span>Text</span> <b>bold</b></div>")
        assert result == "Text bold"

    def test_allowed_tags_survive(self, sanitizer):
        html = "<blockquote><p><strong>a</strong> <em>b</em></p><ul><li>c</li></ul></blockquote>"
        assert sanitizer.sanitize(html) == html

    def test_disallowed_attributes_dropped(self, sanitizer):
        result = sanitizer.sanitize('<p class="x" style="color:red" onclick="evil()">text</p>')
        assert result == "<p>text</p>"

    def test_link_attributes(self, sanitizer):
        result = sanitizer.sanitize(
            '<a href="https://example.com" title="t" rel="noopener" target="_blank" id="z">x</a>'
        )
        assert 'href="https://example.com"' in result
        assert 'title="t"' in result
        assert 'rel="noopener"' in result
        assert 'target="_blank"' in result
        assert "id=" not in result

    def test_javascript_href_dropped(self, sanitizer):
        assert sanitizer.sanitize('<a href="javascript:alert(1)">x</a>') == "<a>x</a>"

    def test_obfuscated_scheme_dropped(self, sanitizer):
        assert sanitizer.sanitize('<a href="java\tscript:alert(1)">x</a>') == "<a>x</a>"

    def test_image_keeps_src_and_alt_only(self, sanitizer):
        result = sanitizer.sanitize('<img src="https://cdn.example.com/a.jpg" alt="A" width="10">')
        assert 'src="https://cdn.example.com/a.jpg"' in result
        assert 'alt="A"' in result
        assert "width" not in result

    def test_data_uri_image_dropped(self, sanitizer):
        result = sanitizer.sanitize('<img src="data:image/png;base64,AAAA">')
        assert "data:" not in result

    def test_comments_removed(self, sanitizer):
        assert sanitizer.sanitize("<p>a<!-- hidden --></p>") == "<p>a</p>"

    def test_empty_results(self, sanitizer):
        assert sanitizer.sanitize(None) is None
        assert sanitizer.sanitize("   ") is None
        assert sanitizer.sanitize("<script>only()</script>") is None

    @pytest.mark.parametrize(
        "url,allowed",
        [
            ("https://example.com", True),
            ("http://example.com", True),
            ("mailto:a@example.com", True),
            ("HTTPS://example.com", True),
            ("/relative/path", True),
            ("javascript:alert(1)", False),
            ("vbscript:msgbox", False),
            ("data:text/html,x", False),
        ],
    )
    def test_is_allowed_url(self, sanitizer, url, allowed):
        assert sanitizer.is_allowed_url(url) is allowed

    def test_module_convenience_function(self):
        assert sanitize_content("<p>x</p><style>p{}</style>") == "<p>x</p>"
