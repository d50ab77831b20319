"""Tests for slug generation."""

import re
from unittest.mock import patch

from grave_map.utils.slug import SLUG_ALPHABET, generate_slug, make_slug_id


class TestSlug:
    def test_sanitizes_title(self):
        with patch("grave_map.utils.slug.make_slug_id", return_value="abc234"):
            assert generate_slug("  My Old iPhone 6S!! ") == "my-old-iphone-6s-abc234"

    def test_falls_back_when_nothing_survives(self):
        with patch("grave_map.utils.slug.make_slug_id", return_value="abc234"):
            assert generate_slug("!!!") == "grave-abc234"

    def test_base_truncated(self):
        slug = generate_slug("a" * 100)
        base, _, suffix = slug.rpartition("-")
        assert base == "a" * 40
        assert len(suffix) == 6

    def test_id_alphabet(self):
        slug_id = make_slug_id()
        assert len(slug_id) == 6
        assert set(slug_id) <= set(SLUG_ALPHABET)

    def test_format(self):
        assert re.fullmatch(r"toaster-[a-z2-9]{6}", generate_slug("Toaster"))
