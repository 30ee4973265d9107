# =============================================================================
# tests/test_utils.py - Shared Utility Tests
# =============================================================================

import pytest

from lib.utils import build_storage_key, parse_int_value, storage_key_from_url


class TestParseIntValue:
    """Metric value coercion used by the scoreboard."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (5, 5),
            (3.9, 3),
            ("12", 12),
            (" 7 ", 7),
            ("4.5", 4),
            ("-2", -2),
            ("n/a", 0),
            ("", 0),
            (None, 0),
            (True, 0),
            (float("nan"), 0),
            ([1], 0),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_int_value(raw) == expected


class TestStorageKeys:
    """Key generation and recovery for image blobs."""

    def test_build_key(self):
        """Keys are {millis}-{filename}."""
        assert build_storage_key("tree.png", now_ms=1700000000000) == "1700000000000-tree.png"

    def test_build_key_strips_directories(self):
        """Client-supplied paths don't leak into the key."""
        assert build_storage_key("../../etc/tree.png", now_ms=1) == "1-tree.png"
        assert build_storage_key("C:\\photos\\tree.png", now_ms=1) == "1-tree.png"

    def test_build_key_without_filename(self):
        assert build_storage_key(None, now_ms=1) == "1-image"

    def test_build_key_uses_clock(self):
        key = build_storage_key("a.gif")
        millis, _, name = key.partition("-")
        assert name == "a.gif"
        assert millis.isdigit()

    def test_key_from_url(self):
        """The trailing path segment is the key; query strings are ignored."""
        url = "https://x.supabase.co/storage/v1/object/public/initiative-images/1700-tree%20one.png?"
        assert storage_key_from_url(url) == "1700-tree one.png"

    def test_key_from_empty_url(self):
        assert storage_key_from_url(None) is None
        assert storage_key_from_url("") is None
