"""
Tests for scopels/lsp/settings.py
"""
import pytest

from scopels.lsp.settings import ServerSettings


class TestFromInitializationOptions:
    def test_defaults(self):
        assert ServerSettings().max_items is None

    def test_max_items(self):
        settings = ServerSettings.from_initialization_options({"maxItems": 50})
        assert settings.max_items == 50

    @pytest.mark.parametrize(
        "options",
        [
            None,
            "maxItems=5",
            {},
            {"maxItems": 0},
            {"maxItems": -3},
            {"maxItems": "10"},
            {"maxItems": True},
        ],
    )
    def test_malformed_options_are_ignored(self, options):
        settings = ServerSettings.from_initialization_options(options)
        assert settings.max_items is None

    def test_unknown_keys_are_ignored(self):
        settings = ServerSettings.from_initialization_options(
            {"maxItems": 3, "theme": "dark"}
        )
        assert settings.max_items == 3
