"""
Basic tests for the scope completion language server.

These tests verify that the server can be created and has the expected features registered.
"""

from unittest.mock import Mock

import pytest
from scopels.lsp.server import create_server
from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    ClientCapabilities,
    CompletionOptions,
    InitializeParams,
    MessageType,
)


def test_server_creation():
    """Test that the server can be created successfully."""
    server = create_server()
    assert server is not None
    assert server.name == "scopels"
    assert server.version == "0.1.0"


def test_server_state_before_initialize():
    """Index and capabilities are created on initialize."""
    server = create_server()

    assert server.text_sync_manager is not None
    assert server.document_index is None
    assert server.capability_manager is None


def test_server_has_completion_feature():
    """Test that completion handler is registered with "." as trigger."""
    server = create_server()

    assert TEXT_DOCUMENT_COMPLETION in server.protocol.fm.features
    options = server.protocol.fm.feature_options[TEXT_DOCUMENT_COMPLETION]
    assert isinstance(options, CompletionOptions)
    assert options.trigger_characters == ["."]


@pytest.mark.parametrize(
    "feature",
    [
        INITIALIZE,
        TEXT_DOCUMENT_DID_OPEN,
        TEXT_DOCUMENT_DID_CHANGE,
        TEXT_DOCUMENT_DID_SAVE,
        TEXT_DOCUMENT_DID_CLOSE,
    ],
)
def test_server_has_lifecycle_features(feature):
    """Test that initialize and text sync handlers are registered."""
    server = create_server()

    assert feature in server.protocol.fm.features


@pytest.mark.asyncio
async def test_initialize_sets_up_completion():
    """Initialize builds settings, the index and the capabilities."""
    server = create_server()
    server.window_log_message = Mock()

    initialize = server.protocol.fm.features[INITIALIZE]
    await initialize(
        InitializeParams(
            capabilities=ClientCapabilities(),
            initialization_options={"maxItems": 25},
        )
    )

    assert server.settings.max_items == 25
    assert server.document_index is not None
    assert "scope_completion" in server.capability_manager.capabilities

    logged = server.window_log_message.call_args[0][0]
    assert logged.type == MessageType.Info
    assert logged.message == (
        "scopels 0.1.0 initialized: scope_completion "
        "(Members, locals and class members visible at the cursor)"
    )
