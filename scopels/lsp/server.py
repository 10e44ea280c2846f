from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_COMPLETION,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    InitializeParams,
    LogMessageParams,
    MessageType,
)

from scopels.lsp.capabilities.capabilities import CapabilityManager
from scopels.lsp.scope_language_server import ScopeLanguageServer
from scopels.lsp.settings import ServerSettings
from scopels.lsp.text_sync_manager import TextSyncManager
from scopels.workspace.document_index import DocumentIndex


SERVER_NAME = "scopels"
SERVER_VERSION = "0.1.0"

COMPLETION_TRIGGER_CHARACTERS = ["."]


def create_server() -> ScopeLanguageServer:
    """
    Creates and returns a configured Language Server instance.

    Text sync handlers and the completion handler are registered here;
    the document index and capabilities are created on initialize.
    """
    server = ScopeLanguageServer(SERVER_NAME, SERVER_VERSION)

    server.text_sync_manager = TextSyncManager(server)
    server.text_sync_manager.register_handlers()

    @server.feature(INITIALIZE)
    async def initialize(ls: ScopeLanguageServer, params: InitializeParams):
        """
        Initialize the server and set up any necessary state.
        """
        ls.settings = ServerSettings.from_initialization_options(
            params.initialization_options
        )

        # Index BEFORE capabilities, so they can hold on to it.
        ls.document_index = DocumentIndex(ls)
        ls.document_index.register_text_sync_hooks()

        ls.capability_manager = CapabilityManager(ls)
        ls.capability_manager.register_all()

        capabilities = ", ".join(
            f"{capability.name} ({capability.description})"
            for capability in ls.capability_manager.capabilities.values()
        )
        ls.window_log_message(
            LogMessageParams(
                MessageType.Info,
                f"{SERVER_NAME} {SERVER_VERSION} initialized: {capabilities}",
            )
        )

    @server.feature(
        TEXT_DOCUMENT_COMPLETION,
        CompletionOptions(trigger_characters=COMPLETION_TRIGGER_CHARACTERS),
    )
    async def completion(ls: ScopeLanguageServer, params: CompletionParams):
        if ls.capability_manager:
            return await ls.capability_manager.handle_completion(params)
        return CompletionList(is_incomplete=False, items=[])

    return server
