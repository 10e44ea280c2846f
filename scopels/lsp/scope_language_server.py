from __future__ import annotations

from typing import TYPE_CHECKING

from pygls.lsp.server import LanguageServer

if TYPE_CHECKING:
    from scopels.lsp.capabilities.capabilities import CapabilityManager
    from scopels.lsp.settings import ServerSettings
    from scopels.lsp.text_sync_manager import TextSyncManager
    from scopels.workspace.document_index import DocumentIndex


class ScopeLanguageServer(LanguageServer):
    """
    Language Server with completion-specific attributes.

    Attributes:
        document_index: Per-document syntax/scope index
        capability_manager: Registered LSP capabilities
        text_sync_manager: Document lifecycle hooks
        settings: Options received in initializationOptions
    """

    def __init__(self, name: str, version: str):
        super().__init__(name, version)

        self.document_index: DocumentIndex | None = None
        self.capability_manager: CapabilityManager | None = None
        self.text_sync_manager: TextSyncManager | None = None
        self.settings: ServerSettings | None = None
