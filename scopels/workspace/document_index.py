"""
Document Index for scopels

Keeps one PythonModuleIndex per open document and answers the position
and parent lookups of the completion core across all of them.

Design Principles:
1. In-memory only (documents are indexed while open)
2. Rebuilt on open/change/save through TextSyncManager hooks
3. Last good index wins (a document that stops parsing keeps its
   previous index until it parses again)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lsprotocol.types import (
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
    LogMessageParams,
    MessageType,
)

from scopels.completion.interfaces import AstIndex
from scopels.completion.nodes import SourceNode
from scopels.indexing.python_index import PythonModuleIndex

if TYPE_CHECKING:
    from scopels.lsp.scope_language_server import ScopeLanguageServer


PYTHON_SUFFIXES = (".py", ".pyi")


def is_python_document(uri: str, language_id: str | None = None) -> bool:
    if language_id:
        return language_id == "python"
    return uri.endswith(PYTHON_SUFFIXES)


class DocumentIndex(AstIndex):
    """
    Index of all open Python documents.

    Usage:
        index = DocumentIndex(server)
        index.register_text_sync_hooks()

        index.update(uri, source)
        node = index.node_at(uri, line, column)
    """

    def __init__(self, server: ScopeLanguageServer | None = None) -> None:
        self.server = server
        self._modules: dict[str, PythonModuleIndex] = {}

    def module(self, uri: str) -> PythonModuleIndex | None:
        return self._modules.get(uri)

    def update(self, uri: str, source: str) -> bool:
        """
        (Re)build the index of a document.

        Returns:
            True if the document was indexed, False if it could not be
            parsed (the previous index, if any, is kept).
        """
        try:
            self._modules[uri] = PythonModuleIndex.build(uri, source)
        except SyntaxError as e:
            self._log(
                MessageType.Warning,
                f"Keeping previous index for {uri}: line {e.lineno}: {e.msg}",
            )
            return False
        return True

    def remove(self, uri: str) -> None:
        self._modules.pop(uri, None)

    # ===== AstIndex =====

    def node_at(self, uri: str, line: int, column: int) -> SourceNode | None:
        module = self._modules.get(uri)
        if module is None:
            return None
        return module.node_at(line, column)

    def parent_of(self, node: SourceNode) -> SourceNode | None:
        module = self._modules.get(node.uri)
        if module is None:
            return None
        return module.parent_of(node)

    # ===== Text sync =====

    def register_text_sync_hooks(self) -> None:
        """Keep the index current with the editor's documents."""
        if self.server is None or self.server.text_sync_manager is None:
            return

        text_sync = self.server.text_sync_manager
        text_sync.add_on_open_hook(self._on_open)
        text_sync.add_on_change_hook(self._on_change)
        text_sync.add_on_save_hook(self._on_save)
        text_sync.add_on_close_hook(self._on_close)

    async def _on_open(self, params: DidOpenTextDocumentParams) -> None:
        document = params.text_document
        if is_python_document(document.uri, document.language_id):
            self.update(document.uri, document.text)

    async def _on_change(self, params: DidChangeTextDocumentParams) -> None:
        self._reindex_from_workspace(params.text_document.uri)

    async def _on_save(self, params: DidSaveTextDocumentParams) -> None:
        self._reindex_from_workspace(params.text_document.uri)

    async def _on_close(self, params: DidCloseTextDocumentParams) -> None:
        self.remove(params.text_document.uri)

    def _reindex_from_workspace(self, uri: str) -> None:
        if self.server is None:
            return
        if uri not in self._modules and not is_python_document(uri):
            return
        # pygls applies the edits to its workspace copy before hooks run.
        document = self.server.workspace.get_text_document(uri)
        self.update(uri, document.source)

    def _log(self, message_type: MessageType, message: str) -> None:
        if self.server is None:
            return
        self.server.window_log_message(
            LogMessageParams(type=message_type, message=message)
        )
