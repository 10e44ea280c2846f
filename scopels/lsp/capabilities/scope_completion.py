"""
Scope-aware completion capability.

Completes members after "obj." and names visible from the cursor
(locals, parameters, class members, module globals) in Python documents.
"""

from lsprotocol.types import (
    CompletionList,
    CompletionParams,
    LogMessageParams,
    MessageType,
)

from scopels.completion.provider import CompletionProvider
from scopels.indexing.type_resolver import PythonTypeResolver
from scopels.lsp.capabilities.capabilities import CompletionCapability
from scopels.lsp.scope_language_server import ScopeLanguageServer


class ScopeCompletionCapability(CompletionCapability):
    """Completion backed by the document index and the type resolver."""

    def __init__(self, server: ScopeLanguageServer) -> None:
        super().__init__(server)
        self.provider: CompletionProvider | None = None

    @property
    def name(self) -> str:
        return "scope_completion"

    @property
    def description(self) -> str:
        return "Members, locals and class members visible at the cursor"

    def register(self) -> None:
        index = self.server.document_index
        if index is None:
            return
        self.provider = CompletionProvider(
            index, PythonTypeResolver(index), log=self._log_warning
        )

    async def can_handle(self, params: CompletionParams) -> bool:
        index = self.server.document_index
        if self.provider is None or index is None:
            return False
        return index.module(params.text_document.uri) is not None

    async def complete(self, params: CompletionParams) -> CompletionList:
        if self.provider is None:
            return CompletionList(is_incomplete=False, items=[])

        items = await self.provider.provide_completion(
            params.text_document, params.position, params.context
        )

        settings = self.server.settings
        if settings and settings.max_items and len(items) > settings.max_items:
            return CompletionList(
                is_incomplete=True, items=items[: settings.max_items]
            )

        return CompletionList(is_incomplete=False, items=items)

    def _log_warning(self, message: str) -> None:
        self.server.window_log_message(
            LogMessageParams(type=MessageType.Warning, message=message)
        )
