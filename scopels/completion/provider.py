"""
Completion provider.

Entry point of the completion core:

    position -> node/parent -> strategy -> members | scope chain -> items

The work is synchronous. provide_completion is a coroutine only so it
fits the async request handlers of the server; it never suspends.
"""

from __future__ import annotations

from typing import Callable

from lsprotocol.types import (
    CompletionContext,
    CompletionItem,
    Position,
    TextDocumentIdentifier,
)

from scopels.completion.classifier import CompletionStrategy, classify
from scopels.completion.interfaces import AstIndex, TypeResolver
from scopels.completion.kinds import KindMapper, kind_of
from scopels.completion.member_resolver import MemberResolver
from scopels.completion.position_resolver import PositionResolver
from scopels.completion.prefix import extract_prefix
from scopels.completion.scope_resolver import ScopeChainResolver


class CompletionProvider:
    """
    Resolves completion items at a cursor position.

    Never raises to its caller: an unindexed document, an uncovered
    position, an unmatched context and collaborator failures all produce
    an empty list. Failures are reported through the optional log
    callback.
    """

    def __init__(
        self,
        ast_index: AstIndex | None,
        type_resolver: TypeResolver | None,
        kind_mapper: KindMapper = kind_of,
        log: Callable[[str], None] | None = None,
    ) -> None:
        self.ast = ast_index
        self.types = type_resolver
        self.kind_mapper = kind_mapper
        self.log = log
        self.positions = PositionResolver(ast_index)

    async def provide_completion(
        self,
        text_document: TextDocumentIdentifier | str,
        position: Position,
        context: CompletionContext | None = None,
    ) -> list[CompletionItem]:
        """
        Provide completion items for a position.

        Args:
            text_document: Document identifier or URI
            position: Cursor position (line, character)
            context: Trigger information from the client (unused; the
                syntax tree decides what to complete)

        Returns:
            Items in emission order, unique by label.
        """
        if self.ast is None:
            # Should not happen once the server is initialized.
            return []

        uri = (
            text_document.uri
            if isinstance(text_document, TextDocumentIdentifier)
            else text_document
        )

        try:
            return self._complete(uri, position)
        except Exception as e:
            if self.log:
                self.log(
                    f"Completion failed at {uri}:{position.line}:"
                    f"{position.character}: {type(e).__name__}: {e}"
                )
            return []

    def _complete(self, uri: str, position: Position) -> list[CompletionItem]:
        resolved = self.positions.resolve(uri, position.line, position.character)
        if resolved is None:
            return []
        node, parent = resolved

        target = classify(node, parent)
        if target is None:
            return []

        prefix = ""
        if target.name is not None and target.name_range is not None:
            prefix = extract_prefix(target.name, target.name_range, position)

        if target.strategy is CompletionStrategy.MEMBERS:
            if self.types is None:
                return []
            members = MemberResolver(self.types, self.kind_mapper)
            return members.resolve_members(target.anchor.object_expr, prefix)

        scopes = ScopeChainResolver(self.ast, self.kind_mapper, self.log)
        return scopes.resolve_scope_chain(target.anchor, prefix)
