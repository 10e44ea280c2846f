from __future__ import annotations

from typing import Callable

from lsprotocol.types import CompletionItem

from scopels.completion.interfaces import AstIndex
from scopels.completion.items import CompletionItemCollector
from scopels.completion.kinds import KindMapper, kind_of
from scopels.completion.nodes import SourceNode


class ScopeChainResolver:
    """
    Completes names visible from a node by walking its parent chain.

    Every ancestor is checked for a class scope (properties, fields,
    methods) and for a variable scope (declared variables); a node may
    carry both. One name set spans the whole walk, so the nearest
    declaration of a name is the one that is listed.
    """

    def __init__(
        self,
        ast_index: AstIndex,
        kind_mapper: KindMapper = kind_of,
        log: Callable[[str], None] | None = None,
    ) -> None:
        self.ast = ast_index
        self.kind_mapper = kind_mapper
        self.log = log

    def resolve_scope_chain(
        self, anchor: SourceNode, prefix: str
    ) -> list[CompletionItem]:
        collector = CompletionItemCollector(self.kind_mapper)
        visited: set[int] = set()

        current: SourceNode | None = anchor
        while current is not None and id(current) not in visited:
            visited.add(id(current))

            try:
                self._contribute(current, prefix, collector)
            except Exception as e:
                # Malformed scope: skip this node, keep walking.
                self._report(f"Skipping scope of {current.kind.value} node: {e}")

            try:
                current = self.ast.parent_of(current)
            except Exception as e:
                self._report(f"Parent lookup failed for {current.kind.value} node: {e}")
                break

        return collector.items

    def _contribute(
        self, node: SourceNode, prefix: str, collector: CompletionItemCollector
    ) -> None:
        if node.class_scope is not None:
            scope = node.class_scope
            collector.add_properties_and_fields(
                scope.properties, scope.fields, prefix
            )
            collector.add_methods(scope.methods, prefix)

        if node.variable_scope is not None:
            collector.add_symbols(node.variable_scope.declared.values(), prefix)

    def _report(self, message: str) -> None:
        if self.log:
            self.log(message)
