"""
Collaborators the completion core consumes.

The core never builds trees or computes types itself. An indexer
provides node lookup and parent links; a type resolver provides the
members visible on the static type of an expression. Both are read-only
from the core's point of view.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from scopels.completion.nodes import SourceNode, Symbol


class AstIndex(ABC):
    """Position lookup and parent links over indexed documents."""

    @abstractmethod
    def node_at(self, uri: str, line: int, column: int) -> SourceNode | None:
        """
        Return the innermost node covering the position.

        Args:
            uri: Document URI
            line: 0-indexed line
            column: 0-indexed character offset

        Returns:
            The node, or None if the document is not indexed or nothing
            covers the position.
        """
        pass

    @abstractmethod
    def parent_of(self, node: SourceNode) -> SourceNode | None:
        """Return the enclosing node, or None at the root."""
        pass


class TypeResolver(ABC):
    """
    Members visible on the static type of an expression.

    Each list is already flattened across the type's inheritance chain,
    own members first.
    """

    @abstractmethod
    def properties_of(self, expr: SourceNode | None) -> list[Symbol]:
        pass

    @abstractmethod
    def fields_of(self, expr: SourceNode | None) -> list[Symbol]:
        pass

    @abstractmethod
    def methods_of(self, expr: SourceNode | None) -> list[Symbol]:
        pass
