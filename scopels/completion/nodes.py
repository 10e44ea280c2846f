"""
Node and symbol model shared by the completion core and the indexers.

The completion core only reads these objects. They are produced by an
indexer (see scopels.indexing) and live for as long as the index that
owns them; a completion request must not hold on to them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from lsprotocol.types import Range


class NodeKind(Enum):
    """Syntactic shape of a node, as far as completion cares about it."""

    MEMBER_ACCESS = "member_access"  # object.name
    CALL = "call"                    # object.name(...)
    IDENTIFIER = "identifier"        # bare name
    METHOD = "method"                # function/method declaration
    STATEMENT = "statement"
    BLOCK = "block"                  # statement block, module body
    CLASS = "class"
    OTHER = "other"


class SymbolKind(Enum):
    """Declaration category of a symbol."""

    PROPERTY = "property"
    FIELD = "field"
    METHOD = "method"
    VARIABLE = "variable"
    CLASS = "class"


@dataclass(frozen=True)
class Symbol:
    """
    A named declaration visible to completion.

    type_name and value are hints for the type resolver only: the
    declared (or trivially inferred) class name, and the native
    expression the symbol was bound to when no hint was available.
    """

    name: str
    kind: SymbolKind
    range: Range
    type_name: str | None = None
    value: Any = field(default=None, compare=False, repr=False)


@dataclass
class ClassScope:
    """
    Members visible inside a class.

    Inherited members are already appended after the class's own, so
    the lists may repeat names (overrides, overloads).
    """

    name: str
    properties: list[Symbol] = field(default_factory=list)
    fields: list[Symbol] = field(default_factory=list)
    methods: list[Symbol] = field(default_factory=list)
    bases: list[str] = field(default_factory=list)

    def find_member(self, name: str) -> Symbol | None:
        """First property, field or method with the given name."""
        for symbol in (*self.properties, *self.fields, *self.methods):
            if symbol.name == name:
                return symbol
        return None


@dataclass
class VariableScope:
    """Variables declared in a method or block, in declaration order."""

    declared: dict[str, Symbol] = field(default_factory=dict)

    def declare(self, symbol: Symbol) -> None:
        # Re-binding a name does not move it.
        self.declared.setdefault(symbol.name, symbol)


@dataclass(eq=False)
class SourceNode:
    """
    Handle on one AST node.

    Which optional attributes are set depends on kind:
    - MEMBER_ACCESS, CALL: name, name_range, object_expr
    - IDENTIFIER: name, name_range
    Scope payloads are independent of kind; a method node carries both
    its declaration and its own variable scope.
    """

    kind: NodeKind
    range: Range
    uri: str = ""
    name: str | None = None
    name_range: Range | None = None
    object_expr: SourceNode | None = None
    class_scope: ClassScope | None = None
    variable_scope: VariableScope | None = None
    origin: Any = field(default=None, repr=False)
