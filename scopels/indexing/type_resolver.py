"""
Static type lookup for Python expressions.

Best effort and document-local: an expression resolves to a class when
it is a name annotated or bound to a constructor call, the receiver of a
method (self/cls), a class name, a member whose declaration has such a
hint, a call to a method with a return annotation, or super().
Anything else resolves to no class and therefore to no members.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING

from scopels.completion.interfaces import TypeResolver
from scopels.completion.nodes import ClassScope, SourceNode, Symbol, SymbolKind

if TYPE_CHECKING:
    from scopels.indexing.python_index import PythonModuleIndex
    from scopels.workspace.document_index import DocumentIndex


class PythonTypeResolver(TypeResolver):
    """
    TypeResolver over documents indexed by a DocumentIndex.

    Usage:
        resolver = PythonTypeResolver(document_index)
        fields = resolver.fields_of(receiver_node)
    """

    def __init__(self, documents: DocumentIndex):
        self.documents = documents

    def properties_of(self, expr: SourceNode | None) -> list[Symbol]:
        scope = self.class_of(expr)
        return list(scope.properties) if scope else []

    def fields_of(self, expr: SourceNode | None) -> list[Symbol]:
        scope = self.class_of(expr)
        return list(scope.fields) if scope else []

    def methods_of(self, expr: SourceNode | None) -> list[Symbol]:
        scope = self.class_of(expr)
        return list(scope.methods) if scope else []

    def class_of(
        self, expr: SourceNode | None, seen: set[int] | None = None
    ) -> ClassScope | None:
        """
        Resolve the class an expression evaluates to.

        Args:
            expr: Expression node
            seen: Origins already being resolved (cycle guard)

        Returns:
            Flattened ClassScope, or None if unknown
        """
        if expr is None:
            return None
        module = self.documents.module(expr.uri)
        if module is None:
            return None

        seen = seen if seen is not None else set()
        origin = expr.origin
        if id(origin) in seen:
            return None
        seen.add(id(origin))

        if isinstance(origin, ast.Name):
            return self._class_of_name(module, expr, origin.id, seen)

        if isinstance(origin, ast.Attribute):
            receiver = self.class_of(module.node_for(origin.value), seen)
            if receiver is None:
                return None
            member = receiver.find_member(origin.attr)
            return self._class_of_symbol(module, member, seen)

        if isinstance(origin, ast.Call):
            return self._class_of_call(module, expr, origin, seen)

        return None

    def _class_of_name(
        self,
        module: PythonModuleIndex,
        at: SourceNode,
        name: str,
        seen: set[int],
    ) -> ClassScope | None:
        symbol = self.lookup(module, at, name)
        if symbol is None:
            return module.classes.get(name)
        return self._class_of_symbol(module, symbol, seen)

    def _class_of_call(
        self,
        module: PythonModuleIndex,
        expr: SourceNode,
        origin: ast.Call,
        seen: set[int],
    ) -> ClassScope | None:
        func = origin.func

        if isinstance(func, ast.Name):
            if func.id == "super":
                return self._super_class(module, expr)
            symbol = self.lookup(module, expr, func.id)
            if symbol is None or symbol.kind is SymbolKind.CLASS:
                return module.classes.get(func.id)
            if symbol.kind is SymbolKind.METHOD and symbol.type_name:
                return module.classes.get(symbol.type_name)
            return None

        if isinstance(func, ast.Attribute):
            receiver = self.class_of(module.node_for(func.value), seen)
            if receiver is None:
                return None
            member = receiver.find_member(func.attr)
            if member is None:
                return None
            if member.kind is SymbolKind.CLASS:
                return module.classes.get(member.name)
            if member.type_name:
                return module.classes.get(member.type_name)

        return None

    def _class_of_symbol(
        self,
        module: PythonModuleIndex,
        symbol: Symbol | None,
        seen: set[int],
    ) -> ClassScope | None:
        if symbol is None:
            return None
        if symbol.kind is SymbolKind.CLASS:
            return module.classes.get(symbol.type_name or symbol.name)
        if symbol.kind is SymbolKind.METHOD:
            # A bare method reference is not an instance of anything.
            return None
        if symbol.type_name:
            return module.classes.get(symbol.type_name)
        if symbol.value is not None:
            return self.class_of(module.node_for(symbol.value), seen)
        return None

    def _super_class(
        self, module: PythonModuleIndex, at: SourceNode
    ) -> ClassScope | None:
        current = module.parent_of(at)
        while current is not None:
            if current.class_scope is not None:
                for base in current.class_scope.bases:
                    if base in module.classes:
                        return module.classes[base]
                return None
            current = module.parent_of(current)
        return None

    def lookup(
        self, module: PythonModuleIndex, at: SourceNode, name: str
    ) -> Symbol | None:
        """Nearest variable declaration of name visible from a node."""
        current: SourceNode | None = at
        while current is not None:
            if current.variable_scope is not None:
                symbol = current.variable_scope.declared.get(name)
                if symbol is not None:
                    return symbol
            current = module.parent_of(current)
        return None
