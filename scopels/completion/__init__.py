"""Scope-aware completion core."""
from .interfaces import AstIndex, TypeResolver
from .nodes import ClassScope, NodeKind, SourceNode, Symbol, SymbolKind, VariableScope
from .provider import CompletionProvider

__all__ = [
    'AstIndex',
    'ClassScope',
    'CompletionProvider',
    'NodeKind',
    'SourceNode',
    'Symbol',
    'SymbolKind',
    'TypeResolver',
    'VariableScope',
]
