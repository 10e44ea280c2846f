from typing import Callable

from lsprotocol.types import CompletionItemKind

from scopels.completion.nodes import Symbol, SymbolKind


KindMapper = Callable[[Symbol], CompletionItemKind]


SYMBOL_KIND_TO_COMPLETION_KIND: dict[SymbolKind, CompletionItemKind] = {
    SymbolKind.PROPERTY: CompletionItemKind.Property,
    SymbolKind.FIELD: CompletionItemKind.Field,
    SymbolKind.METHOD: CompletionItemKind.Method,
    SymbolKind.VARIABLE: CompletionItemKind.Variable,
    SymbolKind.CLASS: CompletionItemKind.Class,
}


def kind_of(symbol: Symbol) -> CompletionItemKind:
    """Map a symbol to the completion item kind shown by the editor."""
    return SYMBOL_KIND_TO_COMPLETION_KIND.get(symbol.kind, CompletionItemKind.Text)
