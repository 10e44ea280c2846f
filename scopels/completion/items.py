from __future__ import annotations

from collections.abc import Iterable

from lsprotocol.types import CompletionItem

from scopels.completion.kinds import KindMapper, kind_of
from scopels.completion.nodes import Symbol


class CompletionItemCollector:
    """
    Accumulates completion items for one resolution, unique by label.

    The first symbol seen for a name wins; later symbols with the same
    name (shadowed variables, overloads, a field behind a property) are
    dropped. Items keep emission order.
    """

    def __init__(self, kind_mapper: KindMapper = kind_of) -> None:
        self.kind_mapper = kind_mapper
        self.items: list[CompletionItem] = []
        self._seen: set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._seen

    def add_symbols(self, symbols: Iterable[Symbol], prefix: str) -> None:
        for symbol in symbols:
            name = symbol.name
            if not name.startswith(prefix) or name in self._seen:
                continue
            self._seen.add(name)
            self.items.append(
                CompletionItem(label=name, kind=self.kind_mapper(symbol))
            )

    def add_properties_and_fields(
        self, properties: Iterable[Symbol], fields: Iterable[Symbol], prefix: str
    ) -> None:
        # A property and a field often share a name; the property wins.
        self.add_symbols(properties, prefix)
        self.add_symbols(fields, prefix)

    def add_methods(self, methods: Iterable[Symbol], prefix: str) -> None:
        # Overloads collapse to a single entry.
        self.add_symbols(methods, prefix)
