from __future__ import annotations

from lsprotocol.types import CompletionItem

from scopels.completion.interfaces import TypeResolver
from scopels.completion.items import CompletionItemCollector
from scopels.completion.kinds import KindMapper, kind_of
from scopels.completion.nodes import SourceNode


class MemberResolver:
    """
    Completes members of the static type of a receiver expression.

    Used for member access (object.na|) and call (object.na|(...))
    contexts. Inheritance is the type resolver's business: the lists it
    returns already include inherited members.
    """

    def __init__(
        self, type_resolver: TypeResolver, kind_mapper: KindMapper = kind_of
    ) -> None:
        self.types = type_resolver
        self.kind_mapper = kind_mapper

    def resolve_members(
        self, object_expr: SourceNode | None, prefix: str
    ) -> list[CompletionItem]:
        collector = CompletionItemCollector(self.kind_mapper)

        collector.add_properties_and_fields(
            self.types.properties_of(object_expr),
            self.types.fields_of(object_expr),
            prefix,
        )
        collector.add_methods(self.types.methods_of(object_expr), prefix)

        return collector.items
