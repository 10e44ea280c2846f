"""
Completion context classification.

Decides, from the node under the cursor and its parent, which resolver
answers the request. The most specific syntactic anchor wins: a name
that is the object or member of a dotted expression resolves against
the receiver's type, never as a bare scope lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lsprotocol.types import Range

from scopels.completion.nodes import NodeKind, SourceNode


class CompletionStrategy(Enum):
    MEMBERS = "members"          # members of the receiver's static type
    SCOPE_CHAIN = "scope_chain"  # class members and locals up the parents


@dataclass
class CompletionTarget:
    """
    Result of classification.

    anchor is the node the strategy runs on. name and name_range locate
    the text the typed prefix is taken from; both are None when the
    prefix is empty by definition.
    """

    strategy: CompletionStrategy
    anchor: SourceNode
    name: str | None = None
    name_range: Range | None = None


class _Subject(Enum):
    NODE = "node"
    PARENT = "parent"


# Priority order, first match wins. CLASS and OTHER never match.
_RULES: tuple[tuple[_Subject, NodeKind, CompletionStrategy, bool], ...] = (
    (_Subject.NODE, NodeKind.MEMBER_ACCESS, CompletionStrategy.MEMBERS, True),
    (_Subject.PARENT, NodeKind.MEMBER_ACCESS, CompletionStrategy.MEMBERS, True),
    (_Subject.NODE, NodeKind.CALL, CompletionStrategy.MEMBERS, True),
    (_Subject.PARENT, NodeKind.CALL, CompletionStrategy.MEMBERS, True),
    (_Subject.NODE, NodeKind.IDENTIFIER, CompletionStrategy.SCOPE_CHAIN, True),
    (_Subject.NODE, NodeKind.METHOD, CompletionStrategy.SCOPE_CHAIN, False),
    (_Subject.NODE, NodeKind.STATEMENT, CompletionStrategy.SCOPE_CHAIN, False),
    (_Subject.NODE, NodeKind.BLOCK, CompletionStrategy.SCOPE_CHAIN, False),
)


def classify(
    node: SourceNode, parent: SourceNode | None
) -> CompletionTarget | None:
    """
    Select the completion strategy for a node/parent pair.

    Returns:
        CompletionTarget, or None when no rule matches (empty result).
    """
    for subject, kind, strategy, uses_name in _RULES:
        anchor = node if subject is _Subject.NODE else parent
        if anchor is None or anchor.kind is not kind:
            continue

        if uses_name:
            return CompletionTarget(
                strategy, anchor, anchor.name, anchor.name_range
            )
        return CompletionTarget(strategy, anchor)

    return None
