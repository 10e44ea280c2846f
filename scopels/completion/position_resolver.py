from __future__ import annotations

from scopels.completion.interfaces import AstIndex
from scopels.completion.nodes import SourceNode


class PositionResolver:
    """
    Finds the node under the cursor and its parent.

    A missing index or an uncovered position resolve to None; callers
    answer with an empty result. Errors raised by the index propagate.
    """

    def __init__(self, ast_index: AstIndex | None):
        self.ast = ast_index

    def resolve(
        self, uri: str, line: int, column: int
    ) -> tuple[SourceNode, SourceNode | None] | None:
        if self.ast is None:
            # Index not built yet for this server.
            return None

        node = self.ast.node_at(uri, line, column)
        if node is None:
            return None

        return node, self.ast.parent_of(node)
