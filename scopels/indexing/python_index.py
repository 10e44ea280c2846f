"""
Python source indexer.

Builds the node/scope model the completion core reads from a Python
document, using the standard library ast module:

- every statement and expression becomes a SourceNode tagged with its
  NodeKind, with parent links and character-based ranges;
- modules, functions, lambdas and comprehensions carry a VariableScope;
- classes carry a ClassScope whose member lists include members of base
  classes defined in the same document.

Source being edited is frequently not valid Python ("self."). Parsing
falls back to a light repair pass before giving up.
"""

from __future__ import annotations

import ast
import re
from collections.abc import Iterable

from lsprotocol.types import Position, Range

from scopels.completion.nodes import (
    ClassScope,
    NodeKind,
    SourceNode,
    Symbol,
    SymbolKind,
    VariableScope,
)


# Appended to a dangling "obj." so the member access still parses.
PLACEHOLDER_NAME = "__completion_placeholder__"

MAX_REPAIR_ATTEMPTS = 8

# A "." after a name or closing bracket with no member name following it.
_DANGLING_DOT = re.compile(r"(?<=[\w)\]}])\.(?=[ \t]*(?:$|[)\]},:#]))")
_TRAILING_NUMBER = re.compile(r"(?<![\w.])\d+$")
_CLOSERS = {"(": ")", "[": "]", "{": "}"}

PROPERTY_DECORATORS = {"property", "cached_property"}
NON_INSTANCE_DECORATORS = {"staticmethod"}

_FUNCTION_TYPES = (ast.FunctionDef, ast.AsyncFunctionDef)
_COMPREHENSION_TYPES = (ast.ListComp, ast.SetComp, ast.DictComp, ast.GeneratorExp)
_NESTED_SCOPE_TYPES = (*_FUNCTION_TYPES, ast.ClassDef, ast.Lambda, *_COMPREHENSION_TYPES)


def parse_source(source: str) -> tuple[ast.Module, list[str]]:
    """
    Parse Python source, repairing common in-progress edits.

    Repairs, in order:
    1. a "." with no member name after it ("self." at the end of a line,
       "print(self.)", "if obj.:") gets a placeholder member name;
    2. on the line reported by the SyntaxError, brackets left open are
       closed at the end of the line;
    3. failing that, the line is replaced by "pass" at the same
       indentation. Steps 2 and 3 repeat for each new error.

    Repairs only touch text at or after an edit, so positions of
    everything before it are unchanged.

    Returns:
        The tree and the lines it was parsed from.

    Raises:
        SyntaxError: if the source cannot be repaired.
    """
    lines = source.split("\n")
    try:
        return ast.parse(source), lines
    except SyntaxError:
        pass

    lines = [_DANGLING_DOT.sub(_name_dangling_dot, line) for line in lines]

    for _ in range(MAX_REPAIR_ATTEMPTS):
        try:
            return ast.parse("\n".join(lines)), lines
        except SyntaxError as e:
            if e.lineno is None or not 0 < e.lineno <= len(lines):
                raise

            bad = lines[e.lineno - 1]
            closed = close_brackets(bad)
            if closed != bad:
                lines[e.lineno - 1] = closed
                continue

            indent = bad[: len(bad) - len(bad.lstrip())]
            replacement = indent + "pass"
            if bad == replacement:
                raise
            lines[e.lineno - 1] = replacement

    return ast.parse("\n".join(lines)), lines


def _name_dangling_dot(match: re.Match) -> str:
    # "1." is a float literal, not a member access.
    if _TRAILING_NUMBER.search(match.string, 0, match.start()):
        return match.group(0)
    return "." + PLACEHOLDER_NAME


def close_brackets(line: str) -> str:
    """Append closers for brackets the line opens and leaves open."""
    expected: list[str] = []
    quote = None
    escaped = False

    for char in line:
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char == "#":
            break
        elif char in _CLOSERS:
            expected.append(_CLOSERS[char])
        elif expected and char == expected[-1]:
            expected.pop()

    return line + "".join(reversed(expected))


def annotation_name(node: ast.AST | None) -> str | None:
    """
    Extract a class name from an annotation.

    Handles Name, dotted names, string annotations, Optional[X] and
    X | None. Anything else returns None.
    """
    if node is None:
        return None
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        try:
            parsed = ast.parse(node.value, mode="eval")
        except SyntaxError:
            return None
        return annotation_name(parsed.body)
    if isinstance(node, ast.Subscript):
        if annotation_name(node.value) == "Optional":
            return annotation_name(node.slice)
        return None
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        for side in (node.left, node.right):
            if not (isinstance(side, ast.Constant) and side.value is None):
                return annotation_name(side)
    return None


def value_type_name(value: ast.AST | None) -> str | None:
    """Type name that can be read off an assigned value without lookups."""
    if isinstance(value, ast.Call):
        # Constructor call: Foo(...) or module.Foo(...)
        if isinstance(value.func, ast.Name) and value.func.id[:1].isupper():
            return value.func.id
        if isinstance(value.func, ast.Attribute) and value.func.attr[:1].isupper():
            return value.func.attr
    return None


def decorator_names(node: ast.FunctionDef | ast.AsyncFunctionDef) -> list[str]:
    names = []
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Call):
            decorator = decorator.func
        if isinstance(decorator, ast.Name):
            names.append(decorator.id)
        elif isinstance(decorator, ast.Attribute):
            names.append(decorator.attr)
    return names


def _is_accessor(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    # @x.setter / @x.deleter belong to an already listed property.
    return any(
        isinstance(d, ast.Attribute) and d.attr in ("setter", "deleter")
        for d in node.decorator_list
    )


class PythonModuleIndex:
    """
    Index of one Python document.

    Usage:
        index = PythonModuleIndex.build(uri, source)
        node = index.node_at(12, 8)
        parent = index.parent_of(node)
    """

    def __init__(self, uri: str, tree: ast.Module, lines: list[str]):
        self.uri = uri
        self.tree = tree
        self.lines = lines

        self.root: SourceNode | None = None
        self.classes: dict[str, ClassScope] = {}

        # Pre-order (depth, node) list for position lookups
        self._nodes: list[tuple[int, SourceNode]] = []
        self._parents: dict[int, SourceNode] = {}
        self._by_origin: dict[int, SourceNode] = {}
        self._own_members: dict[str, ClassScope] = {}
        self._class_nodes: list[SourceNode] = []

    @classmethod
    def build(cls, uri: str, source: str) -> PythonModuleIndex:
        """
        Parse and index a document.

        Raises:
            SyntaxError: if the source cannot be parsed even after repair.
        """
        tree, lines = parse_source(source)
        index = cls(uri, tree, lines)
        index._index()
        return index

    # ===== AstIndex lookups =====

    def node_at(self, line: int, column: int) -> SourceNode | None:
        """Deepest node whose range contains the position (end inclusive)."""
        best: SourceNode | None = None
        best_depth = -1
        target = (line, column)

        for depth, node in self._nodes:
            if depth <= best_depth:
                continue
            start = (node.range.start.line, node.range.start.character)
            end = (node.range.end.line, node.range.end.character)
            if start <= target <= end:
                best = node
                best_depth = depth

        return best

    def parent_of(self, node: SourceNode) -> SourceNode | None:
        return self._parents.get(id(node))

    def node_for(self, origin: ast.AST | None) -> SourceNode | None:
        """SourceNode built for an ast node of this document."""
        if origin is None:
            return None
        return self._by_origin.get(id(origin))

    # ===== Building =====

    def _index(self) -> None:
        self.root = self._visit(self.tree, None, 0)
        for node in self._class_nodes:
            node.class_scope = self._flatten(node.class_scope.name, set())
            self.classes.setdefault(node.class_scope.name, node.class_scope)

    def _visit(
        self, origin: ast.AST, parent: SourceNode | None, depth: int
    ) -> SourceNode | None:
        node = self._make_node(origin)

        if node is None:
            # Not addressable by position; children attach to the parent.
            for child in ast.iter_child_nodes(origin):
                self._visit(child, parent, depth)
            return None

        self._nodes.append((depth, node))
        self._by_origin[id(origin)] = node
        if parent is not None:
            self._parents[id(node)] = parent

        for child in ast.iter_child_nodes(origin):
            self._visit(child, node, depth + 1)

        self._link_receiver(node, origin)
        self._fill_scope(node, origin)
        return node

    def _make_node(self, origin: ast.AST) -> SourceNode | None:
        if isinstance(origin, ast.Module):
            return SourceNode(
                NodeKind.BLOCK,
                self._module_range(),
                uri=self.uri,
                variable_scope=VariableScope(),
                origin=origin,
            )

        if not isinstance(origin, (ast.stmt, ast.expr, ast.excepthandler, ast.arg)):
            return None
        if getattr(origin, "end_lineno", None) is None:
            return None

        if isinstance(origin, (*_FUNCTION_TYPES, ast.ClassDef)):
            node_range = self._block_range(origin)
        else:
            node_range = self.range_of(origin)
        node = SourceNode(NodeKind.OTHER, node_range, uri=self.uri, origin=origin)

        if isinstance(origin, ast.Attribute):
            node.kind = NodeKind.MEMBER_ACCESS
            node.name = origin.attr
            node.name_range = self._trailing_name_range(origin, origin.attr)
        elif isinstance(origin, ast.Call) and isinstance(origin.func, ast.Attribute):
            node.kind = NodeKind.CALL
            node.name = origin.func.attr
            node.name_range = self._trailing_name_range(origin.func, origin.func.attr)
        elif isinstance(origin, ast.Name):
            node.kind = NodeKind.IDENTIFIER
            node.name = origin.id
            node.name_range = node_range
        elif isinstance(origin, _FUNCTION_TYPES):
            node.kind = NodeKind.METHOD
            node.variable_scope = VariableScope()
        elif isinstance(origin, ast.ClassDef):
            node.kind = NodeKind.CLASS
            node.class_scope = ClassScope(origin.name)
        elif isinstance(origin, (ast.stmt, ast.excepthandler)):
            node.kind = NodeKind.STATEMENT
        elif isinstance(origin, (ast.Lambda, *_COMPREHENSION_TYPES)):
            node.variable_scope = VariableScope()

        return node

    def _link_receiver(self, node: SourceNode, origin: ast.AST) -> None:
        if node.kind is NodeKind.MEMBER_ACCESS:
            node.object_expr = self.node_for(origin.value)
        elif node.kind is NodeKind.CALL:
            node.object_expr = self.node_for(origin.func.value)

    def _fill_scope(self, node: SourceNode, origin: ast.AST) -> None:
        if isinstance(origin, ast.Module):
            self._collect_bindings(origin.body, node.variable_scope)
        elif isinstance(origin, _FUNCTION_TYPES):
            owner = self._enclosing_class(node)
            self._declare_arguments(origin, node.variable_scope, owner)
            self._collect_bindings(origin.body, node.variable_scope)
        elif isinstance(origin, ast.Lambda):
            self._declare_arguments(origin, node.variable_scope, None)
        elif isinstance(origin, _COMPREHENSION_TYPES):
            collector = _BindingCollector(self, node.variable_scope)
            for generator in origin.generators:
                collector.bind_target(generator.target, None)
        elif isinstance(origin, ast.ClassDef):
            self._collect_class_members(origin, node.class_scope)
            self._own_members[origin.name] = node.class_scope
            self._class_nodes.append(node)

    def _enclosing_class(self, node: SourceNode) -> ast.ClassDef | None:
        parent = self.parent_of(node)
        if parent is not None and isinstance(parent.origin, ast.ClassDef):
            return parent.origin
        return None

    def _declare_arguments(
        self,
        origin: ast.FunctionDef | ast.AsyncFunctionDef | ast.Lambda,
        scope: VariableScope,
        owner: ast.ClassDef | None,
    ) -> None:
        args = origin.args
        positional = [*args.posonlyargs, *args.args]
        ordered = [*positional]
        if args.vararg:
            ordered.append(args.vararg)
        ordered.extend(args.kwonlyargs)
        if args.kwarg:
            ordered.append(args.kwarg)

        receiver = None
        if (
            owner is not None
            and positional
            and isinstance(origin, _FUNCTION_TYPES)
            and not NON_INSTANCE_DECORATORS.intersection(decorator_names(origin))
        ):
            receiver = positional[0]

        for arg in ordered:
            type_name = annotation_name(arg.annotation)
            if arg is receiver and type_name is None:
                type_name = owner.name
            scope.declare(
                Symbol(arg.arg, SymbolKind.VARIABLE, self.range_of(arg), type_name)
            )

    def _collect_bindings(self, body: Iterable[ast.stmt], scope: VariableScope) -> None:
        collector = _BindingCollector(self, scope)
        for statement in body:
            collector.visit(statement)

    def _collect_class_members(self, origin: ast.ClassDef, scope: ClassScope) -> None:
        scope.bases = [
            name for name in (annotation_name(b) for b in origin.bases) if name
        ]

        instance_fields: list[Symbol] = []
        for statement in origin.body:
            if isinstance(statement, _FUNCTION_TYPES):
                decorators = decorator_names(statement)
                returns = annotation_name(statement.returns)
                symbol_range = self.range_of(statement)
                if _is_accessor(statement):
                    continue
                if PROPERTY_DECORATORS.intersection(decorators):
                    scope.properties.append(
                        Symbol(statement.name, SymbolKind.PROPERTY, symbol_range, returns)
                    )
                else:
                    scope.methods.append(
                        Symbol(statement.name, SymbolKind.METHOD, symbol_range, returns)
                    )
                    if not NON_INSTANCE_DECORATORS.intersection(decorators):
                        instance_fields.extend(self._instance_fields(statement))
            elif isinstance(statement, ast.ClassDef):
                scope.fields.append(
                    Symbol(
                        statement.name,
                        SymbolKind.CLASS,
                        self.range_of(statement),
                        statement.name,
                    )
                )
            elif isinstance(statement, (ast.Assign, ast.AnnAssign)):
                targets = (
                    statement.targets
                    if isinstance(statement, ast.Assign)
                    else [statement.target]
                )
                annotation = getattr(statement, "annotation", None)
                for target in targets:
                    for name_node in _target_names(target):
                        scope.fields.append(
                            self.value_symbol(
                                name_node.id,
                                SymbolKind.FIELD,
                                name_node,
                                annotation,
                                statement.value,
                            )
                        )

        scope.fields.extend(instance_fields)

    def _instance_fields(
        self, method: ast.FunctionDef | ast.AsyncFunctionDef
    ) -> list[Symbol]:
        """Fields assigned through the receiver, e.g. self.count = 0."""
        positional = [*method.args.posonlyargs, *method.args.args]
        if not positional:
            return []
        receiver = positional[0].arg

        found: list[Symbol] = []
        for statement in _walk_local(method.body):
            if isinstance(statement, ast.Assign):
                targets, annotation = statement.targets, None
            elif isinstance(statement, ast.AnnAssign):
                targets, annotation = [statement.target], statement.annotation
            else:
                continue

            for target in targets:
                if (
                    isinstance(target, ast.Attribute)
                    and isinstance(target.value, ast.Name)
                    and target.value.id == receiver
                ):
                    found.append(
                        self.value_symbol(
                            target.attr,
                            SymbolKind.FIELD,
                            target,
                            annotation,
                            statement.value,
                        )
                    )
        return found

    def value_symbol(
        self,
        name: str,
        kind: SymbolKind,
        at: ast.AST,
        annotation: ast.AST | None,
        value: ast.AST | None,
    ) -> Symbol:
        type_name = annotation_name(annotation) or value_type_name(value)
        return Symbol(
            name,
            kind,
            self.range_of(at),
            type_name,
            value if type_name is None else None,
        )

    def _flatten(self, name: str, visiting: set[str]) -> ClassScope:
        """Own members first, then each base's members, depth first."""
        own = self._own_members[name]
        flat = ClassScope(
            name,
            list(own.properties),
            list(own.fields),
            list(own.methods),
            list(own.bases),
        )
        visiting.add(name)
        for base in own.bases:
            if base in visiting or base not in self._own_members:
                continue
            inherited = self._flatten(base, visiting)
            flat.properties.extend(inherited.properties)
            flat.fields.extend(inherited.fields)
            flat.methods.extend(inherited.methods)
        return flat

    # ===== Positions =====

    def range_of(self, origin: ast.AST) -> Range:
        return Range(
            start=self._position(origin.lineno, origin.col_offset),
            end=self._position(origin.end_lineno, origin.end_col_offset),
        )

    def _position(self, lineno: int, byte_col: int) -> Position:
        line = lineno - 1
        text = self.lines[line] if 0 <= line < len(self.lines) else ""
        if text.isascii():
            return Position(line=line, character=byte_col)
        prefix = text.encode("utf-8")[:byte_col].decode("utf-8", errors="ignore")
        return Position(line=line, character=len(prefix))

    def _block_range(self, origin: ast.AST) -> Range:
        """
        Range of a def or class, extended over the blank and comment lines
        after its last statement that are still indented into its body.
        """
        block = self.range_of(origin)
        end = block.end
        for line in range(end.line + 1, len(self.lines)):
            text = self.lines[line]
            stripped = text.strip()
            if stripped and not stripped.startswith("#"):
                break
            if len(text) - len(text.lstrip()) > block.start.character:
                end = Position(line=line, character=len(text))
        return Range(start=block.start, end=end)

    def _trailing_name_range(self, origin: ast.AST, name: str) -> Range:
        end = self._position(origin.end_lineno, origin.end_col_offset)
        start = Position(line=end.line, character=max(0, end.character - len(name)))
        return Range(start=start, end=end)

    def _module_range(self) -> Range:
        return Range(
            start=Position(line=0, character=0),
            end=Position(line=len(self.lines), character=0),
        )


class _BindingCollector(ast.NodeVisitor):
    """
    Records names bound directly in one scope.

    Nested functions, classes, lambdas and comprehensions bind their own
    names; only the name of a nested def/class lands in this scope.
    """

    def __init__(self, index: PythonModuleIndex, scope: VariableScope):
        self.index = index
        self.scope = scope

    def declare(
        self,
        name: str,
        kind: SymbolKind,
        at: ast.AST,
        annotation: ast.AST | None = None,
        value: ast.AST | None = None,
    ) -> None:
        self.scope.declare(self.index.value_symbol(name, kind, at, annotation, value))

    def bind_target(self, target: ast.AST, value: ast.AST | None) -> None:
        # Unpacking loses the per-element value.
        direct = value if isinstance(target, ast.Name) else None
        for name_node in _target_names(target):
            self.declare(name_node.id, SymbolKind.VARIABLE, name_node, value=direct)

    def visit_FunctionDef(self, node: ast.FunctionDef):
        self.declare(
            node.name, SymbolKind.METHOD, node, annotation=node.returns
        )

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef):
        self.declare(
            node.name, SymbolKind.METHOD, node, annotation=node.returns
        )

    def visit_ClassDef(self, node: ast.ClassDef):
        self.scope.declare(
            Symbol(node.name, SymbolKind.CLASS, self.index.range_of(node), node.name)
        )

    def visit_Lambda(self, node: ast.Lambda):
        pass

    def visit_ListComp(self, node: ast.ListComp):
        pass

    def visit_SetComp(self, node: ast.SetComp):
        pass

    def visit_DictComp(self, node: ast.DictComp):
        pass

    def visit_GeneratorExp(self, node: ast.GeneratorExp):
        pass

    def visit_Assign(self, node: ast.Assign):
        for target in node.targets:
            self.bind_target(target, node.value)
        self.generic_visit(node)

    def visit_AnnAssign(self, node: ast.AnnAssign):
        if isinstance(node.target, ast.Name):
            self.declare(
                node.target.id,
                SymbolKind.VARIABLE,
                node.target,
                annotation=node.annotation,
                value=node.value,
            )
        self.generic_visit(node)

    def visit_AugAssign(self, node: ast.AugAssign):
        self.bind_target(node.target, None)
        self.generic_visit(node)

    def visit_NamedExpr(self, node: ast.NamedExpr):
        self.bind_target(node.target, node.value)
        self.generic_visit(node)

    def visit_For(self, node: ast.For):
        self.bind_target(node.target, None)
        self.generic_visit(node)

    def visit_AsyncFor(self, node: ast.AsyncFor):
        self.bind_target(node.target, None)
        self.generic_visit(node)

    def visit_withitem(self, node: ast.withitem):
        if node.optional_vars is not None:
            self.bind_target(node.optional_vars, None)
        self.generic_visit(node)

    def visit_ExceptHandler(self, node: ast.ExceptHandler):
        if node.name:
            self.declare(node.name, SymbolKind.VARIABLE, node, annotation=node.type)
        self.generic_visit(node)

    def visit_Import(self, node: ast.Import):
        for alias in node.names:
            name = alias.asname or alias.name.split(".")[0]
            self.declare(name, SymbolKind.VARIABLE, node)

    def visit_ImportFrom(self, node: ast.ImportFrom):
        for alias in node.names:
            if alias.name == "*":
                continue
            self.declare(alias.asname or alias.name, SymbolKind.VARIABLE, node)


def _target_names(target: ast.AST) -> list[ast.Name]:
    """Names bound by an assignment target, in source order."""
    if isinstance(target, ast.Name):
        return [target]
    if isinstance(target, (ast.Tuple, ast.List)):
        names: list[ast.Name] = []
        for element in target.elts:
            names.extend(_target_names(element))
        return names
    if isinstance(target, ast.Starred):
        return _target_names(target.value)
    return []


def _walk_local(body: Iterable[ast.stmt]) -> Iterable[ast.AST]:
    """Walk statements without entering nested scopes."""
    stack = list(reversed(list(body)))
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, _NESTED_SCOPE_TYPES):
            continue
        stack.extend(reversed(list(ast.iter_child_nodes(node))))
