"""
Tests for scopels/indexing/python_index.py

Tests:
- Node kinds and ranges at positions
- Parse repair of in-progress edits
- Variable scopes of modules, functions, lambdas and comprehensions
- Class member collection and inheritance flattening
"""
from __future__ import annotations

import ast

import pytest

from scopels.completion.nodes import NodeKind, SymbolKind
from scopels.indexing.python_index import (
    PLACEHOLDER_NAME,
    PythonModuleIndex,
    annotation_name,
    parse_source,
)


URI = "file:///project/counter.py"

SOURCE = '''\
class Base:
    def ping(self):
        return 1


class Counter(Base):
    limit = 10

    def __init__(self, start: int):
        self.count = start
        self.child = Counter(0)

    @property
    def double(self) -> "Counter":
        return self

    @double.setter
    def double(self, value):
        pass

    def bump(self, step):
        total = self.count + step
        for i in range(step):
            total += i
        return total
'''


@pytest.fixture
def index() -> PythonModuleIndex:
    return PythonModuleIndex.build(URI, SOURCE)


def names(symbols) -> list[str]:
    return [symbol.name for symbol in symbols]


class TestNodeAt:
    """Tests for PythonModuleIndex.node_at."""

    def test_member_access(self, index):
        # "        total = self.count + step"
        node = index.node_at(21, 23)

        assert node.kind is NodeKind.MEMBER_ACCESS
        assert node.name == "count"
        assert node.name_range.start.line == 21
        assert node.name_range.start.character == 21
        assert node.name_range.end.character == 26
        assert node.object_expr.kind is NodeKind.IDENTIFIER
        assert node.object_expr.name == "self"

    def test_receiver_identifier_parent_is_member_access(self, index):
        node = index.node_at(21, 18)

        assert node.kind is NodeKind.IDENTIFIER
        assert node.name == "self"
        assert index.parent_of(node).kind is NodeKind.MEMBER_ACCESS

    def test_identifier_at_end_of_name(self, index):
        # "        return total"
        node = index.node_at(24, 20)

        assert node.kind is NodeKind.IDENTIFIER
        assert node.name == "total"

    def test_method_body_indentation_is_method(self, index):
        node = index.node_at(22, 2)

        assert node.kind is NodeKind.METHOD
        assert node.origin.name == "bump"

    def test_class_body_gap(self, index):
        assert index.node_at(7, 0).kind is NodeKind.CLASS

    def test_module_level_blank_line(self, index):
        node = index.node_at(3, 0)

        assert node.kind is NodeKind.BLOCK
        assert node is index.root
        assert index.parent_of(node) is None

    def test_parameter_is_other(self, index):
        # "    def bump(self, step):"
        assert index.node_at(20, 20).kind is NodeKind.OTHER

    def test_call_with_attribute_func(self):
        module = PythonModuleIndex.build(URI, "items.append(1)\n")

        node = module.node_at(0, 14)

        assert node.kind is NodeKind.OTHER
        call = module.parent_of(node)
        assert call.kind is NodeKind.CALL
        assert call.name == "append"
        assert call.name_range.start.character == 6
        assert call.object_expr.name == "items"

    def test_non_ascii_columns_are_characters(self):
        module = PythonModuleIndex.build(URI, 's = "héllo"; value = s\n')

        node = module.node_at(0, 15)

        assert node.name == "value"
        assert node.range.start.character == 13

    def test_indented_blank_line_after_body_is_method(self):
        source = (
            "class A:\n"
            "    def grow(self, n):\n"
            "        total = n\n"
            "        \n"
            "\n"
            "x = 1\n"
        )
        module = PythonModuleIndex.build(URI, source)

        node = module.node_at(3, 8)

        assert node.kind is NodeKind.METHOD
        assert node.origin.name == "grow"
        assert node.range.end.line == 3
        assert module.node_at(4, 0) is module.root

    def test_blank_line_at_def_indentation_is_outside_the_def(self):
        source = "class A:\n    def grow(self):\n        pass\n    \n"
        module = PythonModuleIndex.build(URI, source)

        assert module.node_at(3, 4).kind is NodeKind.CLASS

    def test_outside_document(self, index):
        assert index.node_at(200, 0) is None


class TestParseRepair:
    """Tests for parse_source."""

    def test_valid_source_is_untouched(self):
        tree, lines = parse_source("a = 1\nb = a\n")

        assert lines == ["a = 1", "b = a", ""]
        assert len(tree.body) == 2

    def test_dangling_dot_gets_placeholder(self):
        module = PythonModuleIndex.build(URI, "obj = 1\nobj.\n")

        node = module.node_at(1, 4)

        assert node.kind is NodeKind.MEMBER_ACCESS
        assert node.name == PLACEHOLDER_NAME
        assert node.name_range.start.character == 4
        assert node.object_expr.name == "obj"

    def test_broken_line_becomes_pass(self):
        source = "def run(self):\n    value = = 1\n    return value\n"
        tree, lines = parse_source(source)

        assert isinstance(tree.body[0], ast.FunctionDef)
        assert lines[1] == "    pass"
        assert lines[2] == "    return value"

    def test_open_bracket_is_closed(self):
        source = "def run(self):\n    value = (1,\n    return value\n"
        tree, lines = parse_source(source)

        assert isinstance(tree.body[0], ast.FunctionDef)
        assert lines[1] == "    value = (1,)"

    @pytest.mark.parametrize(
        "line, column",
        [
            ("print(obj.)", 10),
            ("print(obj.", 10),
            ("x = [obj.]", 9),
            ("if obj.: pass", 7),
            ("call(obj. , 2)", 9),
        ],
    )
    def test_dangling_dot_inside_brackets(self, line, column):
        module = PythonModuleIndex.build(URI, f"obj = 1\n{line}\n")

        node = module.node_at(1, column)

        assert node.kind is NodeKind.MEMBER_ACCESS
        assert node.name == PLACEHOLDER_NAME
        assert node.name_range.start.character == column
        assert node.object_expr.name == "obj"

    def test_float_literal_is_not_a_member_access(self):
        _, lines = parse_source("x = round(1.)\ny = = 2\n")

        assert lines[0] == "x = round(1.)"
        assert lines[1] == "pass"

    def test_unrepairable_source_raises(self):
        with pytest.raises(SyntaxError):
            PythonModuleIndex.build(URI, "    pass\n")


class TestVariableScopes:
    """Tests for variables collected into scopes."""

    def test_method_scope_in_declaration_order(self, index):
        method = index.node_at(22, 2)

        assert list(method.variable_scope.declared) == ["self", "step", "total", "i"]

    def test_receiver_is_typed_with_class(self, index):
        method = index.node_at(22, 2)

        assert method.variable_scope.declared["self"].type_name == "Counter"

    def test_annotated_parameter(self, index):
        init = index.node_at(9, 0)

        assert init.origin.name == "__init__"
        assert init.variable_scope.declared["start"].type_name == "int"

    def test_module_scope(self, index):
        declared = index.root.variable_scope.declared

        assert list(declared) == ["Base", "Counter"]
        assert declared["Counter"].kind is SymbolKind.CLASS

    def test_module_bindings(self):
        source = (
            "import os.path\n"
            "from typing import Optional as Opt\n"
            "with open('f') as fh:\n"
            "    pass\n"
            "try:\n"
            "    pass\n"
            "except ValueError as err:\n"
            "    pass\n"
            "def helper() -> int:\n"
            "    inner = 1\n"
            "first, *rest = [1, 2]\n"
        )
        module = PythonModuleIndex.build(URI, source)
        declared = module.root.variable_scope.declared

        assert list(declared) == ["os", "Opt", "fh", "err", "helper", "first", "rest"]
        assert declared["helper"].kind is SymbolKind.METHOD
        assert declared["err"].type_name == "ValueError"

    def test_comprehension_has_own_scope(self):
        module = PythonModuleIndex.build(URI, "squares = [n * n for n in range(3)]\n")

        # The opening bracket belongs to the comprehension only.
        comprehension = module.node_at(0, 10)

        assert isinstance(comprehension.origin, ast.ListComp)
        assert list(comprehension.variable_scope.declared) == ["n"]
        assert list(module.root.variable_scope.declared) == ["squares"]

    def test_lambda_has_own_scope(self):
        module = PythonModuleIndex.build(URI, "f = lambda a, b: a\n")

        body = module.node_at(0, 17)
        lam = module.parent_of(body)

        assert list(lam.variable_scope.declared) == ["a", "b"]
        assert list(module.root.variable_scope.declared) == ["f"]


class TestClassScopes:
    """Tests for class members and flattening."""

    def test_counter_members(self, index):
        counter = index.classes["Counter"]

        assert names(counter.properties) == ["double"]
        assert names(counter.fields) == ["limit", "count", "child"]
        assert names(counter.methods) == ["__init__", "bump", "ping"]

    def test_field_type_hints(self, index):
        counter = index.classes["Counter"]
        fields = {symbol.name: symbol for symbol in counter.fields}

        assert fields["child"].type_name == "Counter"
        assert fields["count"].type_name is None
        assert fields["count"].value is not None
        assert counter.properties[0].type_name == "Counter"

    def test_class_node_carries_flattened_scope(self, index):
        class_node = index.node_at(7, 0)

        assert class_node.class_scope is index.classes["Counter"]

    def test_base_class_members(self, index):
        assert names(index.classes["Base"].methods) == ["ping"]
        assert index.classes["Counter"].bases == ["Base"]

    def test_cyclic_bases_terminate(self):
        source = (
            "class A(B):\n"
            "    def a(self):\n"
            "        pass\n"
            "class B(A):\n"
            "    def b(self):\n"
            "        pass\n"
        )
        module = PythonModuleIndex.build(URI, source)

        assert names(module.classes["A"].methods) == ["a", "b"]
        assert names(module.classes["B"].methods) == ["b", "a"]

    def test_static_method_has_no_receiver(self):
        source = (
            "class Util:\n"
            "    @staticmethod\n"
            "    def make(value):\n"
            "        value.x = 1\n"
        )
        module = PythonModuleIndex.build(URI, source)
        method = module.node_at(3, 0)

        assert method.variable_scope.declared["value"].type_name is None
        assert module.classes["Util"].fields == []


class TestAnnotationName:
    """Tests for annotation_name."""

    @pytest.mark.parametrize(
        "annotation, expected",
        [
            ("Counter", "Counter"),
            ("models.Counter", "Counter"),
            ("'Counter'", "Counter"),
            ("Optional[Counter]", "Counter"),
            ("Counter | None", "Counter"),
            ("None | Counter", "Counter"),
            ("list[Counter]", None),
            ("'not valid('", None),
        ],
    )
    def test_annotation_name(self, annotation, expected):
        node = ast.parse(annotation, mode="eval").body

        assert annotation_name(node) == expected
