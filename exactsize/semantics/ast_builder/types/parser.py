"""Type expression parsing: parse-tree type nodes to typesys types."""
from __future__ import annotations
from typing import List

from lark import Tree, Token

from exactsize.internals.errors import raise_internal_error
from exactsize.semantics.typesys import (
    Type, UNIT, TupleType, ArrayType, type_from_name,
)
from exactsize.semantics.ast_builder.utils.tree_navigation import first_token

TYPE_NODE_NAMES = frozenset({"path_type", "array_type", "tuple_type"})


def is_type_node(node) -> bool:
    return isinstance(node, Tree) and node.data in TYPE_NODE_NAMES


class TypeParser:
    """Converts `path_type` / `array_type` / `tuple_type` trees to types."""

    def parse(self, t: Tree) -> Type:
        if t.data == "path_type":
            return self._parse_path(t)
        if t.data == "array_type":
            return self._parse_array(t)
        if t.data == "tuple_type":
            return self._parse_tuple(t)
        raise_internal_error("SZ9002", node=t.data)

    def _parse_path(self, t: Tree) -> Type:
        """path_type: NAME ["<" type ("," type)* ">"]"""
        name_tok = t.children[0]
        assert isinstance(name_tok, Token) and name_tok.type == "NAME"
        args = tuple(self.parse(ch) for ch in t.children[1:] if is_type_node(ch))
        return type_from_name(str(name_tok), args)

    def _parse_array(self, t: Tree) -> Type:
        """array_type: "[" type ";" INT "]" """
        element = next(ch for ch in t.children if is_type_node(ch))
        length = first_token(t.children, "INT")
        return ArrayType(self.parse(element), int(length))

    def _parse_tuple(self, t: Tree) -> Type:
        """tuple_type: "(" ")" | "(" type ("," type)* ")" """
        elements: List[Type] = [self.parse(ch) for ch in t.children if is_type_node(ch)]
        if not elements:
            return UNIT
        return TupleType(tuple(elements))
