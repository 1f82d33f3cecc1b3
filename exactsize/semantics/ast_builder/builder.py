"""SchemaBuilder: turns Lark parse trees into declared-type shapes.

The builder delegates to specialized parsers:

- Type parsing: semantics.ast_builder.types
- Declaration parsing: semantics.ast_builder.declarations
- Attribute recognition: semantics.ast_builder.attributes

Attribute problems are collected per declaration and attached to the
TypeDecl, so the exact-size pass reports them together with its own
findings for that type.
"""
from __future__ import annotations
from typing import List

from lark import Tree

from exactsize.internals.report import Reporter
from exactsize.semantics.shapes import Schema, TypeDecl


class SchemaBuilder:
    def __init__(self, filename: str = "<input>"):
        """Initialize SchemaBuilder with a lazy-loaded type parser."""
        self.filename = filename
        self._type_parser = None

    @property
    def type_parser(self):
        """Lazy-load TypeParser on first use."""
        if self._type_parser is None:
            from exactsize.semantics.ast_builder.types.parser import TypeParser
            self._type_parser = TypeParser()
        return self._type_parser

    def local_reporter(self) -> Reporter:
        """Fresh reporter for one declaration's front-end diagnostics."""
        return Reporter(filename=self.filename)

    def build(self, tree: Tree) -> Schema:
        """Build a Schema from the parse tree, keeping declaration order."""
        from exactsize.semantics.ast_builder.declarations import structs, enums

        assert isinstance(tree, Tree) and tree.data == "schema"
        decls: List[TypeDecl] = []

        for node in tree.children:
            if not isinstance(node, Tree):
                continue
            if node.data == "struct_def":
                decls.append(structs.parse_structdef(node, self))
            elif node.data == "enum_def":
                decls.append(enums.parse_enumdef(node, self))
            elif node.data == "union_def":
                decls.append(structs.parse_uniondef(node, self))
            else:
                raise NotImplementedError(f"schema: unexpected declaration '{node.data}'")

        return Schema(decls=tuple(decls), filename=self.filename)
