"""Struct, union and field parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional

from lark import Tree

from exactsize.internals.report import Reporter, span_of
from exactsize.semantics.shapes import FieldDescriptor, StructShape, UnionShape, TypeDecl
from exactsize.semantics.ast_builder.attributes import parse_field_attributes
from exactsize.semantics.ast_builder.types.parser import is_type_node
from exactsize.semantics.ast_builder.utils.tree_navigation import first_name, first_tree, trees

if TYPE_CHECKING:
    from exactsize.semantics.ast_builder.builder import SchemaBuilder


def parse_structdef(t: Tree, builder: 'SchemaBuilder') -> TypeDecl:
    """Parse struct_def: attribute* "struct" NAME (named_fields | tuple_fields ";" | ";")"""
    assert t.data == "struct_def"

    name_tok = first_name(t.children)
    if name_tok is None:
        raise NotImplementedError("struct_def: missing struct NAME")

    reporter = builder.local_reporter()
    fields_node = first_tree(t.children, "named_fields") or first_tree(t.children, "tuple_fields")
    fields = parse_fields(fields_node, builder, reporter) if fields_node is not None else []

    shape = StructShape(
        fields=tuple(fields),
        fields_loc=span_of(fields_node) if fields_node is not None else None,
    )
    return TypeDecl(str(name_tok), shape, loc=span_of(name_tok), diagnostics=tuple(reporter.items))


def parse_uniondef(t: Tree, builder: 'SchemaBuilder') -> TypeDecl:
    """Parse union_def: attribute* "union" NAME named_fields"""
    assert t.data == "union_def"

    name_tok = first_name(t.children)
    if name_tok is None:
        raise NotImplementedError("union_def: missing union NAME")

    reporter = builder.local_reporter()
    fields = parse_fields(first_tree(t.children, "named_fields"), builder, reporter)
    return TypeDecl(str(name_tok), UnionShape(tuple(fields)), loc=span_of(name_tok),
                    diagnostics=tuple(reporter.items))


def parse_fields(t: Optional[Tree], builder: 'SchemaBuilder', reporter: Reporter) -> List[FieldDescriptor]:
    """Parse named_fields or tuple_fields into descriptors, in declaration order."""
    if t is None:
        return []
    if t.data == "named_fields":
        return [parse_field(ch, builder, reporter) for ch in trees(t.children, "named_field")]
    if t.data == "tuple_fields":
        return [parse_field(ch, builder, reporter) for ch in trees(t.children, "tuple_field")]
    raise NotImplementedError(f"unexpected field list node '{t.data}'")


def parse_field(t: Tree, builder: 'SchemaBuilder', reporter: Reporter) -> FieldDescriptor:
    """Parse named_field: attribute* NAME ":" type, or tuple_field: attribute* type"""
    type_node = next((ch for ch in t.children if is_type_node(ch)), None)
    if type_node is None:
        raise NotImplementedError(f"{t.data}: missing field type")

    name_tok = first_name(t.children) if t.data == "named_field" else None
    attrs = parse_field_attributes(trees(t.children, "attribute"), builder, reporter)

    return FieldDescriptor(
        declared_type=builder.type_parser.parse(type_node),
        modifiers=tuple(attrs.modifiers),
        name=str(name_tok) if name_tok is not None else None,
        loc=span_of(t),
    )
