"""Enum definition and variant parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, List

from lark import Tree

from exactsize.internals.report import Reporter, span_of
from exactsize.semantics.shapes import EnumShape, Variant, TypeDecl
from exactsize.semantics.ast_builder.attributes import parse_variant_attributes
from exactsize.semantics.ast_builder.declarations.structs import parse_fields
from exactsize.semantics.ast_builder.utils.tree_navigation import first_name, first_tree, trees

if TYPE_CHECKING:
    from exactsize.semantics.ast_builder.builder import SchemaBuilder


def parse_enumdef(t: Tree, builder: 'SchemaBuilder') -> TypeDecl:
    """Parse enum_def: attribute* "enum" NAME variant_list"""
    assert t.data == "enum_def"

    name_tok = first_name(t.children)
    if name_tok is None:
        raise NotImplementedError("enum_def: missing enum NAME")

    reporter = builder.local_reporter()
    variant_list = first_tree(t.children, "variant_list")
    variants: List[Variant] = []
    if variant_list is not None:
        variants = [parse_enumvariant(ch, builder, reporter) for ch in trees(variant_list.children, "variant")]

    shape = EnumShape(
        variants=tuple(variants),
        variants_loc=span_of(variant_list),
    )
    return TypeDecl(str(name_tok), shape, loc=span_of(name_tok), diagnostics=tuple(reporter.items))


def parse_enumvariant(t: Tree, builder: 'SchemaBuilder', reporter: Reporter) -> Variant:
    """Parse variant: attribute* NAME [named_fields | tuple_fields]"""
    assert t.data == "variant"

    name_tok = first_name(t.children)
    if name_tok is None:
        raise NotImplementedError("variant: missing variant NAME")

    attrs = parse_variant_attributes(trees(t.children, "attribute"), reporter)
    fields_node = first_tree(t.children, "named_fields") or first_tree(t.children, "tuple_fields")

    return Variant(
        name=str(name_tok),
        fields=tuple(parse_fields(fields_node, builder, reporter)),
        skipped=attrs.skipped,
        loc=span_of(t),
    )
