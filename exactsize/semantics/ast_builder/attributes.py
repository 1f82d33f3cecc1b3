"""`#[codec(...)]` attribute recognition.

Turns attribute trees into field modifiers (skip / compact / encoded_as) or a
variant skip flag. Every recognized modifier is kept, even when a field ends
up with several of them: exclusivity is checked by the exact-size pass, which
reports the conflict at the field.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Optional

from lark import Tree, Token, UnexpectedInput

from exactsize.internals.report import Reporter, Span, span_of
from exactsize.internals import errors as er
from exactsize.internals.errors import ERR
from exactsize.semantics.shapes import FieldModifier
from exactsize.semantics.typesys import GenericType

if TYPE_CHECKING:
    from exactsize.semantics.ast_builder.builder import SchemaBuilder

CODEC = "codec"
FIELD_KEYS = frozenset({"skip", "compact", "encoded_as", "index"})
VARIANT_KEYS = frozenset({"skip", "index"})
# `<T as HasCompact>::Type` is the compact encoding of T
COMPACT_PATH = ("HasCompact", "Type")


@dataclass
class AttrArg:
    key: str
    value: Optional[Token]
    span: Optional[Span]


@dataclass
class FieldAttributes:
    modifiers: List[FieldModifier] = field(default_factory=list)


@dataclass
class VariantAttributes:
    skipped: bool = False
    index: Optional[int] = None


def codec_args(attributes: Iterable[Tree]) -> List[AttrArg]:
    """All arguments of `#[codec(...)]` attributes, in source order.

    Attributes other than `codec` (e.g. `#[allow(dead_code)]`) are ignored.
    """
    args: List[AttrArg] = []
    for attr in attributes:
        name_tok = attr.children[0]
        if str(name_tok) != CODEC:
            continue
        for arg in attr.children[1:]:
            if not isinstance(arg, Tree) or arg.data != "attr_arg":
                continue
            key_tok = arg.children[0]
            value = arg.children[1] if len(arg.children) > 1 else None
            args.append(AttrArg(str(key_tok), value, span_of(arg)))
    return args


def _string_value(tok: Token) -> str:
    return str(tok)[1:-1].replace('\\"', '"').replace("\\\\", "\\")


def parse_field_attributes(attributes: Iterable[Tree], builder: 'SchemaBuilder',
                           reporter: Reporter) -> FieldAttributes:
    result = FieldAttributes()
    for arg in codec_args(attributes):
        if arg.key not in FIELD_KEYS:
            er.emit(reporter, ERR.SZ0103, arg.span, name=arg.key)
            continue

        if arg.key in ("skip", "compact"):
            if arg.value is not None:
                er.emit(reporter, ERR.SZ0104, arg.span, name=arg.key, reason="takes no value")
                continue
            if arg.key == "skip":
                result.modifiers.append(FieldModifier.skip(arg.span))
            else:
                result.modifiers.append(FieldModifier.compact(arg.span))

        elif arg.key == "encoded_as":
            alternate = _parse_encoded_as(arg, builder, reporter)
            if alternate is not None:
                result.modifiers.append(FieldModifier.encoded_as(alternate, arg.span))

        elif arg.key == "index":
            _check_index(arg, reporter)

    return result


def parse_variant_attributes(attributes: Iterable[Tree], reporter: Reporter) -> VariantAttributes:
    result = VariantAttributes()
    for arg in codec_args(attributes):
        if arg.key in FIELD_KEYS and arg.key not in VARIANT_KEYS:
            er.emit(reporter, ERR.SZ0105, arg.span, name=arg.key)
        elif arg.key not in VARIANT_KEYS:
            er.emit(reporter, ERR.SZ0103, arg.span, name=arg.key)
        elif arg.key == "skip":
            if arg.value is not None:
                er.emit(reporter, ERR.SZ0104, arg.span, name=arg.key, reason="takes no value")
            else:
                result.skipped = True
        else:
            result.index = _check_index(arg, reporter)
    return result


def _parse_encoded_as(arg: AttrArg, builder: 'SchemaBuilder', reporter: Reporter):
    from exactsize.internals.parser import parse_encoded_type

    if arg.value is None or arg.value.type != "STRING":
        er.emit(reporter, ERR.SZ0104, arg.span, name=arg.key, reason="expected a quoted type")
        return None
    text = _string_value(arg.value)
    try:
        tree = parse_encoded_type(text)
    except UnexpectedInput:
        er.emit(reporter, ERR.SZ0104, arg.span, name=arg.key, reason=f"'{text}' is not a type")
        return None

    node = tree.children[0]
    if node.data != "qualified_type":
        return builder.type_parser.parse(node)

    inner, trait, assoc = node.children
    if (str(trait), str(assoc)) != COMPACT_PATH:
        er.emit(reporter, ERR.SZ0104, arg.span, name=arg.key,
                reason=f"'{text}' is not supported, only `<T as HasCompact>::Type`")
        return None
    return GenericType("Compact", (builder.type_parser.parse(inner),))


def _check_index(arg: AttrArg, reporter: Reporter) -> Optional[int]:
    if arg.value is None or arg.value.type != "INT":
        er.emit(reporter, ERR.SZ0104, arg.span, name=arg.key, reason="expected an integer")
        return None
    index = int(arg.value)
    if index > 255:
        er.emit(reporter, ERR.SZ0104, arg.span, name=arg.key, reason=f"{index} does not fit in one byte")
        return None
    return index
