"""Lark parser setup and schema construction."""
from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from lark import Lark, UnexpectedInput, Tree

from exactsize.internals.report import Reporter
from exactsize.semantics.ast_builder import SchemaBuilder
from exactsize.semantics.shapes import Schema

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"


@lru_cache(maxsize=1)
def get_parser() -> Lark:
    """Build the LALR parser once; it accepts whole schemas and `encoded_as` values."""
    return Lark.open(
        str(GRAMMAR_PATH),
        start=["schema", "encoded_type"],
        parser="lalr",
        propagate_positions=True,
        maybe_placeholders=False,
    )


def improve_parse_error(e: UnexpectedInput) -> str:
    """Improve parsing error messages for common cases."""
    error_text = str(e).strip()
    first_line = error_text.splitlines()[0] if error_text else "unexpected input"

    expected = getattr(e, "expected", None) or getattr(e, "allowed", None) or set()
    if "SEMICOLON" in expected and "LBRACE" not in expected:
        return f"{first_line}\nHint: tuple and unit structs end with ';' (e.g. 'struct Pair(u32, u64);')"
    if "COMMA" in expected and ("RBRACE" in expected or "RPAR" in expected):
        return f"{first_line}\nHint: separate fields and variants with ','"

    return first_line


def parse_tree(src: str, dump_parse: bool = False) -> Tree:
    tree = get_parser().parse(src, start="schema")
    if dump_parse:
        print(tree.pretty())
    return tree


def parse_encoded_type(text: str) -> Tree:
    """Parse the value of `encoded_as`: a type or a `<T as Trait>::Name` path."""
    return get_parser().parse(text, start="encoded_type")


def parse_to_schema(src: str, filename: str = "<input>", dump_parse: bool = False) -> Schema:
    """Parse schema source into declarations.

    Raises:
        lark.UnexpectedInput: The source does not parse.
    """
    tree = parse_tree(src, dump_parse=dump_parse)
    return SchemaBuilder(filename=filename).build(tree)


_LOCATION_SUFFIX = re.compile(r",?\s*at line \d+,? col(?:umn)? \d+\.?\s*$")


def syntax_message(e: UnexpectedInput) -> str:
    """Single-line description of a parse failure for the diagnostic header."""
    first = improve_parse_error(e).splitlines()[0]
    return _LOCATION_SUFFIX.sub("", first)


def parse_or_report(src: str, reporter: Reporter, dump_parse: bool = False):
    """Parse `src`, reporting syntax errors through `reporter`.

    Returns:
        The Schema, or None if parsing failed.
    """
    from exactsize.internals.parse_errors import handle_parse_exception

    try:
        return parse_to_schema(src, filename=reporter.filename, dump_parse=dump_parse)
    except UnexpectedInput as exc:
        handle_parse_exception(exc, reporter)
        return None
