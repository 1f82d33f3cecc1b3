"""Small helpers for walking Lark parse trees."""
from __future__ import annotations
from typing import Iterable, Iterator, Optional

from lark import Tree, Token


def first_name(children: Iterable) -> Optional[Token]:
    """First NAME token among direct children."""
    for ch in children:
        if isinstance(ch, Token) and ch.type == "NAME":
            return ch
    return None


def first_tree(children: Iterable, data: str) -> Optional[Tree]:
    """First direct child subtree with the given rule name."""
    for ch in children:
        if isinstance(ch, Tree) and ch.data == data:
            return ch
    return None


def trees(children: Iterable, data: str) -> Iterator[Tree]:
    """All direct child subtrees with the given rule name, in order."""
    for ch in children:
        if isinstance(ch, Tree) and ch.data == data:
            yield ch


def first_token(children: Iterable, type_: str) -> Optional[Token]:
    for ch in children:
        if isinstance(ch, Token) and ch.type == type_:
            return ch
    return None
