"""Exact encoded sizes of builtin types.

This is the single source of truth for the byte width of everything that is
not declared in the schema. User declarations are sized by the exact-size
pass, which calls back into `TypeSizer` through the `lookup` hook.
"""
from __future__ import annotations
from typing import Callable, Optional

from exactsize.semantics.typesys import (
    Type, BuiltinType, UnitType, TupleType, ArrayType, GenericType, NamedType,
    VARIABLE_CONTAINERS, TRANSPARENT_WRAPPERS,
)
from exactsize.internals.errors import raise_internal_error

SizeResult = Optional[int]

BUILTIN_SIZES: dict[BuiltinType, SizeResult] = {
    BuiltinType.U8: 1,
    BuiltinType.I8: 1,
    BuiltinType.BOOL: 1,
    BuiltinType.U16: 2,
    BuiltinType.I16: 2,
    BuiltinType.U32: 4,
    BuiltinType.I32: 4,
    BuiltinType.F32: 4,
    BuiltinType.CHAR: 4,  # encoded as its u32 code point
    BuiltinType.U64: 8,
    BuiltinType.I64: 8,
    BuiltinType.F64: 8,
    BuiltinType.U128: 16,
    BuiltinType.I128: 16,
    BuiltinType.STR: None,
    BuiltinType.STRING: None,
}


def is_compactable(ty: Type) -> bool:
    """Whether `ty` has a compact (variable-width) representation."""
    if isinstance(ty, UnitType):
        return True
    return isinstance(ty, BuiltinType) and ty.is_unsigned


class TypeSizer:
    """Computes exact sizes of type expressions.

    `lookup` resolves a user declaration to its SizeResult. Unknown names and
    non-compactable types are reported by validation before sizing runs, so
    here they simply have no fixed size.
    """

    def __init__(self, lookup: Callable[[str], SizeResult]) -> None:
        self.lookup = lookup

    def size_of(self, ty: Type) -> SizeResult:
        if isinstance(ty, BuiltinType):
            return BUILTIN_SIZES[ty]
        if isinstance(ty, UnitType):
            return 0
        if isinstance(ty, NamedType):
            return self.lookup(ty.name)
        if isinstance(ty, ArrayType):
            element = self.size_of(ty.base_type)
            return None if element is None else element * ty.size
        if isinstance(ty, TupleType):
            total = 0
            for element_type in ty.elements:
                part = self.size_of(element_type)
                if part is None:
                    return None
                total += part
            return total
        if isinstance(ty, GenericType):
            return self._generic_size(ty)
        raise_internal_error("SZ9002", node=type(ty).__name__)

    def compact_size_of(self, ty: Type) -> SizeResult:
        """Size of the compact representation of `ty`."""
        if isinstance(ty, UnitType):
            return 0
        # Compact integers are 1, 2, 4 or 5+ bytes depending on the value
        return None

    def _generic_size(self, ty: GenericType) -> SizeResult:
        if len(ty.args) == 0 or ty.name in VARIABLE_CONTAINERS:
            return None
        if ty.name in TRANSPARENT_WRAPPERS:
            return self.size_of(ty.args[0])
        if ty.name == "PhantomData":
            return 0
        if ty.name == "Compact":
            return self.compact_size_of(ty.args[0])
        return None
